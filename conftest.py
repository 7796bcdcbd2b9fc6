"""Shared fixtures: canned World Weather Online documents and a fake HTTP layer.

The fake session stands in for requests (or a requests.Session) so that no
test touches the network. Responses stream their body in small chunks to
exercise the parsers across chunk boundaries.
"""

import pytest
from requests.structures import CaseInsensitiveDict

WEATHER_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<data>
  <request><type>City</type><query>London, United Kingdom</query></request>
  <time_zone><localtime>2015-05-01 14:23</localtime><utcOffset>1.0</utcOffset></time_zone>
  <current_condition>
    <observation_time>01:12 PM</observation_time>
    <temp_C>14</temp_C>
    <temp_F>57</temp_F>
    <weatherCode>116</weatherCode>
    <weatherIconUrl><![CDATA[http://cdn.worldweatheronline.net/images/wsymbol_0002_sunny_intervals.png]]></weatherIconUrl>
    <weatherDesc><![CDATA[Partly Cloudy ]]></weatherDesc>
    <windspeedMiles>11</windspeedMiles>
    <windspeedKmph>17</windspeedKmph>
    <winddirDegree>240</winddirDegree>
    <winddir16Point>WSW</winddir16Point>
    <precipMM>0.1</precipMM>
    <humidity>55</humidity>
    <visibility>10</visibility>
    <pressure>1008</pressure>
    <cloudcover>50</cloudcover>
    <FeelsLikeC>12</FeelsLikeC>
    <FeelsLikeF>54</FeelsLikeF>
  </current_condition>
  <nearest_area>
    <areaName><![CDATA[London]]></areaName>
    <country><![CDATA[United Kingdom]]></country>
    <region><![CDATA[City of London, Greater London]]></region>
    <latitude>51.517</latitude>
    <longitude>-0.106</longitude>
    <population>7421228</population>
    <weatherUrl><![CDATA[http://www.worldweatheronline.com/v2/weather.aspx?q=51.5171,-0.1062]]></weatherUrl>
  </nearest_area>
  <weather>
    <date>2015-05-01</date>
    <astronomy>
      <sunrise>05:33 AM</sunrise>
      <sunset>08:24 PM</sunset>
      <moonrise>04:47 PM</moonrise>
      <moonset>04:05 AM</moonset>
    </astronomy>
    <maxtempC>15</maxtempC>
    <maxtempF>59</maxtempF>
    <mintempC>7</mintempC>
    <mintempF>45</mintempF>
    <uvIndex>4</uvIndex>
    <hourly>
      <time>0</time>
      <tempC>9</tempC>
      <tempF>48</tempF>
      <weatherCode>113</weatherCode>
      <weatherDesc><![CDATA[Clear]]></weatherDesc>
      <chanceofrain>0</chanceofrain>
      <UTCdate>2015-04-30</UTCdate>
      <UTCtime>2300</UTCtime>
    </hourly>
    <hourly>
      <time>1200</time>
      <tempC>15</tempC>
      <tempF>59</tempF>
      <weatherCode>353</weatherCode>
      <weatherDesc><![CDATA[Light rain shower]]></weatherDesc>
      <precipMM>0.4</precipMM>
      <chanceofrain>64</chanceofrain>
      <UTCdate>2015-05-01</UTCdate>
      <UTCtime>1100</UTCtime>
    </hourly>
  </weather>
  <weather>
    <date>2015-05-02</date>
    <astronomy>
      <sunrise>05:31 AM</sunrise>
      <sunset>08:26 PM</sunset>
      <moonrise>05:51 PM</moonrise>
      <moonset>No moonset</moonset>
    </astronomy>
    <maxtempC>17</maxtempC>
    <mintempC>8</mintempC>
  </weather>
</data>
"""

SEARCH_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<search_api>
  <result>
    <areaName><![CDATA[Springfield]]></areaName>
    <country><![CDATA[United States of America]]></country>
    <region><![CDATA[Illinois]]></region>
    <latitude>39.802</latitude>
    <longitude>-89.644</longitude>
    <population>116565</population>
    <weatherUrl><![CDATA[http://www.worldweatheronline.com/v2/weather.aspx?q=39.8017,-89.6436]]></weatherUrl>
    <timezone><offset>-5.0</offset></timezone>
  </result>
  <result>
    <areaName><![CDATA[Springfield]]></areaName>
    <country><![CDATA[United States of America]]></country>
    <region><![CDATA[Missouri]]></region>
    <latitude>37.215</latitude>
    <longitude>-93.298</longitude>
    <population>0</population>
    <timezone><offset>-5.0</offset></timezone>
  </result>
</search_api>
"""

ERROR_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<data><error><msg>Unable to find any matching weather location to the query submitted!</msg></error></data>
"""

RATE_LIMIT_HEADERS = {"x-apiaxleproxy-qps-left": "4", "x-apiaxleproxy-qpd-left": "199"}


class FakeResponse:
    """Mimics the parts of requests.Response the fetcher uses."""

    def __init__(self, status_code=200, body=b"", headers=None, reason="OK", chunk_size=64, error=None):
        self.status_code = status_code
        self.reason = reason
        self.headers = CaseInsensitiveDict(headers or {})
        self.body = body
        self.chunk_size = chunk_size
        self.error = error
        self.body_read = False
        self.closed = False

    def iter_content(self, chunk_size=1):
        self.body_read = True
        for i in range(0, len(self.body), self.chunk_size):
            if self.error is not None:
                raise self.error
            yield self.body[i:i + self.chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.closed = True


class FakeSession:
    """Mimics requests.Session.get, recording each call."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def make_session():
    """Factory fixture: make_session(status_code=200, body=b"...", headers={...}) -> FakeSession."""
    def factory(status_code=200, body=b"", headers=None, reason="OK", error=None, body_error=None):
        response = FakeResponse(status_code=status_code, body=body, headers=headers, reason=reason,
                                error=body_error)
        return FakeSession(response=response, error=error)
    return factory


@pytest.fixture
def weather_xml():
    return WEATHER_XML


@pytest.fixture
def search_xml():
    return SEARCH_XML


@pytest.fixture
def error_xml():
    return ERROR_XML


@pytest.fixture
def rate_limit_headers():
    return dict(RATE_LIMIT_HEADERS)
