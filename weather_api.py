"""World Weather Online weather endpoint.

This module fetches current conditions and forecasts from the World Weather
Online v2 API (https://www.worldweatheronline.com/).

The module follows a clean separation of concerns:
    1. Request configuration via the WeatherFetcher class.
    2. Query assembly, with the API key hidden in the logged copy of the URL.
    3. The request itself, delegated to fetcher.execute_fetch.

Example:
    result = WeatherFetcher(api_key="...", location="London", num_of_days=2).fetch()
    if result.success:
        print(result.weather.current.temp_c)
    else:
        print(result.error.message)
"""

import os
from datetime import date as Date
from typing import Optional

import requests

import utils
from fetcher import execute_fetch
from reports import FetchResult
from weather_service import MissingParameterError
from xml_parser import WeatherParser

WEATHER_ENDPOINT = os.getenv("WWO_WEATHER_ENDPOINT", "https://api.worldweatheronline.com/free/v2/weather.ashx")

# Code that uses the api must display a link to the provider. This is how they recommend you format it.
BOILERPLATE = ('Powered by <a href="http://www.worldweatheronline.com/" title="Free Weather API" '
               'target="_blank">World Weather Online</a>')

FREQUENCIES = (3, 6, 12, 24)


class WeatherFetcher:
    """Fetches a weather report for one location with a fixed set of options.

        The options are set once when the fetcher is created. fetch() may be
        called any number of times, and each call is an independent request.

        Attributes:
            api_key: World Weather Online key for the v2 API. Falls back to the
                WWO_API_KEY environment variable at fetch time.
            location: A UK or Canadian postcode, US zip code, city name, IPv4
                address or 'latitude,longitude' pair. The API works out the type from context.
            language: ISO language code for human readable text. None leaves the API default (en).
            num_of_days: Number of forecast days to fetch.
            date: Date to fetch weather for. None means today.
            forecast: False means don't fetch any forecast information.
            current: False means don't fetch current conditions.
            frequency: Hours between forecast periods: 3, 6, 12 or 24.
            session: Optional requests.Session for connection reuse.
            timeout: Request timeout in seconds, passed through to requests.
    """

    def __init__(self, api_key: Optional[str] = None, location: Optional[str] = None,
                 language: Optional[str] = None, num_of_days: int = 3, date: Optional[Date] = None,
                 forecast: bool = True, current: bool = True, frequency: int = 3,
                 session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        """Initializes the fetcher and checks the option values.

                Raises:
                    ValueError: If num_of_days is negative or frequency isn't one of 3, 6, 12 or 24.
        """
        if num_of_days < 0:
            raise ValueError("Number of days must be positive")
        if frequency not in FREQUENCIES:
            raise ValueError(f"Frequency must be one of {FREQUENCIES} hours, got {frequency}")

        self.api_key = api_key
        self.location = location
        self.language = language
        self.num_of_days = num_of_days
        self.date = date
        self.forecast = forecast
        self.current = current
        self.frequency = frequency
        self.session = session
        self.timeout = timeout

    def __repr__(self) -> str:
        """Returns a string representation of the WeatherFetcher instance, without the API key."""
        return (
            f"{self.__class__.__name__}("
            f"location={self.location!r}, "
            f"language={self.language!r}, "
            f"num_of_days={self.num_of_days!r}, "
            f"date={self.date!r}, "
            f"forecast={self.forecast!r}, "
            f"current={self.current!r}, "
            f"frequency={self.frequency!r})"
        )

    def query_parameters(self) -> dict:
        """Returns the endpoint's query parameters, in order, without the API key."""
        param = {
            "q": self.location,
            "extra": "utcDateTime",
            "num_of_days": str(self.num_of_days),
            "tp": str(self.frequency),
            "format": "xml",
            "showlocaltime": "yes",
            "includelocation": "yes",
        }
        if self.date is not None:
            param["date"] = self.date.strftime("%Y-%m-%d")
        if self.language is not None:
            param["lang"] = self.language
        if not self.forecast:
            param["fx"] = "no"
        if not self.current:
            param["cc"] = "no"
        return param

    def fetch(self) -> FetchResult:
        """Fetches the weather report using the options set on this fetcher.

            Returns:
                A FetchResult that either contains a WeatherReport or an ErrorReport.

            Raises:
                MissingParameterError: If no API key or location is set. Nothing is sent.
                WeatherServiceRequestError: If there are network problems.
        """
        api_key = self.api_key or os.getenv("WWO_API_KEY")
        if not api_key:
            raise MissingParameterError("API key not set")
        if not self.location:
            raise MissingParameterError("Location not set")

        param = self.query_parameters()
        loggable_target = utils.assemble_url(WEATHER_ENDPOINT, *utils.flatten_map(utils.redact_parameters(param)))
        target = utils.assemble_url(WEATHER_ENDPOINT, *utils.flatten_map(param | {"key": api_key}))

        return execute_fetch(target, loggable_target, WeatherParser(), session=self.session, timeout=self.timeout)


def fetch_weather(location: str, api_key: Optional[str] = None, **options) -> FetchResult:
    """Fetches a weather report for a location in one call.

        Args:
            location: The location to query (e.g., "London" or "SW1A 1AA").
            api_key: World Weather Online API key. Defaults to the WWO_API_KEY environment variable.
            **options: Any other WeatherFetcher option (num_of_days, date, language, ...).

        Returns:
            A FetchResult that either contains a WeatherReport or an ErrorReport.
    """
    return WeatherFetcher(api_key=api_key, location=location, **options).fetch()
