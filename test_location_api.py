"""Unit tests for the location search fetcher."""

from unittest.mock import patch
from urllib.parse import parse_qsl, urlsplit

import pytest
import requests

from location_api import LocationFetcher, fetch_locations
from weather_service import MissingParameterError, WeatherServiceRequestError


@pytest.fixture(autouse=True)
def no_env_api_key(monkeypatch):
    monkeypatch.delenv("WWO_API_KEY", raising=False)


def test_query_parameters(make_session, search_xml):
    session = make_session(body=search_xml)

    LocationFetcher(api_key="secret", query="Springfield", num_results=5, session=session).fetch()

    url, kwargs = session.calls[-1]
    assert parse_qsl(urlsplit(url).query) == [
        ("q", "Springfield"),
        ("timezone", "yes"),
        ("format", "xml"),
        ("num_of_results", "5"),
        ("key", "secret"),
    ]
    assert kwargs["stream"] is True


def test_search_success(make_session, search_xml, rate_limit_headers):
    result = LocationFetcher(api_key="secret", query="Springfield",
                             session=make_session(body=search_xml, headers=rate_limit_headers)).fetch()

    assert result.success
    assert [location.region for location in result.location.locations] == ["Illinois", "Missouri"]
    assert result.weather is None
    assert result.requests_per_second == 4


def test_search_error_envelope_on_failing_status(make_session, error_xml):
    result = LocationFetcher(api_key="secret", query="Xyzzy",
                             session=make_session(status_code=400, reason="Bad Request", body=error_xml)).fetch()

    assert not result.success
    assert result.error.message == "400 Bad Request"
    assert result.error.detail == "Unable to find any matching weather location to the query submitted!"


def test_search_error_envelope_on_ok_status(make_session, error_xml):
    result = LocationFetcher(api_key="secret", query="Xyzzy", session=make_session(body=error_xml)).fetch()

    assert result.error.kind == "API Error"
    assert result.location is None


def test_missing_query_fails_before_request(make_session):
    session = make_session()

    with pytest.raises(MissingParameterError, match="Query"):
        LocationFetcher(api_key="secret", session=session).fetch()

    assert session.calls == []


def test_missing_api_key_fails_before_request(make_session):
    session = make_session()

    with pytest.raises(MissingParameterError):
        LocationFetcher(query="Springfield", session=session).fetch()

    assert session.calls == []


def test_invalid_num_results():
    with pytest.raises(ValueError):
        LocationFetcher(api_key="secret", query="Springfield", num_results=0)


def test_fetch_locations_connection_refused():
    with patch("requests.get", side_effect=requests.exceptions.ConnectionError("Connection refused")):
        with pytest.raises(WeatherServiceRequestError):
            fetch_locations("Springfield", api_key="secret")
