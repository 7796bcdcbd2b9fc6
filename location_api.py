"""World Weather Online location search endpoint.

Looks up places matching free text (a town name, a postcode, ...) so that
callers can offer a choice before asking for the weather. The search
endpoint sends its error envelope with a failing HTTP status as well, so
non-200 responses are read for the API's own message.
"""

import os
from typing import Optional

import requests

import utils
from fetcher import execute_fetch
from reports import FetchResult
from weather_service import MissingParameterError
from xml_parser import LocationParser

SEARCH_ENDPOINT = os.getenv("WWO_SEARCH_ENDPOINT", "https://api.worldweatheronline.com/free/v2/search.ashx")


class LocationFetcher:
    """Searches for locations matching a query.

        Attributes:
            api_key: World Weather Online API key. Falls back to WWO_API_KEY at fetch time.
            query: Free text to search for.
            num_results: Maximum number of matches to return.
            session: Optional requests.Session for connection reuse.
            timeout: Request timeout in seconds, passed through to requests.
    """

    def __init__(self, api_key: Optional[str] = None, query: Optional[str] = None, num_results: int = 3,
                 session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        if num_results < 1:
            raise ValueError("Number of results must be at least 1")
        self.api_key = api_key
        self.query = query
        self.num_results = num_results
        self.session = session
        self.timeout = timeout

    def __repr__(self):
        return f"{self.__class__.__name__}(query={self.query!r}, num_results={self.num_results!r})"

    def query_parameters(self) -> dict:
        """Returns the endpoint's query parameters, in order, without the API key."""
        return {
            "q": self.query,
            "timezone": "yes",
            "format": "xml",
            "num_of_results": str(self.num_results),
        }

    def fetch(self) -> FetchResult:
        """Runs the search.

            Returns:
                A FetchResult that either contains a LocationReport or an ErrorReport.

            Raises:
                MissingParameterError: If no API key or query is set. Nothing is sent.
                WeatherServiceRequestError: If there are network problems.
        """
        api_key = self.api_key or os.getenv("WWO_API_KEY")
        if not api_key:
            raise MissingParameterError("API key not set")
        if not self.query:
            raise MissingParameterError("Query not set")

        param = self.query_parameters()
        loggable_target = utils.assemble_url(SEARCH_ENDPOINT, *utils.flatten_map(utils.redact_parameters(param)))
        target = utils.assemble_url(SEARCH_ENDPOINT, *utils.flatten_map(param | {"key": api_key}))

        return execute_fetch(target, loggable_target, LocationParser(), session=self.session,
                             timeout=self.timeout, parse_error_envelope=True)


def fetch_locations(query: str, api_key: Optional[str] = None, **options) -> FetchResult:
    """Searches for locations matching a query in one call.

        Args:
            query: The text to search for (e.g., "Springfield").
            api_key: World Weather Online API key. Defaults to the WWO_API_KEY environment variable.
            **options: Any other LocationFetcher option (num_results, session, timeout).

        Returns:
            A FetchResult that either contains a LocationReport or an ErrorReport.
    """
    return LocationFetcher(api_key=api_key, query=query, **options).fetch()
