"""Request/response cycle shared by the weather and location fetchers.

execute_fetch turns one GET into one FetchResult. Only a transport fault
escapes as an exception (WeatherServiceRequestError). A failing HTTP status,
the API's error envelope and an unparseable body all come back as the
result's ErrorReport, so callers check result.success for anything the API
did wrong and catch exceptions only for connectivity problems.
"""

import logging
from typing import Iterable, Optional, Union

import requests

import utils
from reports import ErrorReport, FetchResult, LocationReport, Report, WeatherReport
from weather_service import WeatherParseError, WeatherServiceRequestError
from xml_parser import ErrorParser

logger = logging.getLogger(__name__)

REQUESTS_PER_SECOND_HEADER = "x-apiaxleproxy-qps-left"
REQUESTS_PER_DAY_HEADER = "x-apiaxleproxy-qpd-left"

DOWNLOAD_FAILURE = "Download Failure"
CHUNK_SIZE = 8192

# FetchResult field that holds each kind of report
_RESULT_FIELDS = {
    WeatherReport: "weather",
    LocationReport: "location",
    ErrorReport: "error",
}


def _read_body(response: requests.Response) -> Union[bytes, Iterable[bytes]]:
    """Returns the response body as a stream of chunks, or as a whole when debug logging wants to dump it."""
    chunks = response.iter_content(chunk_size=CHUNK_SIZE)
    if not logger.isEnabledFor(logging.DEBUG):
        return chunks
    data = b"".join(chunks)
    logger.debug("Received body\n------\n%s\n------", data.decode("utf-8", errors="replace"))
    return data


def _status_error(response: requests.Response, parse_error_envelope: bool) -> ErrorReport:
    """Builds the ErrorReport for a non-200 response.

        The status line is always the message. Where the endpoint sends its
        error envelope with a failing status, the envelope's text is added as
        the report's detail. It never replaces the status message.
    """
    message = f"{response.status_code} {response.reason or ''}".strip()
    detail = None
    if parse_error_envelope:
        try:
            envelope = ErrorParser().parse(_read_body(response))
        except (WeatherParseError, requests.exceptions.RequestException) as e:
            logger.warning(f"Could not read error message from {response.status_code} response: {e}")
        else:
            detail = envelope.message if envelope is not None else None
    return ErrorReport(kind=DOWNLOAD_FAILURE, message=message, detail=detail)


def _read_report(response: requests.Response, parser, parse_error_envelope: bool) -> Report:
    if response.status_code != 200:
        return _status_error(response, parse_error_envelope)
    try:
        return parser.parse(_read_body(response))
    except WeatherParseError as e:
        logger.debug(f"Response body could not be parsed: {e}")
        return ErrorReport.from_exception(e)


def execute_fetch(url: str, loggable_url: str, parser, session: Optional[requests.Session] = None,
                  timeout: Optional[float] = None, parse_error_envelope: bool = False) -> FetchResult:
    """Fetches a URL and packages the parsed body and rate-limit headers into a FetchResult.

        Args:
            url: The URL to fetch, including the real API key.
            loggable_url: The same URL with the API key hidden, used for logging.
            parser: A WeatherParser or LocationParser for successful responses.
            session: An optional requests.Session to send the request through.
                Defaults to the requests module itself.
            timeout: Passed through to requests. None waits indefinitely.
            parse_error_envelope: Whether non-200 bodies carry the API's error
                envelope and should be read for extra detail.

        Returns:
            A FetchResult holding exactly one of the parser's report or an ErrorReport.
            requests_per_second and requests_per_day are -1 when their header is missing.

        Raises:
            WeatherServiceRequestError: If the connection fails, times out or
                is interrupted while the body is being read.
    """
    http = session if session is not None else requests
    logger.debug(f"Fetching URL {loggable_url}")
    try:
        with http.get(url, stream=True, timeout=timeout) as response:
            logger.debug(f"Response {response.status_code} {response.reason}")
            requests_per_second = utils.get_int_from_header(response.headers, REQUESTS_PER_SECOND_HEADER)
            requests_per_day = utils.get_int_from_header(response.headers, REQUESTS_PER_DAY_HEADER)
            report = _read_report(response, parser, parse_error_envelope)
    except requests.exceptions.RequestException as e:
        raise WeatherServiceRequestError(e) from e

    return FetchResult(**{_RESULT_FIELDS[type(report)]: report},
                       requests_per_second=requests_per_second,
                       requests_per_day=requests_per_day)
