"""Custom exception hierarchy for the World Weather Online client.

Only two kinds of failure are raised out of a fetch: input validation
errors (the caller forgot the API key or the location) and transport
faults (the request never completed). Everything else the API can do
wrong is reported inside the returned FetchResult as an ErrorReport.

Example:
    try:
        result = fetch_weather("London")
    except WeatherServiceRequestError as e:
        logger.error(f"Could not reach World Weather Online: {e!r}")
"""

import requests


class WeatherServiceError(Exception):
    """Base class for any exception raised by the weather client.

        Catching this exception will intercept any error specifically defined
        within this library, regardless of which endpoint raised it.
    """
    pass


class MissingParameterError(WeatherServiceError, ValueError):
    """Raised before any network activity when a required input (API key, location, query) is not set."""
    pass


class WeatherParseError(WeatherServiceError):
    """Raised when a response body is not a well formed document of the expected shape.

        Covers malformed or truncated XML, an unknown root element and field
        values that cannot be converted to their numeric, date or time type.
        The fetch layer turns this into an ErrorReport rather than letting it escape.
    """
    pass


class WeatherServiceRequestError(WeatherServiceError):
    """Raised when a network or protocol-level error occurs during an API request.

        Attributes:
            error: The underlying requests exception that triggered this error.
    """
    def __init__(self, error: requests.exceptions.RequestException):
        """Initializes the error with the original requests exception.

                Args:
                    error: The source RequestException (ConnectionError, Timeout, ...).
        """
        super().__init__(str(error))
        self.error = error

    def __repr__(self):
        """Returns a string representation of the WeatherServiceRequestError instance, including the wrapped error."""
        return f"{self.__class__.__name__}({repr(self.error)})"
