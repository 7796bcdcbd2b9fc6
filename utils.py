from datetime import date, datetime, time
from typing import Any, Callable, List, Mapping, Optional
from urllib.parse import quote_plus

from weather_service import WeatherParseError

HIDDEN_API_KEY = "HIDDEN"


def assemble_url(base: str, *parameters: str) -> str:
    """Adds a form-encoded query string to a URL.

        Each name and value is encoded independently (space becomes '+'),
        and pairs keep the order they were given in.

        Args:
            base: The base url. Should be well formed, but that isn't checked.
            *parameters: A flat list of name, value, name, value, ...

        Returns:
            The URL ready to pass to requests.

        Raises:
            ValueError: If the parameters don't come in (name, value) pairs.

        Example:
            >>> assemble_url("http://example.com/a", "q", "New York", "format", "xml")
            'http://example.com/a?q=New+York&format=xml'
    """
    if len(parameters) % 2 != 0:
        raise ValueError("Parameters must come in (name, value) pairs")
    if not parameters:
        return base

    pairs = (f"{quote_plus(str(parameters[i]))}={quote_plus(str(parameters[i + 1]))}"
             for i in range(0, len(parameters), 2))
    return f"{base}?{'&'.join(pairs)}"


def flatten_map(mapping: Mapping[str, Any]) -> List[str]:
    """Turns a mapping into a flat [key, value, key, value, ...] list, in insertion order."""
    result = []
    for key, value in mapping.items():
        result.extend((key, value))
    return result


def redact_parameters(parameters: Mapping[str, Any], key: str = "key",
                      placeholder: str = HIDDEN_API_KEY) -> dict:
    """Returns a copy of the parameters with the credential replaced, for logging."""
    return {**parameters, key: placeholder}


def get_int_from_header(headers: Mapping[str, str], header_name: str) -> int:
    """Reads an integer response header, returning -1 when it is missing or not a number."""
    value = headers.get(header_name)
    if value is None:
        return -1
    try:
        return int(value.strip())
    except (TypeError, ValueError, AttributeError):
        return -1


def _convert(tag: str, text: Optional[str], converter: Callable[[str], Any]) -> Any:
    try:
        return converter(text.strip())
    except (TypeError, ValueError, AttributeError) as e:
        raise WeatherParseError(f"Can't parse <{tag}> value {text!r}: {e}") from e


def parse_int(tag: str, text: Optional[str]) -> int:
    return _convert(tag, text, int)


def parse_float(tag: str, text: Optional[str]) -> float:
    return _convert(tag, text, float)


def parse_text(tag: str, text: Optional[str]) -> str:
    return (text or "").strip()


def parse_date(tag: str, text: Optional[str]) -> date:
    """Parses an ISO 'YYYY-MM-DD' date."""
    return _convert(tag, text, lambda value: datetime.strptime(value, "%Y-%m-%d").date())


def parse_local_datetime(tag: str, text: Optional[str]) -> datetime:
    """Parses the 'YYYY-MM-DD HH:MM' local time sent in the time_zone block."""
    return _convert(tag, text, lambda value: datetime.strptime(value, "%Y-%m-%d %H:%M"))


def parse_clock_time(tag: str, text: Optional[str]) -> time:
    """Parses a 12 hour clock time such as '05:33 AM'."""
    return _convert(tag, text, lambda value: datetime.strptime(value, "%I:%M %p").time())


def parse_optional_clock_time(tag: str, text: Optional[str]) -> Optional[time]:
    """Parses a 12 hour clock time, mapping the API's 'No moonrise' style text to None.

        Near the poles the moon (and in summer, the sun) may not rise or set
        on a given day. The API reports that as free text instead of a time.
    """
    if text is None or not text.strip() or text.strip().lower().startswith("no "):
        return None
    return parse_clock_time(tag, text)


def parse_period_time(tag: str, text: Optional[str]) -> time:
    """Decodes the API's HMM forecast period integer ('0', '300', '1200') into a time."""
    value = parse_int(tag, text)
    hours, minutes = divmod(value, 100)
    try:
        return time(hours, minutes)
    except ValueError as e:
        raise WeatherParseError(f"Can't parse <{tag}> value {text!r}: {e}") from e
