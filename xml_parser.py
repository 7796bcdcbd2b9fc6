"""Streaming XML parsers for World Weather Online responses.

A parser makes a single forward pass over pull-parser events and never
builds the whole document. It does not know in advance whether the body is
a report or the API's error envelope (<data><error><msg>...</msg></error></data>).
The first complete <msg> inside <data><error> ends the parse with an
ErrorReport, and so does an <error> that closes without a <msg>.
Otherwise the fields of each record are gathered as their
elements close, and each record is built once its own element closes.

Main components:
    - iter_events: (event, element) pairs from bytes, text, a file or an iterable of chunks.
    - WeatherParser: <data> documents from the weather endpoint.
    - LocationParser: <search_api> documents from the search endpoint.
    - ErrorParser: only the error envelope. Used to enrich HTTP failures.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union
from xml.etree import ElementTree

import utils
from reports import (Astronomy, CurrentCondition, DailyWeather, ErrorReport, Hourly, Location, LocationReport,
                     Report, WeatherReport)
from weather_service import WeatherParseError

CHUNK_SIZE = 8192

API_ERROR = "API Error"
ERROR_PATH = ["data", "error"]

Source = Union[bytes, str, Iterable[bytes], Any]
FieldTable = Dict[str, Tuple[str, Callable[[str, Optional[str]], Any]]]

_CONDITION_FIELDS: FieldTable = {
    "weatherCode": ("weather_code", utils.parse_int),
    "weatherDesc": ("weather_description", utils.parse_text),
    "windspeedMiles": ("wind_speed_miles", utils.parse_int),
    "windspeedKmph": ("wind_speed_kmph", utils.parse_int),
    "winddirDegree": ("wind_direction_degree", utils.parse_int),
    "winddir16Point": ("wind_direction_16_point", utils.parse_text),
    "precipMM": ("precip_mm", utils.parse_float),
    "humidity": ("humidity", utils.parse_int),
    "visibility": ("visibility", utils.parse_int),
    "pressure": ("pressure", utils.parse_int),
    "cloudcover": ("cloud_cover", utils.parse_int),
    "FeelsLikeC": ("feels_like_c", utils.parse_int),
    "FeelsLikeF": ("feels_like_f", utils.parse_int),
}

CURRENT_CONDITION_FIELDS: FieldTable = _CONDITION_FIELDS | {
    "observation_time": ("observation_time", utils.parse_clock_time),
    "temp_C": ("temp_c", utils.parse_int),
    "temp_F": ("temp_f", utils.parse_int),
}

HOURLY_FIELDS: FieldTable = _CONDITION_FIELDS | {
    "time": ("time", utils.parse_period_time),
    "tempC": ("temp_c", utils.parse_int),
    "tempF": ("temp_f", utils.parse_int),
    "chanceofrain": ("chance_of_rain", utils.parse_int),
    "UTCdate": ("utc_date", utils.parse_date),
    "UTCtime": ("utc_time", utils.parse_period_time),
}

DAY_FIELDS: FieldTable = {
    "date": ("date", utils.parse_date),
    "maxtempC": ("max_temp_c", utils.parse_int),
    "maxtempF": ("max_temp_f", utils.parse_int),
    "mintempC": ("min_temp_c", utils.parse_int),
    "mintempF": ("min_temp_f", utils.parse_int),
    "uvIndex": ("uv_index", utils.parse_int),
}

# moonrise/moonset (and at high latitudes sunrise/sunset) may be "No moonrise" etc.
ASTRONOMY_FIELDS: FieldTable = {
    "sunrise": ("sunrise", utils.parse_optional_clock_time),
    "sunset": ("sunset", utils.parse_optional_clock_time),
    "moonrise": ("moonrise", utils.parse_optional_clock_time),
    "moonset": ("moonset", utils.parse_optional_clock_time),
}

LOCATION_FIELDS: FieldTable = {
    "areaName": ("area_name", utils.parse_text),
    "country": ("country", utils.parse_text),
    "region": ("region", utils.parse_text),
    "latitude": ("latitude", utils.parse_float),
    "longitude": ("longitude", utils.parse_float),
    "population": ("population", utils.parse_int),
    "weatherUrl": ("weather_url", utils.parse_text),
}

REQUEST_FIELDS: FieldTable = {
    "type": ("query_type", utils.parse_text),
    "query": ("query", utils.parse_text),
}

TIME_ZONE_FIELDS: FieldTable = {
    "localtime": ("local_time", utils.parse_local_datetime),
    "utcOffset": ("utc_offset", utils.parse_float),
}

SEARCH_TIME_ZONE_FIELDS: FieldTable = {
    "offset": ("utc_offset", utils.parse_float),
}


def _first(items: List[Any]) -> Optional[Any]:
    return items[0] if items else None


def _chunks(source: Source) -> Iterator[Union[bytes, str]]:
    # text is fed as-is; expat then ignores any encoding named in its declaration
    if isinstance(source, (str, bytes)):
        yield source
    elif isinstance(source, bytearray):
        yield bytes(source)
    elif hasattr(source, "read"):
        while True:
            chunk = source.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    else:
        yield from source


def iter_events(source: Source) -> Iterator[Tuple[str, ElementTree.Element]]:
    """Yields ("start" | "end", element) pull-parser events as the source is read.

        Args:
            source: The document as bytes or str, a binary file object, or an
                iterable of byte chunks (e.g. requests.Response.iter_content()).

        Raises:
            WeatherParseError: If the document is empty, truncated or not well formed.
    """
    parser = ElementTree.XMLPullParser(events=("start", "end"))
    try:
        for chunk in _chunks(source):
            if chunk:
                parser.feed(chunk)
                yield from parser.read_events()
        parser.close()
        yield from parser.read_events()
    except ElementTree.ParseError as e:
        raise WeatherParseError(f"Malformed XML: {e}") from e


class _Scope:
    """An open record element whose fields are still being collected."""

    def __init__(self, element: ElementTree.Element, fields: FieldTable, build: Optional[Callable]):
        self.element = element
        self.tag = element.tag
        self.fields = fields
        self.build = build
        self.values: Dict[str, Any] = {}
        self.children: Dict[str, List[Any]] = defaultdict(list)


class _StreamingParser:
    """Shared event loop for the endpoint parsers.

        Subclasses describe their schema with two tables:
            ROOTS: root tag -> (field table, builder) for the document element.
            CONTAINERS: (parent tag, tag) -> (field table, builder) for nested records.

        A builder is called as build(values, children) when its element closes,
        and the record it returns is appended to the parent's children under
        its tag. A builder of None merges the element's fields into the parent
        instead (for wrapper blocks such as <request> or <time_zone>).
    """
    ROOTS: Dict[str, Tuple[FieldTable, Optional[Callable]]] = {}
    CONTAINERS: Dict[Tuple[str, str], Tuple[FieldTable, Optional[Callable]]] = {}

    def parse(self, source: Source) -> Report:
        """Parses a response body into its report, or an ErrorReport for the API's error envelope.

            Raises:
                WeatherParseError: If the body is empty or malformed, the root element
                    isn't one this endpoint sends, or a field value can't be converted.
        """
        path: List[str] = []
        scopes: List[_Scope] = []
        report = None

        for event, element in iter_events(source):
            tag = element.tag
            if event == "start":
                if not path:
                    if tag not in self.ROOTS:
                        raise WeatherParseError(f"Unexpected root element <{tag}>")
                    scopes.append(_Scope(element, *self.ROOTS[tag]))
                elif scopes and scopes[-1].tag == path[-1] and (path[-1], tag) in self.CONTAINERS:
                    scopes.append(_Scope(element, *self.CONTAINERS[(path[-1], tag)]))
                path.append(tag)
                continue

            path.pop()
            if path == ERROR_PATH and tag == "msg":
                return ErrorReport(kind=API_ERROR, message=(element.text or "").strip())
            if path == ERROR_PATH[:1] and tag == "error":
                return ErrorReport(kind=API_ERROR, message="")

            if scopes and scopes[-1].element is element:
                scope = scopes.pop()
                element.clear()
                if scope.build is None:
                    scopes[-1].values.update(scope.values)
                    continue
                record = scope.build(scope.values, scope.children)
                if scopes:
                    scopes[-1].children[tag].append(record)
                else:
                    report = record
            elif scopes and path and path[-1] == scopes[-1].tag and tag in scopes[-1].fields:
                name, convert = scopes[-1].fields[tag]
                scopes[-1].values[name] = convert(tag, element.text)

        if report is None:
            raise WeatherParseError("Document ended without a complete report")
        return report


def _build_weather_report(values, children) -> WeatherReport:
    if not values and not any(children.values()):
        raise WeatherParseError("Weather response has neither weather data nor an error message")
    return WeatherReport(current=_first(children["current_condition"]),
                         location=_first(children["nearest_area"]),
                         days=tuple(children["weather"]),
                         **values)


def _build_day(values, children) -> DailyWeather:
    return DailyWeather(astronomy=_first(children["astronomy"]), hourly=tuple(children["hourly"]), **values)


def _build_location_report(values, children) -> LocationReport:
    return LocationReport(locations=tuple(children["result"]))


def _reject_data_without_error(values, children):
    raise WeatherParseError("Search response has neither results nor an error message")


class WeatherParser(_StreamingParser):
    """Parses the weather endpoint's <data> document into a WeatherReport."""
    ROOTS = {
        "data": ({}, _build_weather_report),
    }
    CONTAINERS = {
        ("data", "request"): (REQUEST_FIELDS, None),
        ("data", "time_zone"): (TIME_ZONE_FIELDS, None),
        ("data", "current_condition"): (CURRENT_CONDITION_FIELDS, lambda values, _: CurrentCondition(**values)),
        ("data", "nearest_area"): (LOCATION_FIELDS, lambda values, _: Location(**values)),
        ("data", "weather"): (DAY_FIELDS, _build_day),
        ("weather", "astronomy"): (ASTRONOMY_FIELDS, lambda values, _: Astronomy(**values)),
        ("weather", "hourly"): (HOURLY_FIELDS, lambda values, _: Hourly(**values)),
    }


class LocationParser(_StreamingParser):
    """Parses the search endpoint's <search_api> document into a LocationReport.

        The search endpoint reports errors in a <data> document, so that root
        is only accepted when it carries the error envelope.
    """
    ROOTS = {
        "search_api": ({}, _build_location_report),
        "data": ({}, _reject_data_without_error),
    }
    CONTAINERS = {
        ("search_api", "result"): (LOCATION_FIELDS, lambda values, _: Location(**values)),
        ("result", "timezone"): (SEARCH_TIME_ZONE_FIELDS, None),
    }


class ErrorParser:
    """Reads only the API's error envelope out of a body, ignoring anything else."""

    def parse(self, source: Source) -> Optional[ErrorReport]:
        """Returns the envelope's ErrorReport, or None if the body doesn't carry one.

            Raises:
                WeatherParseError: If the body is empty or malformed.
        """
        path: List[str] = []
        for event, element in iter_events(source):
            if event == "start":
                path.append(element.tag)
                continue
            path.pop()
            if path == ERROR_PATH and element.tag == "msg":
                return ErrorReport(kind=API_ERROR, message=(element.text or "").strip())
            if path == ERROR_PATH[:1] and element.tag == "error":
                return ErrorReport(kind=API_ERROR, message="")
        return None
