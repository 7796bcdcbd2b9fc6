"""Report data model for the World Weather Online client.

Every record here is a frozen dataclass. The parsers gather each record's
fields as they stream through a response and construct it exactly once, so
callers only ever see fully populated, immutable values. Repeated children
are stored as tuples. Values the API legitimately leaves out (no moonrise
near the poles, no current conditions when cc=no) are None, never a zero
or placeholder.

Main components:
    - Astronomy, Hourly, CurrentCondition, DailyWeather, Location: building blocks.
    - WeatherReport, LocationReport, ErrorReport: the three outcomes of parsing a body.
    - FetchResult: one report merged with the rate-limit counters of a single fetch.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import date, datetime, time
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Astronomy:
    """Sunrise, sunset, moonrise and moonset for a location/date pair, in local time.

        Attributes:
            sunrise: Time of sunrise, or None if the sun doesn't rise that day.
            sunset: Time of sunset, or None if the sun doesn't set that day.
            moonrise: Time of moonrise, or None when the moon doesn't rise on the given day.
            moonset: Time of moonset, or None when the moon doesn't set on the given day.
    """
    sunrise: Optional[time] = None
    sunset: Optional[time] = None
    moonrise: Optional[time] = None
    moonset: Optional[time] = None


@dataclass(frozen=True)
class Hourly:
    """A single forecast period within a day. The period length is the fetcher's frequency."""
    time: Optional[time] = None
    temp_c: Optional[int] = None
    temp_f: Optional[int] = None
    weather_code: Optional[int] = None
    weather_description: Optional[str] = None
    wind_speed_kmph: Optional[int] = None
    wind_speed_miles: Optional[int] = None
    wind_direction_degree: Optional[int] = None
    wind_direction_16_point: Optional[str] = None
    precip_mm: Optional[float] = None
    humidity: Optional[int] = None
    visibility: Optional[int] = None
    pressure: Optional[int] = None
    cloud_cover: Optional[int] = None
    chance_of_rain: Optional[int] = None
    feels_like_c: Optional[int] = None
    feels_like_f: Optional[int] = None
    utc_date: Optional[date] = None
    utc_time: Optional[time] = None


@dataclass(frozen=True)
class CurrentCondition:
    """Conditions at the time of the last observation. observation_time is UTC."""
    observation_time: Optional[time] = None
    temp_c: Optional[int] = None
    temp_f: Optional[int] = None
    weather_code: Optional[int] = None
    weather_description: Optional[str] = None
    wind_speed_kmph: Optional[int] = None
    wind_speed_miles: Optional[int] = None
    wind_direction_degree: Optional[int] = None
    wind_direction_16_point: Optional[str] = None
    precip_mm: Optional[float] = None
    humidity: Optional[int] = None
    visibility: Optional[int] = None
    pressure: Optional[int] = None
    cloud_cover: Optional[int] = None
    feels_like_c: Optional[int] = None
    feels_like_f: Optional[int] = None


@dataclass(frozen=True)
class DailyWeather:
    date: Optional[date] = None
    astronomy: Optional[Astronomy] = None
    max_temp_c: Optional[int] = None
    max_temp_f: Optional[int] = None
    min_temp_c: Optional[int] = None
    min_temp_f: Optional[int] = None
    uv_index: Optional[int] = None
    hourly: Tuple[Hourly, ...] = ()


@dataclass(frozen=True)
class Location:
    """A place known to the API, either from a search or as the nearest area to a weather query.

        Attributes:
            area_name: Name of the area (e.g., 'London').
            country: Name of the country.
            region: Name of the region within the country.
            latitude: Geographic latitude coordinate.
            longitude: Geographic longitude coordinate.
            population: Population, where the API knows it.
            weather_url: Link to the provider's weather page for this area.
            utc_offset: Offset from UTC in hours, only sent by the search endpoint.
    """
    area_name: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    population: Optional[int] = None
    weather_url: Optional[str] = None
    utc_offset: Optional[float] = None


@dataclass(frozen=True)
class WeatherReport:
    """A parsed response from the weather endpoint.

        Attributes:
            query: The location as the API understood it (e.g., 'London, United Kingdom').
            query_type: The kind of query the API matched ('City', 'Zipcode', 'LatLon', ...).
            local_time: Current local time at the location.
            utc_offset: Offset of local time from UTC, in hours.
            current: Current conditions, or None when they weren't requested.
            location: The nearest known area to the query.
            days: One entry per forecast day, in document order.
    """
    query: Optional[str] = None
    query_type: Optional[str] = None
    local_time: Optional[datetime] = None
    utc_offset: Optional[float] = None
    current: Optional[CurrentCondition] = None
    location: Optional[Location] = None
    days: Tuple[DailyWeather, ...] = ()


@dataclass(frozen=True)
class LocationReport:
    """A parsed response from the search endpoint: matching locations, best match first."""
    locations: Tuple[Location, ...] = ()


@dataclass(frozen=True)
class ErrorReport:
    """Describes why a fetch did not produce a weather or location report.

        Attributes:
            kind: A short label for the failure ('API Error', 'Download Failure', or an exception class name).
            message: A human-readable description.
            detail: Extra information where there is some, e.g. the API's own
                error message sent alongside a failing HTTP status.
    """
    kind: str
    message: str
    detail: Optional[str] = None

    @classmethod
    def from_exception(cls, error: Exception) -> ErrorReport:
        """Builds an ErrorReport for an exception caught while handling a response."""
        return cls(kind=error.__class__.__name__, message=str(error))


Report = Union[WeatherReport, LocationReport, ErrorReport]


def _json_default(value):
    if isinstance(value, (date, time)):
        return value.isoformat()
    raise TypeError(f"Object of type {value.__class__.__name__} is not JSON serializable")


@dataclass(frozen=True)
class FetchResult:
    """The result of fetching from the API: exactly one of weather, location or error.

        Attributes:
            weather: The weather report, if this was a successful weather fetch.
            location: The location report, if this was a successful search.
            error: The error report. None if there was not an error.
            requests_per_second: How many requests are left this second, or -1 if
                the API didn't say. The API restricts users to 5 requests per second.
            requests_per_day: How many requests are left today, or -1 if the API
                didn't say. The API restricts users to 250 requests per day.
    """
    weather: Optional[WeatherReport] = None
    location: Optional[LocationReport] = None
    error: Optional[ErrorReport] = None
    requests_per_second: int = -1
    requests_per_day: int = -1

    def __post_init__(self):
        present = [field for field in (self.weather, self.location, self.error) if field is not None]
        if len(present) != 1:
            raise ValueError("A FetchResult holds exactly one of weather, location or error, "
                             f"got {len(present)}")

    @property
    def success(self) -> bool:
        """True if the fetch succeeded."""
        return self.error is None

    def to_json(self) -> str:
        """Serializes the result into a JSON string, with dates and times in ISO 8601 format."""
        return json.dumps(asdict(self) | {"success": self.success}, default=_json_default)
