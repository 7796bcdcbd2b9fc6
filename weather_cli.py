"""Command line entry point for the World Weather Online client.

Usage:
    wwo-weather weather "London" --days 2 --frequency 6
    wwo-weather search "Springfield" --results 5

The API key is read from --api-key or the WWO_API_KEY environment variable.

Exit status:
    0: The fetch succeeded.
    1: The API (or the response) reported an error. It is printed to stderr.
    2: Bad arguments, including a missing API key.
    3: The service could not be reached.
"""

import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from location_api import LocationFetcher
from reports import FetchResult, LocationReport, WeatherReport
from weather_api import BOILERPLATE, FREQUENCIES, WeatherFetcher
from weather_service import MissingParameterError, WeatherServiceRequestError

logger = logging.getLogger(__name__)


def _date(value: str):
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wwo-weather", description="Query the World Weather Online API.")
    parser.add_argument("--api-key", help="API key (default: $WWO_API_KEY)")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests and responses")
    subparsers = parser.add_subparsers(dest="command", required=True)

    weather = subparsers.add_parser("weather", help="Current conditions and forecast for a location")
    weather.add_argument("location")
    weather.add_argument("--days", type=int, default=3)
    weather.add_argument("--date", type=_date, default=None)
    weather.add_argument("--language", default=None)
    weather.add_argument("--frequency", type=int, choices=FREQUENCIES, default=3)
    weather.add_argument("--no-forecast", action="store_true")
    weather.add_argument("--no-current", action="store_true")

    search = subparsers.add_parser("search", help="Find locations matching a query")
    search.add_argument("query")
    search.add_argument("--results", type=int, default=3)
    return parser


def format_weather(report: WeatherReport) -> List[str]:
    """Renders a weather report as short human readable lines."""
    lines = [f"{report.query or 'Unknown location'} (local time {report.local_time or 'N / A'})"]
    if report.current is not None:
        current = report.current
        lines.append(f"  Now: {current.temp_c}C, {current.weather_description}, "
                     f"wind {current.wind_speed_kmph} km/h {current.wind_direction_16_point}")
    for day in report.days:
        lines.append(f"  {day.date}: {day.min_temp_c}C to {day.max_temp_c}C")
        if day.astronomy is not None:
            astronomy = day.astronomy
            lines.append(f"    sunrise {astronomy.sunrise or 'none'}, sunset {astronomy.sunset or 'none'}, "
                         f"moonrise {astronomy.moonrise or 'none'}, moonset {astronomy.moonset or 'none'}")
        for hourly in day.hourly:
            lines.append(f"    {hourly.time}: {hourly.temp_c}C, {hourly.weather_description}, "
                         f"{hourly.chance_of_rain}% chance of rain")
    return lines


def format_locations(report: LocationReport) -> List[str]:
    """Renders a location report as one line per match."""
    if not report.locations:
        return ["No matching locations"]
    lines = []
    for location in report.locations:
        line = f"{location.area_name}, {location.region}, {location.country} ({location.latitude}, {location.longitude})"
        if location.utc_offset is not None:
            line += f" UTC{location.utc_offset:+}"
        lines.append(line)
    return lines


def print_result(result: FetchResult, as_json: bool = False) -> int:
    """Prints a FetchResult and returns the process exit status for it."""
    if as_json:
        print(result.to_json())
    elif result.weather is not None:
        print("\n".join(format_weather(result.weather)))
        print(BOILERPLATE)
    elif result.location is not None:
        print("\n".join(format_locations(result.location)))

    if not result.success:
        detail = f" ({result.error.detail})" if result.error.detail else ""
        print(f"{result.error.kind}: {result.error.message}{detail}", file=sys.stderr)

    print(f"Requests left: {result.requests_per_second} this second, {result.requests_per_day} today",
          file=sys.stderr)
    return 0 if result.success else 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        if args.command == "weather":
            fetcher = WeatherFetcher(api_key=args.api_key, location=args.location, language=args.language,
                                     num_of_days=args.days, date=args.date, forecast=not args.no_forecast,
                                     current=not args.no_current, frequency=args.frequency, timeout=args.timeout)
        else:
            fetcher = LocationFetcher(api_key=args.api_key, query=args.query, num_results=args.results,
                                      timeout=args.timeout)
        result = fetcher.fetch()
    except (MissingParameterError, ValueError) as e:
        parser.error(str(e))
    except WeatherServiceRequestError as e:
        logger.debug(f"Request failed: {e!r}")
        print(f"Service is currently unavailable: {e}", file=sys.stderr)
        return 3

    return print_result(result, as_json=args.json)


if __name__ == "__main__":
    sys.exit(main())
