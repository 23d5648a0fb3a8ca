"""GTFS record normalizer - converts raw string records into typed entities."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

from transit_map.logging import get_logger
from transit_map.models import DEFAULT_ROUTE_COLOR, Route, ShapePoint, Stop, StopTime, Trip

if TYPE_CHECKING:
    from transit_map.models import Record

logger = get_logger(__name__)


class TimeParseError(Exception):
    """Raised when a GTFS time string cannot be parsed."""


class NormalizationError(Exception):
    """Raised when a record cannot be normalized."""


class GtfsNormalizer:
    """Normalizes raw GTFS records into typed entities."""

    def __init__(self, default_route_color: str = DEFAULT_ROUTE_COLOR) -> None:
        self.default_route_color = default_route_color

    @staticmethod
    def normalize_stop(row: Record) -> Stop:
        """Normalize a stops.txt record.

        Unparseable coordinates are kept as ``None`` so the stop is still
        known to the index but skipped when drawing markers.

        Raises:
            NormalizationError: If stop_id is missing.
        """
        stop_id = _clean_str(row.get("stop_id", ""))
        if not stop_id:
            raise NormalizationError("Missing stop_id")

        lat = _parse_coordinate(row.get("stop_lat", ""))
        lon = _parse_coordinate(row.get("stop_lon", ""))
        if lat is None or lon is None:
            logger.debug(
                "Stop has no usable position",
                stop_id=stop_id,
                stop_lat=row.get("stop_lat"),
                stop_lon=row.get("stop_lon"),
            )

        return Stop(
            stop_id=stop_id,
            name=_clean_str(row.get("stop_name", "")),
            lat=lat,
            lon=lon,
        )

    def normalize_route(self, row: Record) -> Route:
        """Normalize a routes.txt record, defaulting the colour when absent.

        Raises:
            NormalizationError: If route_id is missing.
        """
        route_id = _clean_str(row.get("route_id", ""))
        if not route_id:
            raise NormalizationError("Missing route_id")

        color = _clean_str(row.get("route_color", "")).lstrip("#")
        return Route(
            route_id=route_id,
            short_name=_clean_str(row.get("route_short_name", "")),
            long_name=_clean_str(row.get("route_long_name", "")),
            color=color or self.default_route_color,
        )

    @staticmethod
    def normalize_trip(row: Record) -> Trip:
        """Normalize a trips.txt record.

        The route_id is not required to resolve; an empty shape_id means
        the trip has no geometry.

        Raises:
            NormalizationError: If trip_id is missing.
        """
        trip_id = _clean_str(row.get("trip_id", ""))
        if not trip_id:
            raise NormalizationError("Missing trip_id")

        return Trip(
            trip_id=trip_id,
            route_id=_clean_str(row.get("route_id", "")),
            shape_id=_clean_str(row.get("shape_id", "")),
        )

    @staticmethod
    def normalize_stop_time(row: Record) -> StopTime:
        """Normalize a stop_times.txt record.

        ``departure_time`` is kept verbatim (possibly empty, possibly past
        24:00:00); the schedule index decides what to do with it.
        """
        return StopTime(
            trip_id=_clean_str(row.get("trip_id", "")),
            stop_id=_clean_str(row.get("stop_id", "")),
            departure_time=_clean_str(row.get("departure_time", "")),
        )

    @staticmethod
    def normalize_shape_point(row: Record) -> ShapePoint:
        """Normalize a shapes.txt record.

        Raises:
            NormalizationError: If shape_id is missing or a coordinate is invalid.
        """
        shape_id = _clean_str(row.get("shape_id", ""))
        if not shape_id:
            raise NormalizationError("Missing shape_id")

        lat = _parse_coordinate(row.get("shape_pt_lat", ""))
        lon = _parse_coordinate(row.get("shape_pt_lon", ""))
        if lat is None or lon is None:
            raise NormalizationError(
                f"Invalid lat/lon for shape_id={shape_id}: "
                f"lat={row.get('shape_pt_lat')!r}, lon={row.get('shape_pt_lon')!r}"
            )
        return ShapePoint(shape_id=shape_id, lat=lat, lon=lon)


def parse_gtfs_time(time_str: str) -> int:
    """Parse a GTFS time string (HH:MM[:SS]) to seconds from midnight.

    Supports times >= 24:00:00 for trips running past midnight. Seconds
    default to zero when omitted.

    Examples:
        "08:30:00" -> 30600
        "25:01:30" -> 90090
        "07:15"    -> 26100

    Raises:
        TimeParseError: If the format is invalid.
    """
    time_str = time_str.strip()
    parts = time_str.split(":")
    if len(parts) not in (2, 3):
        msg = f"Invalid GTFS time format: {time_str!r} (expected HH:MM:SS)"
        raise TimeParseError(msg)

    try:
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) == 3 else 0
    except ValueError as exc:
        msg = f"Non-numeric components in GTFS time: {time_str!r}"
        raise TimeParseError(msg) from exc

    if minutes < 0 or minutes > 59 or seconds < 0 or seconds > 59:
        msg = f"Invalid minutes/seconds in GTFS time: {time_str!r}"
        raise TimeParseError(msg)

    if hours < 0:
        msg = f"Negative hours in GTFS time: {time_str!r}"
        raise TimeParseError(msg)

    return hours * 3600 + minutes * 60 + seconds


def _parse_coordinate(value: Any) -> float | None:
    """Parse a decimal coordinate, returning None for empty or non-finite input."""
    text = _clean_str(value)
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _clean_str(value: Any) -> str:
    """Trim whitespace from a value, return empty string for None."""
    if value is None:
        return ""
    return str(value).strip()
