"""Typed GTFS entities and the departure types derived from them."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

Record = Dict[str, str]

DEFAULT_ROUTE_COLOR = "007bff"


@dataclass(frozen=True)
class Stop:
    """Physical location where passengers board or alight."""

    stop_id: str
    name: str
    lat: Optional[float] = None
    lon: Optional[float] = None

    @property
    def has_position(self) -> bool:
        """True when both coordinates are finite numbers."""
        if self.lat is None or self.lon is None:
            return False
        return math.isfinite(self.lat) and math.isfinite(self.lon)


@dataclass(frozen=True)
class Route:
    """Named transit line."""

    route_id: str
    short_name: str = ""
    long_name: str = ""
    color: str = DEFAULT_ROUTE_COLOR

    @property
    def hex_color(self) -> str:
        return f"#{self.color}"


@dataclass(frozen=True)
class Trip:
    """One scheduled run of a route."""

    trip_id: str
    route_id: str
    shape_id: str = ""


@dataclass(frozen=True)
class StopTime:
    """Scheduled departure of a trip at a stop.

    ``departure_time`` is the raw ``HH:MM:SS`` value. Hours may exceed 23
    for service after midnight and are never wrapped here.
    """

    trip_id: str
    stop_id: str
    departure_time: str = ""


@dataclass(frozen=True)
class ShapePoint:
    shape_id: str
    lat: float
    lon: float


@dataclass(frozen=True)
class DepartureEvent:
    """A departure at a stop, already resolved to its route's names."""

    time: str
    line_short_name: str
    line_long_name: str


@dataclass(frozen=True)
class UpcomingDeparture:
    """A departure relative to a reference instant, ready for display."""

    line: str
    destination: str
    minutes_until: float
    imminent: bool

    @property
    def label(self) -> str:
        """Presentation hint: ``"imminent"`` or the rounded minutes."""
        if self.imminent:
            return "imminent"
        return str(_round_half_up(self.minutes_until))

    @property
    def rounded_minutes(self) -> int:
        return _round_half_up(self.minutes_until)


@dataclass
class FeedEntities:
    """Typed rows of one agency feed, each list in file order."""

    stops: List[Stop]
    routes: List[Route]
    trips: List[Trip]
    stop_times: List[StopTime]
    shape_points: List[ShapePoint]

    @classmethod
    def empty(cls) -> FeedEntities:
        return cls(stops=[], routes=[], trips=[], stop_times=[], shape_points=[])


def _round_half_up(value: float) -> int:
    # halves round up; round() would send 2.5 to 2
    return int(math.floor(value + 0.5))
