"""Schedule indexer - builds the read-only lookup structures for one feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List

from transit_map.logging import get_logger
from transit_map.models import DepartureEvent, Route, Trip

if TYPE_CHECKING:
    from transit_map.models import FeedEntities

logger = get_logger(__name__)


@dataclass
class IndexStats:
    """Counts of stop times kept and dropped while indexing."""

    indexed: int = 0
    missing_departure_time: int = 0
    unknown_trip: int = 0
    unknown_route: int = 0

    @property
    def excluded(self) -> int:
        return self.missing_departure_time + self.unknown_trip + self.unknown_route

    def to_dict(self) -> Dict[str, int]:
        return {
            "indexed": self.indexed,
            "missing_departure_time": self.missing_departure_time,
            "unknown_trip": self.unknown_trip,
            "unknown_route": self.unknown_route,
        }


@dataclass
class ScheduleIndex:
    """Lookup structures derived from a feed.

    Built once per load and never mutated afterwards.
    """

    routes_by_id: Dict[str, Route] = field(default_factory=dict)
    trips_by_route: Dict[str, List[Trip]] = field(default_factory=dict)
    departures_by_stop: Dict[str, List[DepartureEvent]] = field(default_factory=dict)
    stats: IndexStats = field(default_factory=IndexStats, compare=False)

    def departures_at(self, stop_id: str) -> List[DepartureEvent]:
        return self.departures_by_stop.get(stop_id, [])

    def trips_for(self, route_id: str) -> List[Trip]:
        return self.trips_by_route.get(route_id, [])


def build_index(feed: FeedEntities) -> ScheduleIndex:
    """Build routes-by-id, trips-by-route and departures-by-stop from a feed.

    Pure function of ``feed``. Ids are matched by exact string equality.
    A stop time contributes no departure when its departure_time is empty,
    its trip is unknown, or its trip's route is unknown.
    """
    index = ScheduleIndex()

    for route in feed.routes:
        index.routes_by_id[route.route_id] = route

    trips_by_id: Dict[str, Trip] = {}
    for trip in feed.trips:
        index.trips_by_route.setdefault(trip.route_id, []).append(trip)
        trips_by_id.setdefault(trip.trip_id, trip)

    stats = index.stats
    for stop_time in feed.stop_times:
        if not stop_time.departure_time:
            stats.missing_departure_time += 1
            continue

        trip = trips_by_id.get(stop_time.trip_id)
        if trip is None:
            stats.unknown_trip += 1
            continue

        route = index.routes_by_id.get(trip.route_id)
        if route is None:
            stats.unknown_route += 1
            continue

        index.departures_by_stop.setdefault(stop_time.stop_id, []).append(
            DepartureEvent(
                time=stop_time.departure_time,
                line_short_name=route.short_name,
                line_long_name=route.long_name,
            )
        )
        stats.indexed += 1

    logger.info(
        "Schedule index built",
        routes=len(index.routes_by_id),
        routes_with_trips=len(index.trips_by_route),
        stops_with_departures=len(index.departures_by_stop),
        **stats.to_dict(),
    )
    return index
