"""In-memory schedule index and the queries the map runs against it."""

from transit_map.services.schedule.departures import departure_instant, upcoming_departures
from transit_map.services.schedule.indexer import ScheduleIndex, build_index
from transit_map.services.schedule.layers import route_polylines, stop_markers, stop_popup

__all__ = [
    "ScheduleIndex",
    "build_index",
    "departure_instant",
    "route_polylines",
    "stop_markers",
    "stop_popup",
    "upcoming_departures",
]
