"""Map layers handed to the browser map: stop markers, route lines and popups."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from transit_map.logging import get_logger

if TYPE_CHECKING:
    from transit_map.models import Route, ShapePoint, Stop, UpcomingDeparture
    from transit_map.services.schedule.indexer import ScheduleIndex

logger = get_logger(__name__)

NO_SERVICE_MESSAGE = "No more service today."

LatLon = Tuple[float, float]


@dataclass(frozen=True)
class StopMarker:
    stop_id: str
    name: str
    lat: float
    lon: float


@dataclass(frozen=True)
class RoutePolyline:
    """Path of one route, drawn from the shape of its first shaped trip."""

    route_id: str
    color: str
    label: str
    points: List[LatLon] = field(default_factory=list)


@dataclass(frozen=True)
class StopPopup:
    title: str
    lines: List[str]
    no_service: bool = False
    message: Optional[str] = None


def stop_markers(stops: Sequence[Stop]) -> List[StopMarker]:
    """Markers for every stop with a usable position, in file order."""
    markers = [
        StopMarker(stop_id=stop.stop_id, name=stop.name, lat=stop.lat, lon=stop.lon)
        for stop in stops
        if stop.has_position
    ]
    skipped = len(stops) - len(markers)
    if skipped:
        logger.info("Stops without position left off the map", skipped=skipped)
    return markers


def group_shapes(points: Sequence[ShapePoint]) -> Dict[str, List[LatLon]]:
    """Group shape points by shape_id, keeping file order within each shape."""
    shapes: Dict[str, List[LatLon]] = {}
    for point in points:
        shapes.setdefault(point.shape_id, []).append((point.lat, point.lon))
    return shapes


def route_polylines(
    routes: Sequence[Route],
    index: ScheduleIndex,
    shapes: Dict[str, List[LatLon]],
) -> List[RoutePolyline]:
    """One polyline per route that has a trip with a known shape.

    Only the first trip carrying a shape_id is considered; if its shape is
    unknown the route is skipped rather than drawn empty.
    """
    if not routes or not index.trips_by_route or not shapes:
        return []

    polylines: List[RoutePolyline] = []
    for route in routes:
        trip = next((t for t in index.trips_for(route.route_id) if t.shape_id), None)
        if trip is None:
            continue

        points = shapes.get(trip.shape_id)
        if not points:
            logger.debug(
                "Route shape not found",
                route_id=route.route_id,
                trip_id=trip.trip_id,
                shape_id=trip.shape_id,
            )
            continue

        polylines.append(
            RoutePolyline(
                route_id=route.route_id,
                color=route.hex_color,
                label=f"Line {route.short_name}: {route.long_name}",
                points=list(points),
            )
        )
    return polylines


def stop_popup(stop: Stop, departures: Sequence[UpcomingDeparture]) -> StopPopup:
    """Text content of a stop's popup."""
    if not departures:
        return StopPopup(title=stop.name, lines=[], no_service=True, message=NO_SERVICE_MESSAGE)

    lines = []
    for departure in departures:
        when = "imminent" if departure.imminent else f"in {departure.rounded_minutes} min"
        lines.append(f"{departure.line} → {departure.destination}: {when}")
    return StopPopup(title=stop.name, lines=lines)
