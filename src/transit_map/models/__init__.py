"""Typed entities for the in-memory transit feed."""

from transit_map.models.gtfs import (
    DEFAULT_ROUTE_COLOR,
    DepartureEvent,
    FeedEntities,
    Record,
    Route,
    ShapePoint,
    Stop,
    StopTime,
    Trip,
    UpcomingDeparture,
)

__all__ = [
    "DEFAULT_ROUTE_COLOR",
    "DepartureEvent",
    "FeedEntities",
    "Record",
    "Route",
    "ShapePoint",
    "Stop",
    "StopTime",
    "Trip",
    "UpcomingDeparture",
]
