"""Public map endpoints.

Endpoints
---------
GET /stops                         – stop markers with a usable position
GET /stops/{stop_id}/departures    – next departures at a stop
GET /routes                        – one polyline per drawable route
"""

from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from transit_map.context import TransitContext
from transit_map.logging import get_logger
from transit_map.services.schedule.layers import stop_popup

logger = get_logger(__name__)

router = APIRouter(tags=["map"])


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class StopMarkerOut(BaseModel):
    stop_id: str
    name: str
    lat: float
    lon: float


class StopsResponse(BaseModel):
    agency: str
    items: List[StopMarkerOut]
    count: int


class DepartureOut(BaseModel):
    line: str
    destination: str
    minutes_until: float
    imminent: bool
    label: str


class StopDeparturesResponse(BaseModel):
    stop_id: str
    stop_name: str
    departures: List[DepartureOut]
    lines: List[str]
    message: Optional[str] = None


class RoutePolylineOut(BaseModel):
    route_id: str
    color: str
    label: str
    points: List[List[float]]


class RoutesResponse(BaseModel):
    agency: str
    items: List[RoutePolylineOut]
    count: int


def get_context(request: Request) -> TransitContext:
    """Return the loaded context, or 503 while no feed is loaded."""
    context: Optional[TransitContext] = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(status_code=503, detail="Transit feed not loaded")
    return context


# ---------------------------------------------------------------------------
# GET /stops
# ---------------------------------------------------------------------------


@router.get(
    "/stops",
    response_model=StopsResponse,
    summary="List stop markers",
    description="Stops whose coordinates parse to numbers, in feed order.",
)
async def list_stops(request: Request) -> dict[str, Any]:
    context = get_context(request)
    markers = context.markers()
    return {
        "agency": context.agency,
        "items": [
            {"stop_id": m.stop_id, "name": m.name, "lat": m.lat, "lon": m.lon}
            for m in markers
        ],
        "count": len(markers),
    }


# ---------------------------------------------------------------------------
# GET /stops/{stop_id}/departures
# ---------------------------------------------------------------------------


@router.get(
    "/stops/{stop_id}/departures",
    response_model=StopDeparturesResponse,
    summary="Next departures at a stop",
    description=(
        "Return up to the configured number of departures, soonest first, "
        "computed against the current time.  Times already past today count "
        "as the same clock time tomorrow."
    ),
)
async def get_stop_departures(stop_id: str, request: Request) -> dict[str, Any]:
    """Return the stop's popup content, or 404 if the stop is unknown."""
    context = get_context(request)
    stop = context.stop(stop_id)
    if stop is None:
        raise HTTPException(status_code=404, detail=f"Stop '{stop_id}' not found")

    departures = context.departures_for(stop_id)
    popup = stop_popup(stop, departures)

    return {
        "stop_id": stop.stop_id,
        "stop_name": stop.name,
        "departures": [
            {
                "line": d.line,
                "destination": d.destination,
                "minutes_until": round(d.minutes_until, 2),
                "imminent": d.imminent,
                "label": d.label,
            }
            for d in departures
        ],
        "lines": popup.lines,
        "message": popup.message,
    }


# ---------------------------------------------------------------------------
# GET /routes
# ---------------------------------------------------------------------------


@router.get(
    "/routes",
    response_model=RoutesResponse,
    summary="List route polylines",
    description="Routes without a trip carrying a known shape are left out.",
)
async def list_routes(request: Request) -> dict[str, Any]:
    context = get_context(request)
    polylines = context.polylines()
    return {
        "agency": context.agency,
        "items": [
            {
                "route_id": p.route_id,
                "color": p.color,
                "label": p.label,
                "points": [[lat, lon] for lat, lon in p.points],
            }
            for p in polylines
        ],
        "count": len(polylines),
    }
