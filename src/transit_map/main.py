"""FastAPI application entry point."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from transit_map.config import get_settings
from transit_map.context import load_context
from transit_map.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)
from transit_map.routers.stops import router as stops_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load the agency feed once; every request reads the same context."""
    setup_logging()
    logger.info("Starting Transit Map API")

    settings = get_settings()
    app.state.context = None
    if settings.load_on_startup:
        app.state.context = await load_context(settings)

    yield

    logger.info("Shutting down Transit Map API")
    app.state.context = None


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Stops, routes and departure countdowns for a single transit agency, "
            "served from its static GTFS files"
        ),
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )
    app.state.context = None

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.environment == "development" else [],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next: Any) -> Any:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        bind_request_context(request_id=request_id, path=request.url.path)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        clear_request_context()
        return response

    app.include_router(stops_router)

    # Health endpoint
    @app.get("/health", tags=["meta"])
    async def health_check(request: Request) -> dict[str, Any]:
        """Health check reporting whether the feed loaded completely."""
        settings = get_settings()
        context = request.app.state.context

        issues: list[str] = []
        if context is None:
            issues.append("Transit feed not loaded")
            status = "degraded"
            checks: dict[str, Any] = {"feedLoaded": False}
        else:
            issues.extend(context.report.errors)
            status = "degraded" if context.report.degraded else "healthy"
            checks = {
                "feedLoaded": True,
                "agency": context.agency,
                "records": {key: len(rows) for key, rows in context.records.items()},
                "stopsWithDepartures": len(context.index.departures_by_stop),
                "warningsCount": len(context.report.warnings),
            }

        return {
            "service": settings.app_name,
            "status": status,
            "version": settings.app_version,
            "environment": settings.environment,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": checks,
            "issues": issues,
        }

    # Map settings endpoint
    @app.get("/meta/map", tags=["meta"])
    async def get_map_settings() -> dict[str, Any]:
        """Initial view, base tiles and stop clustering for the browser map."""
        settings = get_settings()
        return {
            "agency": settings.agency,
            "center": [settings.map_center_lat, settings.map_center_lon],
            "zoom": settings.map_zoom,
            "defaultRouteColor": f"#{settings.default_route_color}",
            "tiles": {
                "url": settings.map_tile_url,
                "attribution": settings.map_tile_attribution,
            },
            "clustering": {
                "maxClusterRadius": settings.cluster_max_radius,
                "disableClusteringAtZoom": settings.disable_clustering_at_zoom,
            },
        }

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception", exc_info=exc, path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred",
            },
        )

    return app


app = create_app()
