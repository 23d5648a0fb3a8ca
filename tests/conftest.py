"""Pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterator
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient

from transit_map.config import Settings
from transit_map.context import build_context
from transit_map.main import app
from transit_map.services.gtfs_static.loader import LoadReport

from .fixtures.gtfs_fixture import AGENCY, build_records

if TYPE_CHECKING:
    from pathlib import Path

    from transit_map.context import TransitContext


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a temporary local data directory."""
    return Settings(
        agency=AGENCY,
        data_dir=str(tmp_path),
        data_base_url=None,
        fetch_max_retries=1,
        fetch_backoff_base=0.01,
        timezone="UTC",
    )


@pytest.fixture
def transit_context(settings: Settings) -> TransitContext:
    """Context built from the in-memory fixture feed."""
    return build_context(build_records(), LoadReport(agency=AGENCY), settings)


@pytest.fixture
def loaded_app(transit_context: TransitContext) -> Iterator[None]:
    """Attach the fixture context to the app for the duration of a test."""
    app.state.context = transit_context
    yield
    app.state.context = None


@pytest.fixture
async def client(loaded_app: None) -> AsyncGenerator[AsyncClient, None]:  # noqa: ARG001
    """Async HTTP client for testing against a loaded feed."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def client_no_feed() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client with no feed loaded."""
    app.state.context = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
