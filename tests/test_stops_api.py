"""Tests for the public map endpoints.

GET /stops                      – stop markers
GET /stops/{stop_id}/departures – next departures at a stop
GET /routes                     – route polylines

All tests run against the in-memory fixture feed; no files, no network.
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from httpx import AsyncClient

_PATCH_NOW = "transit_map.context.TransitContext.now"
MORNING = datetime(2024, 3, 1, 8, 15, tzinfo=timezone.utc)
LATE = datetime(2024, 3, 1, 23, 50, tzinfo=timezone.utc)


class TestListStops:
    @pytest.mark.asyncio
    async def test_returns_markers_with_position(self, client: AsyncClient) -> None:
        response = await client.get("/stops")

        assert response.status_code == 200
        data = response.json()
        assert data["agency"] == "testagency"
        assert data["count"] == 3
        assert [item["stop_id"] for item in data["items"]] == ["S1", "S2", "S3"]
        assert data["items"][0]["lat"] == 39.95

    @pytest.mark.asyncio
    async def test_503_without_feed(self, client_no_feed: AsyncClient) -> None:
        response = await client_no_feed.get("/stops")
        assert response.status_code == 503


class TestStopDepartures:
    @pytest.mark.asyncio
    async def test_next_three_departures(self, client: AsyncClient) -> None:
        with patch(_PATCH_NOW, return_value=MORNING):
            response = await client.get("/stops/S1/departures")

        assert response.status_code == 200
        data = response.json()
        assert data["stop_name"] == "Plaza Major"
        assert [d["line"] for d in data["departures"]] == ["2", "1", "3"]
        assert data["departures"][0]["label"] == "15"
        assert data["departures"][0]["destination"] == "Centre - Beach"
        assert data["lines"][0] == "2 → Centre - Beach: in 15 min"
        assert data["message"] is None

    @pytest.mark.asyncio
    async def test_departures_sorted_ascending(self, client: AsyncClient) -> None:
        with patch(_PATCH_NOW, return_value=LATE):
            response = await client.get("/stops/S1/departures")

        minutes = [d["minutes_until"] for d in response.json()["departures"]]
        assert len(minutes) == 3
        assert minutes == sorted(minutes)
        assert all(m >= 0 for m in minutes)

    @pytest.mark.asyncio
    async def test_stop_without_service(self, client: AsyncClient) -> None:
        with patch(_PATCH_NOW, return_value=MORNING):
            response = await client.get("/stops/S4/departures")

        assert response.status_code == 200
        data = response.json()
        assert data["departures"] == []
        assert data["lines"] == []
        assert data["message"] == "No more service today."

    @pytest.mark.asyncio
    async def test_unknown_stop_404(self, client: AsyncClient) -> None:
        response = await client.get("/stops/NOPE/departures")

        assert response.status_code == 404
        assert "NOPE" in response.json()["detail"]


class TestListRoutes:
    @pytest.mark.asyncio
    async def test_drawable_routes_only(self, client: AsyncClient) -> None:
        response = await client.get("/routes")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        first = data["items"][0]
        assert first["route_id"] == "L1"
        assert first["color"] == "#e30613"
        assert first["label"] == "Line 1: Centre - Station"
        assert first["points"][0] == [39.95, -0.07]
