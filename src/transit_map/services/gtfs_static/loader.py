"""Tabular loader - fetches every resource of an agency feed and parses it."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from transit_map.config import Settings, get_settings
from transit_map.logging import get_logger
from transit_map.services.gtfs_static.fetcher import FetchError, ResourceFetcher
from transit_map.services.gtfs_static.parser import GtfsParser

if TYPE_CHECKING:
    from collections.abc import Sequence

    from transit_map.models import Record

logger = get_logger(__name__)

DEFAULT_RESOURCES: tuple[str, ...] = (
    "routes.txt",
    "trips.txt",
    "stops.txt",
    "stop_times.txt",
    "shapes.txt",
)

FeedRecords = dict[str, list["Record"]]


def resource_key(resource: str) -> str:
    """Key under which a resource's records are stored (``stops.txt`` -> ``stops``)."""
    return resource.removesuffix(".txt")


class LoadReport:
    """Collects per-resource row counts, warnings, and fetch errors."""

    def __init__(self, agency: str, load_id: str | None = None) -> None:
        self.load_id = load_id or str(uuid.uuid4())
        self.agency = agency
        self.started_at = datetime.now(timezone.utc)
        self.ended_at: datetime | None = None
        self.duration_ms: int | None = None
        self.counts: dict[str, dict[str, int]] = {}
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def init_resource(self, name: str) -> None:
        self.counts[name] = {"read": 0, "loaded": 0, "skipped": 0}

    def finish(self) -> None:
        self.ended_at = datetime.now(timezone.utc)
        self.duration_ms = int((self.ended_at - self.started_at).total_seconds() * 1000)

    @property
    def degraded(self) -> bool:
        """True when at least one resource failed to load."""
        return bool(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "degraded" if self.errors else "success",
            "load_id": self.load_id,
            "agency": self.agency,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_ms": self.duration_ms,
            "counts": self.counts,
            "warnings": self.warnings[:100],  # cap for response size
            "errors": self.errors[:100],
        }


class TabularLoader:
    """Loads the GTFS resources of one agency into records keyed by resource name."""

    def __init__(
        self,
        settings: Settings | None = None,
        fetcher: ResourceFetcher | None = None,
        parser: GtfsParser | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._fetcher = fetcher or ResourceFetcher(
            timeout_sec=self.settings.fetch_timeout_sec,
            max_retries=self.settings.fetch_max_retries,
            backoff_base=self.settings.fetch_backoff_base,
        )
        self._parser = parser or GtfsParser()

    async def load(self, resource: str) -> list[Record]:
        """Fetch and parse a single resource.

        Raises:
            FetchError: If the resource cannot be read.
        """
        location = self.settings.resource_location(resource)
        text = await self._fetcher.fetch_text(location)
        return self._parser.parse_file(resource, text)

    async def load_all(
        self,
        resources: Sequence[str] = DEFAULT_RESOURCES,
        report: LoadReport | None = None,
    ) -> FeedRecords:
        """Load every resource in turn.

        A resource that fails to fetch is logged and yields no records; the
        others still load. Returns only after every fetch has settled.
        """
        report = report or LoadReport(agency=self.settings.agency)
        records: FeedRecords = {}

        for resource in resources:
            key = resource_key(resource)
            report.init_resource(key)
            try:
                rows = await self.load(resource)
            except FetchError as exc:
                logger.error(
                    "Could not load GTFS resource",
                    agency=self.settings.agency,
                    resource=resource,
                    error=str(exc),
                )
                report.errors.append(f"{resource}: {exc}")
                rows = []

            records[key] = rows
            report.counts[key]["read"] = len(rows)

        logger.info(
            "GTFS resources loaded",
            agency=self.settings.agency,
            load_id=report.load_id,
            rows={key: len(rows) for key, rows in records.items()},
            failed=len(report.errors),
        )
        return records
