"""Transit context - everything the map needs from one feed load."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, TypeVar
from zoneinfo import ZoneInfo

from transit_map.config import Settings, get_settings
from transit_map.logging import feed_load_context, get_logger
from transit_map.models import FeedEntities
from transit_map.services.gtfs_static.loader import LoadReport, TabularLoader
from transit_map.services.gtfs_static.normalizer import GtfsNormalizer, NormalizationError
from transit_map.services.schedule.departures import upcoming_departures
from transit_map.services.schedule.indexer import ScheduleIndex, build_index
from transit_map.services.schedule.layers import (
    LatLon,
    RoutePolyline,
    StopMarker,
    StopPopup,
    group_shapes,
    route_polylines,
    stop_markers,
    stop_popup,
)

if TYPE_CHECKING:
    from transit_map.models import Record, Stop, UpcomingDeparture
    from transit_map.services.gtfs_static.loader import FeedRecords

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class TransitContext:
    """Records, typed entities and index of one agency, read-only once built."""

    agency: str
    records: FeedRecords
    feed: FeedEntities
    index: ScheduleIndex
    shapes: Dict[str, List[LatLon]]
    report: LoadReport
    settings: Settings = field(default_factory=get_settings, repr=False)
    _stops_by_id: Dict[str, Stop] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self._stops_by_id = {stop.stop_id: stop for stop in self.feed.stops}

    def stop(self, stop_id: str) -> Optional[Stop]:
        return self._stops_by_id.get(stop_id)

    def now(self) -> datetime:
        """Current wall-clock time in the agency's timezone."""
        return datetime.now(ZoneInfo(self.settings.timezone))

    def departures_for(
        self, stop_id: str, now: Optional[datetime] = None
    ) -> List[UpcomingDeparture]:
        """Upcoming departures at a stop, reading the clock when ``now`` is omitted."""
        return upcoming_departures(
            self.index,
            stop_id,
            now if now is not None else self.now(),
            limit=self.settings.max_upcoming_departures,
            imminent_minutes=self.settings.imminent_threshold_min,
        )

    def popup_for(self, stop: Stop, now: Optional[datetime] = None) -> StopPopup:
        return stop_popup(stop, self.departures_for(stop.stop_id, now))

    def markers(self) -> List[StopMarker]:
        return stop_markers(self.feed.stops)

    def polylines(self) -> List[RoutePolyline]:
        return route_polylines(self.feed.routes, self.index, self.shapes)

    def summary(self) -> Dict[str, Any]:
        return {
            "agency": self.agency,
            "records": {key: len(rows) for key, rows in self.records.items()},
            "index": {
                "routes": len(self.index.routes_by_id),
                "stops_with_departures": len(self.index.departures_by_stop),
                **self.index.stats.to_dict(),
            },
            "load": self.report.to_dict(),
        }


def normalize_feed(
    records: FeedRecords,
    report: LoadReport,
    normalizer: Optional[GtfsNormalizer] = None,
) -> FeedEntities:
    """Convert parsed records into typed entities, skipping rows that fail."""
    normalizer = normalizer or GtfsNormalizer()
    return FeedEntities(
        stops=_normalize_rows(records, "stops", normalizer.normalize_stop, report),
        routes=_normalize_rows(records, "routes", normalizer.normalize_route, report),
        trips=_normalize_rows(records, "trips", normalizer.normalize_trip, report),
        stop_times=_normalize_rows(
            records, "stop_times", normalizer.normalize_stop_time, report
        ),
        shape_points=_normalize_rows(
            records, "shapes", normalizer.normalize_shape_point, report
        ),
    )


def build_context(
    records: FeedRecords,
    report: LoadReport,
    settings: Optional[Settings] = None,
) -> TransitContext:
    """Build the context from already-loaded records."""
    settings = settings or get_settings()
    feed = normalize_feed(
        records, report, GtfsNormalizer(default_route_color=settings.default_route_color)
    )
    index = build_index(feed)
    shapes = group_shapes(feed.shape_points)
    report.finish()

    logger.info(
        "Transit context ready",
        agency=report.agency,
        load_id=report.load_id,
        duration_ms=report.duration_ms,
        warnings_count=len(report.warnings),
        errors_count=len(report.errors),
    )
    return TransitContext(
        agency=report.agency,
        records=records,
        feed=feed,
        index=index,
        shapes=shapes,
        report=report,
        settings=settings,
    )


async def load_context(
    settings: Optional[Settings] = None,
    loader: Optional[TabularLoader] = None,
) -> TransitContext:
    """Load every resource of the configured agency and index it.

    Never raises for missing or unreadable resources; those come back
    empty and are listed in the context's load report.
    """
    settings = settings or get_settings()
    loader = loader or TabularLoader(settings=settings)
    report = LoadReport(agency=settings.agency)

    with feed_load_context(agency=settings.agency, load_id=report.load_id):
        logger.info("Loading GTFS feed")
        records = await loader.load_all(report=report)
        return build_context(records, report, settings)


def _normalize_rows(
    records: FeedRecords,
    key: str,
    normalize_fn: Callable[[Record], T],
    report: LoadReport,
) -> List[T]:
    """Normalize the rows of one resource, collecting failures as warnings."""
    if key not in report.counts:
        report.init_resource(key)
    rows = records.get(key, [])
    report.counts[key]["read"] = len(rows)

    results: List[T] = []
    for row in rows:
        try:
            results.append(normalize_fn(row))
        except NormalizationError as exc:
            report.counts[key]["skipped"] += 1
            report.warnings.append(f"{key} row skipped: {exc}")
    report.counts[key]["loaded"] = len(results)
    return results
