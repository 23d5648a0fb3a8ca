"""Upcoming-departure query over a schedule index."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, List, Tuple

from transit_map.logging import get_logger
from transit_map.models import UpcomingDeparture
from transit_map.services.gtfs_static.normalizer import TimeParseError, parse_gtfs_time

if TYPE_CHECKING:
    from transit_map.models import DepartureEvent
    from transit_map.services.schedule.indexer import ScheduleIndex

logger = get_logger(__name__)

DEFAULT_LIMIT = 3
DEFAULT_IMMINENT_MINUTES = 1.0
MINUTES_PER_DAY = 24 * 60


def departure_instant(reference: datetime, time_str: str) -> datetime:
    """Place a GTFS time string on the calendar date of ``reference``.

    The time of day of ``reference`` is replaced; hours of 24 or more roll
    over into the following day(s). The tzinfo of ``reference`` is kept.

    Examples:
        (2024-03-01 10:00, "08:30:00") -> 2024-03-01 08:30
        (2024-03-01 10:00, "25:10:00") -> 2024-03-02 01:10

    Raises:
        TimeParseError: If ``time_str`` is not a valid GTFS time, or lands
            outside the range ``datetime`` can represent.
    """
    offset = parse_gtfs_time(time_str)
    midnight = reference.replace(hour=0, minute=0, second=0, microsecond=0)
    try:
        return midnight + timedelta(seconds=offset)
    except OverflowError as exc:
        raise TimeParseError(f"GTFS time out of range: {time_str!r}") from exc


def _elapsed_minutes(start: datetime, end: datetime) -> float:
    # Aware datetimes sharing a tzinfo subtract as wall-clock times
    if start.tzinfo is not None:
        start = start.astimezone(timezone.utc)
        end = end.astimezone(timezone.utc)
    return (end - start).total_seconds() / 60


def minutes_until(now: datetime, time_str: str) -> float:
    """Fractional minutes from ``now`` to the next occurrence of ``time_str``.

    Measured as elapsed time, so a DST change between ``now`` and the
    departure shifts the result by the offset change. A time already past
    today is read as the same clock time tomorrow (+1440 minutes). This does
    not account for multi-day gaps.

    Raises:
        TimeParseError: If ``time_str`` is not a valid GTFS time.
    """
    instant = departure_instant(now, time_str)
    try:
        diff = _elapsed_minutes(now, instant)
    except OverflowError as exc:
        raise TimeParseError(f"GTFS time out of range: {time_str!r}") from exc
    if diff < 0:
        diff += MINUTES_PER_DAY
    return diff


def upcoming_departures(
    index: ScheduleIndex,
    stop_id: str,
    now: datetime,
    limit: int = DEFAULT_LIMIT,
    imminent_minutes: float = DEFAULT_IMMINENT_MINUTES,
) -> List[UpcomingDeparture]:
    """Return the next ``limit`` departures at a stop, soonest first.

    Events whose time cannot be parsed are skipped. An unknown stop, or a
    stop without departures, gives an empty list.
    """
    events = index.departures_at(stop_id)
    if not events:
        return []

    timed: List[Tuple[float, DepartureEvent]] = []
    for event in events:
        try:
            diff = minutes_until(now, event.time)
        except TimeParseError as exc:
            logger.debug(
                "Skipping departure with unparseable time",
                stop_id=stop_id,
                time=event.time,
                error=str(exc),
            )
            continue
        timed.append((diff, event))

    # list.sort is stable, ties keep file order
    timed.sort(key=lambda item: item[0])

    return [
        UpcomingDeparture(
            line=event.line_short_name,
            destination=event.line_long_name,
            minutes_until=diff,
            imminent=diff <= imminent_minutes,
        )
        for diff, event in timed
        if diff >= 0
    ][:limit]
