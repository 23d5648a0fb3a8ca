"""GTFS test fixture builder - writes small agency feeds for testing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from transit_map.services.gtfs_static.parser import parse_delimited

if TYPE_CHECKING:
    from pathlib import Path

    from transit_map.services.gtfs_static.loader import FeedRecords

AGENCY = "testagency"

# Minimal feed for a small town bus network
ROUTES_TXT = """\
route_id,agency_id,route_short_name,route_long_name,route_type,route_color
L1,AA,1,Centre - Station,3,e30613
L2,AA,2,Centre - Beach,3,
L3,AA,3,Night Line,3,333333
"""

TRIPS_TXT = """\
route_id,service_id,trip_id,trip_headsign,shape_id
L1,WD,t-1-a,Station,
L1,WD,t-1-b,Station,sh1
L2,WD,t-2-a,Beach,sh2
L3,WD,t-3-a,Night,sh-missing
"""

STOPS_TXT = """\
stop_id,stop_name,stop_lat,stop_lon
S1,Plaza Major,39.9500,-0.0700
S2,Estacio,39.9550,-0.0650
S3,Platja,39.9400,-0.0500
S4,Broken Stop,not-a-number,-0.0600
"""

STOP_TIMES_TXT = """\
trip_id,arrival_time,departure_time,stop_id,stop_sequence
t-1-a,08:00:00,08:00:00,S1,1
t-1-a,08:10:00,08:10:00,S2,2
t-1-b,09:00:00,09:00:00,S1,1
t-1-b,09:10:00,,S2,2
t-2-a,08:30:00,08:30:00,S1,1
t-2-a,08:45:00,08:45:00,S3,2
t-3-a,25:10:00,25:10:00,S1,1
t-ghost,10:00:00,10:00:00,S1,1
"""

SHAPES_TXT = """\
shape_id,shape_pt_lat,shape_pt_lon,shape_pt_sequence
sh1,39.9500,-0.0700,1
sh1,39.9525,-0.0675,2
sh1,39.9550,-0.0650,3
sh2,39.9500,-0.0700,1
sh2,39.9400,-0.0500,2
"""

FEED_FILES: dict[str, str] = {
    "routes.txt": ROUTES_TXT,
    "trips.txt": TRIPS_TXT,
    "stops.txt": STOPS_TXT,
    "stop_times.txt": STOP_TIMES_TXT,
    "shapes.txt": SHAPES_TXT,
}


def write_feed_dir(
    data_dir: Path,
    agency: str = AGENCY,
    overrides: dict[str, str] | None = None,
    exclude_files: set[str] | None = None,
) -> Path:
    """Write the fixture feed under ``data_dir/agency``.

    Args:
        data_dir: Root data directory.
        agency: Agency sub-directory name.
        overrides: Replacement content per file name.
        exclude_files: Files to leave out (e.g. {"shapes.txt"}).

    Returns:
        Path of the agency directory.
    """
    agency_dir = data_dir / agency
    agency_dir.mkdir(parents=True, exist_ok=True)
    files = {**FEED_FILES, **(overrides or {})}
    exclude = exclude_files or set()

    for name, content in files.items():
        if name not in exclude:
            (agency_dir / name).write_text(content, encoding="utf-8")
    return agency_dir


def build_records(overrides: dict[str, str] | None = None) -> FeedRecords:
    """Parse the fixture feed into records keyed by resource name."""
    files = {**FEED_FILES, **(overrides or {})}
    return {name.removesuffix(".txt"): parse_delimited(text) for name, text in files.items()}
