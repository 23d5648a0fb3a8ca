"""Delimited-text parser for GTFS resources."""

from __future__ import annotations

from typing import TYPE_CHECKING

from transit_map.logging import get_logger

if TYPE_CHECKING:
    from transit_map.models import Record

logger = get_logger(__name__)

DEFAULT_DELIMITER = ","

# Columns each resource is expected to carry (subset we consume)
EXPECTED_COLUMNS: dict[str, set[str]] = {
    "routes.txt": {"route_id", "route_short_name", "route_long_name"},
    "trips.txt": {"route_id", "trip_id"},
    "stops.txt": {"stop_id", "stop_name", "stop_lat", "stop_lon"},
    "stop_times.txt": {"trip_id", "stop_id", "departure_time"},
    "shapes.txt": {"shape_id", "shape_pt_lat", "shape_pt_lon"},
}

_BOM = "\ufeff"


def parse_delimited(text: str, delimiter: str = DEFAULT_DELIMITER) -> list[Record]:
    """Parse header-prefixed delimited text into one record per data row.

    Blank lines (after trimming) are dropped. Fields are split on the
    delimiter without quote handling and trimmed. A row shorter than the
    header gets empty strings for the missing columns; surplus fields are
    ignored.

    Examples:
        "a,b\\n1,2\\n3" -> [{"a": "1", "b": "2"}, {"a": "3", "b": ""}]
        "a,b\\n"        -> []
    """
    lines = [line for line in text.split("\n") if line.strip()]
    if len(lines) <= 1:
        return []

    header = [name.strip() for name in lines[0].lstrip(_BOM).split(delimiter)]
    records: list[Record] = []
    for line in lines[1:]:
        values = line.split(delimiter)
        records.append(
            {
                name: values[i].strip() if i < len(values) else ""
                for i, name in enumerate(header)
            }
        )
    return records


class GtfsParser:
    """Parses GTFS resources and reports columns the indexer will miss."""

    def __init__(self, delimiter: str = DEFAULT_DELIMITER) -> None:
        self.delimiter = delimiter

    def parse_file(self, filename: str, text: str) -> list[Record]:
        """Parse the text of one resource.

        Missing expected columns are logged, not raised: the affected
        fields read as empty strings downstream.
        """
        records = parse_delimited(text, self.delimiter)
        if not records:
            logger.info("GTFS resource has no data rows", filename=filename)
            return records

        actual_columns = set(records[0])
        expected = EXPECTED_COLUMNS.get(filename, set())
        missing = expected - actual_columns
        if missing:
            logger.warning(
                "GTFS resource is missing expected columns",
                filename=filename,
                missing_columns=sorted(missing),
            )

        logger.info(
            "Parsed GTFS resource",
            filename=filename,
            rows=len(records),
            extra_columns=sorted(actual_columns - expected) or None,
        )
        return records
