"""Tests for delimited-text parsing of GTFS resources."""

from __future__ import annotations

from transit_map.services.gtfs_static.parser import GtfsParser, parse_delimited

from .fixtures.gtfs_fixture import STOP_TIMES_TXT, STOPS_TXT


class TestParseDelimited:
    """Tests for header mapping, trimming and degenerate input."""

    def test_one_record_per_data_row(self) -> None:
        rows = parse_delimited(STOPS_TXT)
        assert len(rows) == 4
        assert rows[0] == {
            "stop_id": "S1",
            "stop_name": "Plaza Major",
            "stop_lat": "39.9500",
            "stop_lon": "-0.0700",
        }

    def test_every_header_key_present(self) -> None:
        rows = parse_delimited(STOP_TIMES_TXT)
        header = {"trip_id", "arrival_time", "departure_time", "stop_id", "stop_sequence"}
        assert all(set(row) == header for row in rows)

    def test_short_row_padded_with_empty_strings(self) -> None:
        rows = parse_delimited("a,b,c\n1,2\n")
        assert rows == [{"a": "1", "b": "2", "c": ""}]

    def test_extra_fields_ignored(self) -> None:
        rows = parse_delimited("a,b\n1,2,3,4\n")
        assert rows == [{"a": "1", "b": "2"}]

    def test_values_and_headers_trimmed(self) -> None:
        rows = parse_delimited(" a , b \n  1 ,  two words  \n")
        assert rows == [{"a": "1", "b": "two words"}]

    def test_blank_lines_dropped(self) -> None:
        rows = parse_delimited("a,b\n\n1,2\n   \n3,4\n\n")
        assert [row["a"] for row in rows] == ["1", "3"]

    def test_crlf_line_endings(self) -> None:
        rows = parse_delimited("a,b\r\n1,2\r\n")
        assert rows == [{"a": "1", "b": "2"}]

    def test_header_only_yields_no_records(self) -> None:
        assert parse_delimited("stop_id,stop_name,stop_lat,stop_lon\n") == []

    def test_empty_text_yields_no_records(self) -> None:
        assert parse_delimited("") == []
        assert parse_delimited("\n  \n") == []

    def test_utf8_bom_stripped_from_header(self) -> None:
        rows = parse_delimited("\ufeffstop_id,stop_name\nS1,Plaza\n")
        assert rows[0]["stop_id"] == "S1"

    def test_times_past_midnight_kept_verbatim(self) -> None:
        rows = parse_delimited("trip_id,departure_time\nt1,25:10:00\n")
        assert rows[0]["departure_time"] == "25:10:00"

    def test_custom_delimiter(self) -> None:
        rows = parse_delimited("a;b\n1;2\n", delimiter=";")
        assert rows == [{"a": "1", "b": "2"}]


class TestGtfsParser:
    """Tests for per-resource parsing."""

    def test_parse_file_returns_records(self) -> None:
        rows = GtfsParser().parse_file("stops.txt", STOPS_TXT)
        assert len(rows) == 4
        assert rows[3]["stop_lat"] == "not-a-number"

    def test_missing_expected_column_does_not_raise(self) -> None:
        rows = GtfsParser().parse_file("stops.txt", "stop_id,stop_name\nS1,Plaza\n")
        assert rows == [{"stop_id": "S1", "stop_name": "Plaza"}]

    def test_unknown_resource_parses(self) -> None:
        rows = GtfsParser().parse_file("agency.txt", "agency_id,agency_name\nAA,Autobusos\n")
        assert rows[0]["agency_name"] == "Autobusos"
