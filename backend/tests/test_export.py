"""
Test CSV Export

Unit tests for CSV field encoding and export blobs.
"""

from datetime import date

from analysis.export import CSV_MEDIA_TYPE, encode_csv, encode_field, export_filename, export_rows
from core.csv_parser import csv_parser


class TestEncodeField:
    def test_comma_is_quoted(self):
        assert encode_field("New York, NY") == '"New York, NY"'

    def test_inner_quotes_doubled(self):
        assert encode_field('say "hi", then go') == '"say ""hi"", then go"'

    def test_plain_values(self):
        assert encode_field("plain") == "plain"
        assert encode_field(12) == "12"
        assert encode_field(2.0) == "2"
        assert encode_field(True) == "true"

    def test_missing_is_empty(self):
        assert encode_field(None) == ""
        assert encode_field(float("nan")) == ""


class TestEncodeCsv:
    def test_header_and_rows(self):
        content = encode_csv(
            ["city", "pop"],
            [{"city": "New York, NY", "pop": 8}, {"city": "Austin", "pop": None}],
        )

        assert content == 'city,pop\n"New York, NY",8\nAustin,'

    def test_absent_keys_are_empty(self):
        content = encode_csv(["a", "b"], [{"a": 1}])

        assert content == "a,b\n1,"

    def test_headers_are_escaped(self):
        content = encode_csv(["last, first"], [{"last, first": "x"}])

        assert content.splitlines()[0] == '"last, first"'

    def test_empty_rows(self):
        assert encode_csv(["a"], []) is None


class TestExportRows:
    def test_blob(self):
        blob = export_rows(["a"], [{"a": 1}, {"a": 2}], on=date(2024, 1, 31))

        assert blob.filename == "data-export-2024-01-31.csv"
        assert blob.media_type == CSV_MEDIA_TYPE
        assert blob.row_count == 2
        assert blob.content == "a\n1\n2"

    def test_nothing_to_export(self):
        assert export_rows(["a"], []) is None

    def test_filename_defaults_to_today(self):
        assert export_filename() == f"data-export-{date.today().isoformat()}.csv"


class TestRoundTrip:
    def test_parses_back_to_same_fields(self):
        rows = [
            {"city": "New York, NY", "note": 'say "hi"'},
            {"city": "Austin", "note": "plain"},
        ]
        content = encode_csv(["city", "note"], rows)

        parsed = csv_parser.parse_bytes(content.encode(), "export.csv")

        assert parsed.headers == ("city", "note")
        assert [dict(r) for r in parsed.rows] == rows
