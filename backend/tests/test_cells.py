"""
Test Cell Coercion

Unit tests for classification and coercion of loosely-typed cells.
"""

import math
from datetime import date, datetime
from decimal import Decimal

import pytest

from core.cells import (
    PLACEHOLDER,
    CellKind,
    classify,
    display,
    is_missing,
    parse_instants,
    to_instant,
    to_number,
    to_text,
)


class TestClassify:
    @pytest.mark.parametrize("value", [None, float("nan")])
    def test_missing(self, value):
        assert is_missing(value)
        assert classify(value) is CellKind.NULL

    def test_numbers(self):
        assert classify(3) is CellKind.NUMBER
        assert classify(2.5) is CellKind.NUMBER
        assert classify(" 42 ") is CellKind.NUMBER

    def test_text(self):
        assert classify("hello") is CellKind.TEXT
        assert classify("") is CellKind.TEXT
        assert classify("1_000") is CellKind.TEXT

    def test_bool_is_raw(self):
        assert classify(True) is CellKind.RAW


class TestToNumber:
    def test_numeric_strings(self):
        assert to_number("3.25") == 3.25
        assert to_number("-7") == -7.0
        assert to_number("1e3") == 1000.0

    def test_rejects_non_finite(self):
        assert to_number("inf") is None
        assert to_number("nan") is None
        assert to_number(float("inf")) is None
        assert to_number(float("nan")) is None

    def test_rejects_text_and_bools(self):
        assert to_number("abc") is None
        assert to_number("") is None
        assert to_number(True) is None
        assert to_number(None) is None

    def test_decimal(self):
        assert to_number(Decimal("1.5")) == 1.5


class TestToText:
    def test_integral_float(self):
        assert to_text(3.0) == "3"
        assert to_text(2.5) == "2.5"

    def test_bools(self):
        assert to_text(True) == "true"
        assert to_text(False) == "false"

    def test_missing(self):
        assert to_text(None) is None
        assert to_text(math.nan) is None

    def test_display_placeholder(self):
        assert display(None) == PLACEHOLDER
        assert display("x") == "x"
        assert display(7) == "7"


class TestInstants:
    def test_iso_dates(self):
        parsed = parse_instants(["2024-01-15", "2024-01-15 10:30:00", "2024-01-15T08:00:00"])

        assert parsed[0] == datetime(2024, 1, 15)
        assert parsed[1] == datetime(2024, 1, 15, 10, 30)
        assert parsed[2] == datetime(2024, 1, 15, 8, 0)

    def test_numbers_are_not_instants(self):
        assert parse_instants(["2024", "20240115", 1700000000, 3.5]) == [None, None, None, None]

    def test_unparseable_text(self):
        assert parse_instants(["hello", "", None]) == [None, None, None]

    def test_native_values(self):
        moment = datetime(2024, 3, 1, 12, 0)

        assert to_instant(moment) == moment
        assert to_instant(date(2024, 3, 1)) == datetime(2024, 3, 1)

    def test_mixed_batch_keeps_positions(self):
        parsed = parse_instants(["x", "2024-02-01", None, "2024-02-03"])

        assert parsed[0] is None
        assert parsed[1] == datetime(2024, 2, 1)
        assert parsed[2] is None
        assert parsed[3] == datetime(2024, 2, 3)
