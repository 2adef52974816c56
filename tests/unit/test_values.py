"""Unit tests for the TypedValue model."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from taskfields.core.exceptions import FormulaTypeError
from taskfields.values import (
    NULL,
    TypedValue,
    ValueKind,
    format_timestamp,
    parse_number,
    parse_timestamp,
    to_epoch_ms,
)

JAN_15 = 1736899200000


class TestTypedValue:
    """Tests for TypedValue construction and inspection."""

    def test_integral_numbers_are_int(self):
        assert TypedValue.number(4.0).value == 4
        assert isinstance(TypedValue.number(Decimal("4.00")).value, int)
        assert TypedValue.number(Decimal("2.5")).value == 2.5

    def test_boolean_is_not_a_number(self):
        with pytest.raises(FormulaTypeError):
            TypedValue.number(True)

    def test_non_finite_rejected(self):
        with pytest.raises(FormulaTypeError):
            TypedValue.number(float("inf"))
        with pytest.raises(FormulaTypeError):
            TypedValue.number(Decimal("2e308"))
        with pytest.raises(FormulaTypeError):
            TypedValue.timestamp(float("nan"))

    def test_null_singleton(self):
        assert TypedValue.null() is NULL
        assert TypedValue.from_python(None) is NULL

    @pytest.mark.parametrize(
        "value,kind",
        [
            ("a", ValueKind.STRING),
            (1, ValueKind.NUMBER),
            (Decimal("1.5"), ValueKind.NUMBER),
            (False, ValueKind.BOOLEAN),
            (date(2025, 1, 15), ValueKind.TIMESTAMP),
            (["x"], ValueKind.LIST),
        ],
    )
    def test_from_python(self, value, kind):
        assert TypedValue.from_python(value).kind is kind

    def test_emptiness(self):
        assert NULL.is_empty
        assert TypedValue.string("").is_empty
        assert TypedValue.list_of([]).is_empty
        assert not TypedValue.number(0).is_empty
        assert not TypedValue.boolean(False).is_empty

    def test_truthiness(self):
        assert not NULL.is_truthy
        assert not TypedValue.number(0).is_truthy
        assert TypedValue.string("x").is_truthy
        assert TypedValue.timestamp(0).is_truthy

    def test_as_number_never_raises(self):
        assert TypedValue.string(" 12 ").as_number() == 12
        assert TypedValue.string("twelve").as_number() is None
        assert TypedValue.list_of(["1"]).as_number() is None
        assert NULL.as_number() is None

    @pytest.mark.parametrize(
        "typed,display",
        [
            (NULL, ""),
            (TypedValue.number(3), "3"),
            (TypedValue.number(0.1), "0.1"),
            (TypedValue.boolean(True), "TRUE"),
            (TypedValue.timestamp(JAN_15), "2025-01-15"),
            (TypedValue.list_of(["a", "b"]), "a, b"),
        ],
    )
    def test_display(self, typed, display):
        assert typed.to_display() == display
        assert str(typed) == display


class TestParsing:
    """Tests for number and timestamp parsing helpers."""

    def test_parse_number(self):
        assert parse_number("1e3") == 1000.0
        assert parse_number("  -2.5 ") == -2.5
        assert parse_number("") is None
        assert parse_number("1_000") is None
        assert parse_number("nan") is None
        assert parse_number(True) is None

    def test_parse_timestamp_forms(self):
        assert parse_timestamp("2025-01-15") == JAN_15
        assert parse_timestamp("2025-01-15T00:00:00Z") == JAN_15
        assert parse_timestamp("2025-01-15T01:00:00+01:00") == JAN_15
        assert parse_timestamp(str(JAN_15)) == JAN_15
        assert parse_timestamp("tomorrow") is None
        assert parse_timestamp(None) is None

    def test_naive_datetimes_are_utc(self):
        assert to_epoch_ms(datetime(2025, 1, 15)) == JAN_15
        assert to_epoch_ms(datetime(2025, 1, 15, 1, tzinfo=timezone(timedelta(hours=1)))) == JAN_15

    def test_format_timestamp_with_time(self):
        assert format_timestamp(JAN_15 + 90_000) == "2025-01-15T00:01:30Z"
