"""Unit tests for field type handlers."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from taskfields.core.exceptions import InvalidFieldTypeError
from taskfields.fields import (
    FIELD_HANDLERS,
    CheckboxFieldHandler,
    CurrencyFieldHandler,
    DateFieldHandler,
    EmailFieldHandler,
    FormulaFieldHandler,
    MultiSelectFieldHandler,
    NumberFieldHandler,
    PercentFieldHandler,
    RatingFieldHandler,
    RollupFieldHandler,
    SingleSelectFieldHandler,
    TextFieldHandler,
    URLFieldHandler,
    get_field_handler,
    list_field_types,
    require_field_handler,
)
from taskfields.schemas import FieldDefinition, FieldType, FieldValue
from taskfields.values import TypedValue

JAN_15 = datetime(2025, 1, 15, tzinfo=timezone.utc)


def fv(**slots) -> FieldValue:
    return FieldValue(field_id=1, task_id=1, **slots)


class TestRegistry:
    """Tests for the field handler registry."""

    def test_every_field_type_has_a_handler(self):
        assert set(FIELD_HANDLERS) == set(FieldType)
        assert len(list_field_types()) == 13

    def test_lookup_by_string(self):
        assert get_field_handler("currency") is CurrencyFieldHandler
        assert get_field_handler(FieldType.ROLLUP) is RollupFieldHandler

    def test_unknown_type(self):
        assert get_field_handler("barcode") is None
        with pytest.raises(InvalidFieldTypeError):
            require_field_handler("barcode")


class TestTextHandlers:
    """Tests for text, url and email handlers."""

    def test_typed_value(self):
        assert TextFieldHandler.to_typed_value(fv(value="hi")) == TypedValue.string("hi")
        assert TextFieldHandler.to_typed_value(None).is_null

    def test_empty_string_is_empty(self):
        assert TextFieldHandler.is_empty(fv(value=""))
        assert TextFieldHandler.is_empty(fv())
        assert not TextFieldHandler.is_empty(fv(value="x"))

    def test_url_validation(self):
        assert URLFieldHandler.validate(fv(value="https://example.com/a?b=1"))
        with pytest.raises(ValueError):
            URLFieldHandler.validate(fv(value="example.com"))

    def test_email_validation(self):
        assert EmailFieldHandler.validate(fv(value="dev@example.com"))
        assert EmailFieldHandler.validate(fv(value=""))
        with pytest.raises(ValueError):
            EmailFieldHandler.validate(fv(value="not-an-email"))

    def test_format_display(self):
        assert URLFieldHandler.format_display(fv(value="https://x.io")) == "https://x.io"
        assert TextFieldHandler.format_display(None) == ""


class TestNumericHandlers:
    """Tests for number, currency, percent and rating handlers."""

    def test_typed_value_normalises_integers(self):
        typed = NumberFieldHandler.to_typed_value(fv(numeric_value=Decimal("4.0")))
        assert typed == TypedValue.number(4)
        assert isinstance(typed.value, int)

    def test_zero_is_not_empty(self):
        assert not NumberFieldHandler.is_empty(fv(numeric_value=Decimal("0")))
        assert NumberFieldHandler.is_empty(fv())

    def test_from_typed_value(self):
        stored = NumberFieldHandler.from_typed_value(1, 2, TypedValue.number(2.5))
        assert stored.numeric_value == Decimal("2.5")
        assert NumberFieldHandler.from_typed_value(1, 2, TypedValue.null()).is_blank

    def test_currency_display(self, budget_field):
        value = fv(numeric_value=Decimal("1234.5"))
        assert CurrencyFieldHandler.format_display(value, budget_field) == "$1,234.50"

    def test_currency_display_other_codes(self):
        euros = FieldDefinition(id=9, name="cost", type=FieldType.CURRENCY, currency_code="eur")
        assert CurrencyFieldHandler.format_display(fv(numeric_value=Decimal("-12")), euros) == "-€12.00"
        kronor = FieldDefinition(id=9, name="cost", type=FieldType.CURRENCY, currency_code="SEK")
        assert CurrencyFieldHandler.format_display(fv(numeric_value=Decimal("5")), kronor) == "SEK 5.00"

    def test_percent_display(self):
        assert PercentFieldHandler.format_display(fv(numeric_value=Decimal("45"))) == "45%"
        assert PercentFieldHandler.format_display(fv(numeric_value=Decimal("12.5"))) == "12.5%"

    def test_rating_validation(self):
        assert RatingFieldHandler.validate(fv(numeric_value=Decimal("5")))
        with pytest.raises(ValueError):
            RatingFieldHandler.validate(fv(numeric_value=Decimal("6")))
        with pytest.raises(ValueError):
            RatingFieldHandler.validate(fv(numeric_value=Decimal("2.5")))

    def test_rating_display(self):
        assert RatingFieldHandler.format_display(fv(numeric_value=Decimal("3"))) == "★★★☆☆"


class TestDateHandler:
    """Tests for DateFieldHandler."""

    def test_typed_value_is_epoch_ms(self):
        typed = DateFieldHandler.to_typed_value(fv(date_value=JAN_15))
        assert typed == TypedValue.timestamp(1736899200000)

    def test_display(self):
        assert DateFieldHandler.format_display(fv(date_value=JAN_15)) == "2025-01-15"
        later = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)
        assert DateFieldHandler.format_display(fv(date_value=later)) == "2025-01-15T09:30:00Z"

    def test_from_typed_value_parses_text(self):
        stored = DateFieldHandler.from_typed_value(1, 2, TypedValue.string("2025-01-15"))
        assert stored.date_value == JAN_15
        assert DateFieldHandler.from_typed_value(1, 2, TypedValue.string("soon")).is_blank


class TestCheckboxHandler:
    """Tests for CheckboxFieldHandler."""

    def test_never_set_is_null_and_empty(self):
        assert CheckboxFieldHandler.to_typed_value(fv()).is_null
        assert CheckboxFieldHandler.is_empty(None)

    def test_unchecked_is_not_empty(self):
        assert not CheckboxFieldHandler.is_empty(fv(boolean_value=False))

    def test_is_checked(self):
        assert CheckboxFieldHandler.is_checked(fv(boolean_value=True))
        assert not CheckboxFieldHandler.is_checked(fv(boolean_value=False))
        assert not CheckboxFieldHandler.is_checked(None)

    def test_display(self):
        assert CheckboxFieldHandler.format_display(fv(boolean_value=True)) == "Yes"
        assert CheckboxFieldHandler.format_display(fv(boolean_value=False)) == "No"
        assert CheckboxFieldHandler.format_display(fv()) == ""


class TestSelectHandlers:
    """Tests for select and multiselect handlers."""

    def test_select_display_uses_label(self, priority_field):
        assert SingleSelectFieldHandler.format_display(fv(value="high"), priority_field) == "High"
        assert SingleSelectFieldHandler.format_display(fv(value="gone"), priority_field) == "gone"

    def test_select_validation(self, priority_field):
        assert SingleSelectFieldHandler.validate(fv(value="low"), priority_field)
        with pytest.raises(ValueError):
            SingleSelectFieldHandler.validate(fv(value="urgent"), priority_field)

    def test_multiselect_typed_value_keeps_order(self):
        typed = MultiSelectFieldHandler.to_typed_value(fv(list_value=["b", "a"]))
        assert typed == TypedValue.list_of(["b", "a"])

    def test_multiselect_empty_list_is_empty(self):
        assert MultiSelectFieldHandler.is_empty(fv(list_value=[]))
        assert not MultiSelectFieldHandler.is_empty(fv(list_value=["a"]))

    def test_multiselect_validation(self, tags_field):
        assert MultiSelectFieldHandler.validate(fv(list_value=["backend"]), tags_field)
        with pytest.raises(ValueError):
            MultiSelectFieldHandler.validate(fv(list_value=["backend", "backend"]), tags_field)
        with pytest.raises(ValueError):
            MultiSelectFieldHandler.validate(fv(list_value=["mobile"]), tags_field)

    def test_multiselect_display(self, tags_field):
        value = fv(list_value=["frontend", "backend"])
        assert MultiSelectFieldHandler.format_display(value, tags_field) == "Frontend, Backend"


class TestComputedHandlers:
    """Tests for formula and rollup storage."""

    @pytest.mark.parametrize(
        "typed",
        [
            TypedValue.number(2.5),
            TypedValue.boolean(False),
            TypedValue.timestamp(1736899200000),
            TypedValue.list_of(["a"]),
            TypedValue.string("#DIV/0!"),
        ],
    )
    def test_result_kind_survives_storage(self, typed):
        stored = FormulaFieldHandler.from_typed_value(7, 101, typed)
        assert FormulaFieldHandler.to_typed_value(stored) == typed

    def test_null_result_is_empty(self):
        stored = RollupFieldHandler.from_typed_value(8, 101, TypedValue.null())
        assert stored.is_blank
        assert RollupFieldHandler.is_empty(stored)

    def test_false_result_is_not_empty(self):
        stored = FormulaFieldHandler.from_typed_value(7, 101, TypedValue.boolean(False))
        assert not FormulaFieldHandler.is_empty(stored)
