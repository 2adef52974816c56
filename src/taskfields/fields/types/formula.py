"""Formula field type handler."""

from decimal import Decimal
from typing import Any

from taskfields.fields.base import BaseFieldTypeHandler
from taskfields.schemas.field import FieldType, FieldValue
from taskfields.schemas.filter import FilterOperator
from taskfields.values import TypedValue, ValueKind, from_epoch_ms, to_epoch_ms


class FormulaFieldHandler(BaseFieldTypeHandler):
    """
    Handler for formula fields.

    Formula values are computed, never entered. A computed result is stored
    in the slot matching its runtime kind, so numbers keep their numeric
    reading and dates their timestamp. Error results are stored as their
    error code text.

    Filters compare the display form of the stored result, case-insensitively.
    """

    field_type = FieldType.FORMULA

    @classmethod
    def to_typed_value(cls, field_value: FieldValue | None) -> TypedValue:
        if field_value is None:
            return TypedValue.null()
        if field_value.numeric_value is not None:
            return TypedValue.number(field_value.numeric_value)
        if field_value.boolean_value is not None:
            return TypedValue.boolean(field_value.boolean_value)
        if field_value.date_value is not None:
            return TypedValue.timestamp(to_epoch_ms(field_value.date_value))
        if field_value.list_value is not None:
            return TypedValue.list_of(field_value.list_value)
        if field_value.value is not None:
            return TypedValue.string(field_value.value)
        return TypedValue.null()

    @classmethod
    def is_empty(cls, field_value: FieldValue | None) -> bool:
        return cls.to_typed_value(field_value).is_empty

    @classmethod
    def matches(cls, operator: FilterOperator, field_value: FieldValue, operand: str) -> bool:
        if operator not in (FilterOperator.EQUALS, FilterOperator.CONTAINS):
            return True
        return cls._compare_text(operator, cls.to_typed_value(field_value).to_display(), operand)

    @classmethod
    def from_typed_value(cls, field_id: Any, task_id: Any, typed: TypedValue) -> FieldValue:
        slots: dict[str, Any] = {}
        if typed.kind is ValueKind.NUMBER:
            slots["numeric_value"] = Decimal(str(typed.value))
        elif typed.kind is ValueKind.BOOLEAN:
            slots["boolean_value"] = typed.value
        elif typed.kind is ValueKind.TIMESTAMP:
            slots["date_value"] = from_epoch_ms(typed.value)
        elif typed.kind is ValueKind.LIST:
            slots["list_value"] = list(typed.value)
        elif typed.kind is ValueKind.STRING:
            slots["value"] = typed.value
        return FieldValue(field_id=field_id, task_id=task_id, **slots)
