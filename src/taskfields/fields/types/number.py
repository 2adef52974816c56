"""Number field type handler."""

from decimal import Decimal
from typing import Any

from taskfields.fields.base import BaseFieldTypeHandler
from taskfields.schemas.field import FieldDefinition, FieldType, FieldValue
from taskfields.schemas.filter import FilterOperator
from taskfields.values import TypedValue, ValueKind, format_number, parse_number


class NumberFieldHandler(BaseFieldTypeHandler):
    """
    Handler for number field type.

    Stores numeric values in the ``numeric_value`` slot. Currency, percent
    and rating fields share this storage and differ only in display and
    validation.
    """

    field_type = FieldType.NUMBER

    @classmethod
    def to_typed_value(cls, field_value: FieldValue | None) -> TypedValue:
        if field_value is None or field_value.numeric_value is None:
            return TypedValue.null()
        return TypedValue.number(field_value.numeric_value)

    @classmethod
    def is_empty(cls, field_value: FieldValue | None) -> bool:
        return field_value is None or field_value.numeric_value is None

    @classmethod
    def matches(cls, operator: FilterOperator, field_value: FieldValue, operand: str) -> bool:
        if field_value.numeric_value is None:
            return False
        target = parse_number(operand)
        if target is None:
            return False
        return cls._compare_numbers(operator, float(field_value.numeric_value), target)

    @classmethod
    def from_typed_value(cls, field_id: Any, task_id: Any, typed: TypedValue) -> FieldValue:
        number = None if typed.is_null else typed.as_number()
        if number is None or typed.kind is ValueKind.TIMESTAMP:
            return FieldValue(field_id=field_id, task_id=task_id)
        return FieldValue(field_id=field_id, task_id=task_id, numeric_value=Decimal(str(number)))

    @classmethod
    def format_display(
        cls,
        field_value: FieldValue | None,
        field: FieldDefinition | None = None,
    ) -> str:
        if field_value is None or field_value.numeric_value is None:
            return ""
        return format_number(cls.to_typed_value(field_value).value)
