"""Text field type handler."""

from typing import Any

from taskfields.fields.base import BaseFieldTypeHandler
from taskfields.schemas.field import FieldDefinition, FieldType, FieldValue
from taskfields.schemas.filter import FilterOperator
from taskfields.values import TypedValue


class TextFieldHandler(BaseFieldTypeHandler):
    """
    Handler for text field type.

    Stores free text in the ``value`` slot. Comparisons are case-insensitive
    and an absent value compares as the empty string.
    """

    field_type = FieldType.TEXT

    @classmethod
    def to_typed_value(cls, field_value: FieldValue | None) -> TypedValue:
        if field_value is None or field_value.value is None:
            return TypedValue.null()
        return TypedValue.string(field_value.value)

    @classmethod
    def is_empty(cls, field_value: FieldValue | None) -> bool:
        return field_value is None or not field_value.value

    @classmethod
    def matches(cls, operator: FilterOperator, field_value: FieldValue, operand: str) -> bool:
        return cls._compare_text(operator, field_value.value or "", operand)

    @classmethod
    def from_typed_value(cls, field_id: Any, task_id: Any, typed: TypedValue) -> FieldValue:
        if typed.is_null:
            return FieldValue(field_id=field_id, task_id=task_id)
        return FieldValue(field_id=field_id, task_id=task_id, value=typed.to_display())

    @classmethod
    def format_display(
        cls,
        field_value: FieldValue | None,
        field: FieldDefinition | None = None,
    ) -> str:
        if field_value is None:
            return ""
        return field_value.value or ""
