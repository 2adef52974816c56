"""Checkbox field type handler."""

from typing import Any

from taskfields.fields.base import BaseFieldTypeHandler
from taskfields.schemas.field import FieldDefinition, FieldType, FieldValue
from taskfields.schemas.filter import FilterOperator
from taskfields.values import TypedValue


class CheckboxFieldHandler(BaseFieldTypeHandler):
    """
    Handler for checkbox field type.

    A checkbox that was never set is empty, reads as null in formulas and
    counts as unchecked for is_true/is_false.
    """

    field_type = FieldType.CHECKBOX

    @classmethod
    def to_typed_value(cls, field_value: FieldValue | None) -> TypedValue:
        if field_value is None or field_value.boolean_value is None:
            return TypedValue.null()
        return TypedValue.boolean(field_value.boolean_value)

    @classmethod
    def is_empty(cls, field_value: FieldValue | None) -> bool:
        return field_value is None or field_value.boolean_value is None

    @classmethod
    def is_checked(cls, field_value: FieldValue | None) -> bool:
        return field_value is not None and field_value.boolean_value is True

    @classmethod
    def matches(
        cls,
        operator: FilterOperator,
        field_value: FieldValue | None,
        operand: str,
    ) -> bool:
        if operator == FilterOperator.IS_TRUE:
            return cls.is_checked(field_value)
        if operator == FilterOperator.IS_FALSE:
            return not cls.is_checked(field_value)
        return True

    @classmethod
    def from_typed_value(cls, field_id: Any, task_id: Any, typed: TypedValue) -> FieldValue:
        if typed.is_null:
            return FieldValue(field_id=field_id, task_id=task_id)
        return FieldValue(field_id=field_id, task_id=task_id, boolean_value=typed.is_truthy)

    @classmethod
    def format_display(
        cls,
        field_value: FieldValue | None,
        field: FieldDefinition | None = None,
    ) -> str:
        if field_value is None or field_value.boolean_value is None:
            return ""
        return "Yes" if field_value.boolean_value else "No"
