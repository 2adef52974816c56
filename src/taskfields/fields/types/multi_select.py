"""Multi select field type handler."""

from typing import Any

from taskfields.fields.base import BaseFieldTypeHandler
from taskfields.schemas.field import FieldDefinition, FieldType, FieldValue
from taskfields.schemas.filter import FilterOperator
from taskfields.values import TypedValue, ValueKind


class MultiSelectFieldHandler(BaseFieldTypeHandler):
    """
    Handler for multiselect field type.

    Stores the selected option values, in order, in the ``list_value`` slot.
    ``contains`` tests membership of a single option value.
    """

    field_type = FieldType.MULTISELECT

    @classmethod
    def to_typed_value(cls, field_value: FieldValue | None) -> TypedValue:
        if field_value is None or field_value.list_value is None:
            return TypedValue.null()
        return TypedValue.list_of(field_value.list_value)

    @classmethod
    def is_empty(cls, field_value: FieldValue | None) -> bool:
        return field_value is None or not field_value.list_value

    @classmethod
    def matches(cls, operator: FilterOperator, field_value: FieldValue, operand: str) -> bool:
        selected = {item.lower() for item in field_value.list_value or ()}
        if operator == FilterOperator.CONTAINS:
            return operand.lower() in selected
        if operator == FilterOperator.NOT_CONTAINS:
            return operand.lower() not in selected
        return True

    @classmethod
    def from_typed_value(cls, field_id: Any, task_id: Any, typed: TypedValue) -> FieldValue:
        if typed.kind is ValueKind.LIST:
            items = list(typed.value)
        elif typed.is_empty:
            return FieldValue(field_id=field_id, task_id=task_id)
        else:
            items = [typed.to_display()]
        return FieldValue(field_id=field_id, task_id=task_id, list_value=items)

    @classmethod
    def validate(cls, field_value: FieldValue, field: FieldDefinition | None = None) -> bool:
        selected = field_value.list_value or []
        if len(set(selected)) != len(selected):
            raise ValueError("Multiselect values must be unique")
        if field is None or not field.options:
            return True
        allowed = {option.value for option in field.options}
        invalid = [item for item in selected if item not in allowed]
        if invalid:
            raise ValueError(f"Invalid options: {', '.join(invalid)}")
        return True

    @classmethod
    def format_display(
        cls,
        field_value: FieldValue | None,
        field: FieldDefinition | None = None,
    ) -> str:
        if field_value is None or not field_value.list_value:
            return ""
        if field is None:
            return ", ".join(field_value.list_value)
        return ", ".join(field.option_label(item) for item in field_value.list_value)
