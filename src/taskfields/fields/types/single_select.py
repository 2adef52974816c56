"""Single select field type handler."""

from typing import Any

from taskfields.fields.base import BaseFieldTypeHandler
from taskfields.schemas.field import FieldDefinition, FieldType, FieldValue
from taskfields.schemas.filter import FilterOperator
from taskfields.values import TypedValue


class SingleSelectFieldHandler(BaseFieldTypeHandler):
    """
    Handler for select field type.

    Stores the chosen option's value in the ``value`` slot. Filters compare
    that stored value case-insensitively; display uses the option label.
    """

    field_type = FieldType.SELECT

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
        if operator not in (FilterOperator.EQUALS, FilterOperator.NOT_EQUALS):
            return True
        return cls._compare_text(operator, field_value.value or "", operand)

    @classmethod
    def from_typed_value(cls, field_id: Any, task_id: Any, typed: TypedValue) -> FieldValue:
        if typed.is_empty:
            return FieldValue(field_id=field_id, task_id=task_id)
        return FieldValue(field_id=field_id, task_id=task_id, value=typed.to_display())

    @classmethod
    def validate(cls, field_value: FieldValue, field: FieldDefinition | None = None) -> bool:
        """
        Validate that the stored value is one of the field's options.

        Fields without options accept any value.
        """
        if not field_value.value or field is None or not field.options:
            return True
        allowed = {option.value for option in field.options}
        if field_value.value not in allowed:
            raise ValueError(
                f"Invalid option '{field_value.value}'. Allowed: {', '.join(sorted(allowed))}"
            )
        return True

    @classmethod
    def format_display(
        cls,
        field_value: FieldValue | None,
        field: FieldDefinition | None = None,
    ) -> str:
        if field_value is None or not field_value.value:
            return ""
        if field is None:
            return field_value.value
        return field.option_label(field_value.value)
