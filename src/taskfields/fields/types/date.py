"""Date field type handler."""

from typing import Any

from taskfields.core.config import settings
from taskfields.fields.base import BaseFieldTypeHandler
from taskfields.schemas.field import FieldDefinition, FieldType, FieldValue
from taskfields.schemas.filter import FilterOperator
from taskfields.values import (
    TypedValue,
    ValueKind,
    from_epoch_ms,
    parse_timestamp,
    to_epoch_ms,
)


class DateFieldHandler(BaseFieldTypeHandler):
    """
    Handler for date field type.

    Stores a datetime in the ``date_value`` slot. Equality is proximity:
    two dates are equal when they lie less than the configured tolerance
    apart (one day by default). Before and after are strict.
    """

    field_type = FieldType.DATE

    @classmethod
    def to_typed_value(cls, field_value: FieldValue | None) -> TypedValue:
        if field_value is None or field_value.date_value is None:
            return TypedValue.null()
        return TypedValue.timestamp(to_epoch_ms(field_value.date_value))

    @classmethod
    def is_empty(cls, field_value: FieldValue | None) -> bool:
        return field_value is None or field_value.date_value is None

    @classmethod
    def matches(cls, operator: FilterOperator, field_value: FieldValue, operand: str) -> bool:
        if field_value.date_value is None:
            return False
        target = parse_timestamp(operand)
        if target is None:
            return False

        actual = to_epoch_ms(field_value.date_value)
        if operator == FilterOperator.EQUALS:
            return abs(actual - target) < settings.date_equals_tolerance_ms
        if operator == FilterOperator.BEFORE:
            return actual < target
        if operator == FilterOperator.AFTER:
            return actual > target
        return True

    @classmethod
    def from_typed_value(cls, field_id: Any, task_id: Any, typed: TypedValue) -> FieldValue:
        if typed.kind is ValueKind.TIMESTAMP:
            epoch_ms = typed.value
        elif typed.kind is ValueKind.STRING:
            epoch_ms = parse_timestamp(typed.value)
        else:
            epoch_ms = None
        if epoch_ms is None:
            return FieldValue(field_id=field_id, task_id=task_id)
        return FieldValue(field_id=field_id, task_id=task_id, date_value=from_epoch_ms(epoch_ms))

    @classmethod
    def format_display(
        cls,
        field_value: FieldValue | None,
        field: FieldDefinition | None = None,
    ) -> str:
        """Dates display as ISO dates, with the time when it is not midnight."""
        return cls.to_typed_value(field_value).to_display()
