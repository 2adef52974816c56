"""Percent field type handler."""

from taskfields.fields.types.number import NumberFieldHandler
from taskfields.schemas.field import FieldDefinition, FieldType, FieldValue
from taskfields.values import format_number


class PercentFieldHandler(NumberFieldHandler):
    """
    Handler for percent field type.

    Values are stored as entered, so 45 means 45%.
    """

    field_type = FieldType.PERCENT

    @classmethod
    def format_display(
        cls,
        field_value: FieldValue | None,
        field: FieldDefinition | None = None,
    ) -> str:
        if field_value is None or field_value.numeric_value is None:
            return ""
        return f"{format_number(cls.to_typed_value(field_value).value)}%"
