"""Rating field type handler."""

from taskfields.fields.types.number import NumberFieldHandler
from taskfields.schemas.field import FieldDefinition, FieldType, FieldValue


class RatingFieldHandler(NumberFieldHandler):
    """
    Handler for rating field type.

    Stores whole ratings from 0 to MAX_RATING. Rating fields register no
    emptiness operators, but an unset rating still counts as empty for
    rollups and display.
    """

    field_type = FieldType.RATING

    MAX_RATING = 5

    @classmethod
    def validate(cls, field_value: FieldValue, field: FieldDefinition | None = None) -> bool:
        rating = field_value.numeric_value
        if rating is None:
            return True
        if rating != rating.to_integral_value():
            raise ValueError(f"Rating must be a whole number, got {rating}")
        if not 0 <= rating <= cls.MAX_RATING:
            raise ValueError(f"Rating must be between 0 and {cls.MAX_RATING}, got {rating}")
        return True

    @classmethod
    def format_display(
        cls,
        field_value: FieldValue | None,
        field: FieldDefinition | None = None,
    ) -> str:
        if field_value is None or field_value.numeric_value is None:
            return ""
        filled = max(0, min(cls.MAX_RATING, int(field_value.numeric_value)))
        return "★" * filled + "☆" * (cls.MAX_RATING - filled)
