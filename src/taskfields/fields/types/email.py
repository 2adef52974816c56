"""Email field type handler."""

import re

from taskfields.fields.types.text import TextFieldHandler
from taskfields.schemas.field import FieldDefinition, FieldType, FieldValue


class EmailFieldHandler(TextFieldHandler):
    """Handler for email field type."""

    field_type = FieldType.EMAIL

    # RFC 5322 simplified email regex
    EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

    @classmethod
    def validate(cls, field_value: FieldValue, field: FieldDefinition | None = None) -> bool:
        email = (field_value.value or "").strip()
        if not email:
            return True
        if not cls.EMAIL_PATTERN.match(email):
            raise ValueError(f"Invalid email address: {email}")
        return True
