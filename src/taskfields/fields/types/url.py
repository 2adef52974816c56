"""URL field type handler."""

import re

from taskfields.fields.types.text import TextFieldHandler
from taskfields.schemas.field import FieldDefinition, FieldType, FieldValue


class URLFieldHandler(TextFieldHandler):
    """
    Handler for URL field type.

    Filters like a text field. Entered values must carry a scheme.
    """

    field_type = FieldType.URL

    URL_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://[^\s/]+\S*$")

    @classmethod
    def validate(cls, field_value: FieldValue, field: FieldDefinition | None = None) -> bool:
        url = (field_value.value or "").strip()
        if not url:
            return True
        if not cls.URL_PATTERN.match(url):
            raise ValueError(f"Invalid URL: {url}")
        return True
