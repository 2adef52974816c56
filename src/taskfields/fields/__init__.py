"""Field type handlers for taskfields.

Each of the thirteen custom field types has a handler describing how its
stored slot reads as a TypedValue, when it is empty, and how filter
operators compare it.
"""

from taskfields.core.exceptions import InvalidFieldTypeError
from taskfields.fields.base import BaseFieldTypeHandler
from taskfields.fields.types import (
    CheckboxFieldHandler,
    CurrencyFieldHandler,
    DateFieldHandler,
    EmailFieldHandler,
    FormulaFieldHandler,
    MultiSelectFieldHandler,
    NumberFieldHandler,
    PercentFieldHandler,
    RatingFieldHandler,
    RollupFieldHandler,
    SingleSelectFieldHandler,
    TextFieldHandler,
    URLFieldHandler,
)
from taskfields.schemas.field import FieldType

# Registry of field type handlers
FIELD_HANDLERS: dict[FieldType, type[BaseFieldTypeHandler]] = {
    # Text types
    TextFieldHandler.field_type: TextFieldHandler,
    URLFieldHandler.field_type: URLFieldHandler,
    EmailFieldHandler.field_type: EmailFieldHandler,
    # Numeric types
    NumberFieldHandler.field_type: NumberFieldHandler,
    CurrencyFieldHandler.field_type: CurrencyFieldHandler,
    PercentFieldHandler.field_type: PercentFieldHandler,
    RatingFieldHandler.field_type: RatingFieldHandler,
    # Date/boolean types
    DateFieldHandler.field_type: DateFieldHandler,
    CheckboxFieldHandler.field_type: CheckboxFieldHandler,
    # Selection types
    SingleSelectFieldHandler.field_type: SingleSelectFieldHandler,
    MultiSelectFieldHandler.field_type: MultiSelectFieldHandler,
    # Computed types
    FormulaFieldHandler.field_type: FormulaFieldHandler,
    RollupFieldHandler.field_type: RollupFieldHandler,
}


def get_field_handler(field_type: FieldType | str) -> type[BaseFieldTypeHandler] | None:
    """
    Get field handler for given field type.

    Args:
        field_type: Field type or its string identifier

    Returns:
        Field handler class or None if not found
    """
    try:
        return FIELD_HANDLERS.get(FieldType(field_type))
    except ValueError:
        return None


def require_field_handler(field_type: FieldType | str) -> type[BaseFieldTypeHandler]:
    """
    Get field handler for given field type.

    Raises:
        InvalidFieldTypeError: If no handler is registered for the type
    """
    handler = get_field_handler(field_type)
    if handler is None:
        raise InvalidFieldTypeError(str(getattr(field_type, "value", field_type)))
    return handler


def register_field_handler(handler: type[BaseFieldTypeHandler]) -> None:
    """
    Register a field handler, replacing any handler for the same type.

    Args:
        handler: Field handler class to register
    """
    FIELD_HANDLERS[FieldType(handler.field_type)] = handler


def list_field_types() -> list[str]:
    """
    List all registered field types.

    Returns:
        List of field type identifiers
    """
    return [field_type.value for field_type in FIELD_HANDLERS]


__all__ = [
    "BaseFieldTypeHandler",
    "FIELD_HANDLERS",
    "get_field_handler",
    "require_field_handler",
    "register_field_handler",
    "list_field_types",
    "TextFieldHandler",
    "URLFieldHandler",
    "EmailFieldHandler",
    "NumberFieldHandler",
    "CurrencyFieldHandler",
    "PercentFieldHandler",
    "RatingFieldHandler",
    "DateFieldHandler",
    "CheckboxFieldHandler",
    "SingleSelectFieldHandler",
    "MultiSelectFieldHandler",
    "FormulaFieldHandler",
    "RollupFieldHandler",
]
