"""Operator registry: the legal filter operators of each field type.

This table is the single source consulted by rule validation, by the
predicate engine and by editors populating their operator pickers.
"""

from taskfields.schemas.field import FieldType
from taskfields.schemas.filter import FilterOperator

_TEXT_OPERATORS = (
    FilterOperator.CONTAINS,
    FilterOperator.EQUALS,
    FilterOperator.NOT_CONTAINS,
    FilterOperator.IS_EMPTY,
    FilterOperator.IS_NOT_EMPTY,
)

_NUMBER_OPERATORS = (
    FilterOperator.EQUALS,
    FilterOperator.NOT_EQUALS,
    FilterOperator.GREATER_THAN,
    FilterOperator.LESS_THAN,
    FilterOperator.GREATER_OR_EQUAL,
    FilterOperator.LESS_OR_EQUAL,
    FilterOperator.IS_EMPTY,
    FilterOperator.IS_NOT_EMPTY,
)

_COMPUTED_OPERATORS = (
    FilterOperator.EQUALS,
    FilterOperator.CONTAINS,
    FilterOperator.IS_EMPTY,
    FilterOperator.IS_NOT_EMPTY,
)

FIELD_OPERATORS: dict[FieldType, tuple[FilterOperator, ...]] = {
    FieldType.TEXT: _TEXT_OPERATORS,
    FieldType.URL: _TEXT_OPERATORS,
    FieldType.EMAIL: _TEXT_OPERATORS,
    FieldType.NUMBER: _NUMBER_OPERATORS,
    FieldType.CURRENCY: _NUMBER_OPERATORS,
    FieldType.PERCENT: _NUMBER_OPERATORS,
    FieldType.DATE: (
        FilterOperator.EQUALS,
        FilterOperator.BEFORE,
        FilterOperator.AFTER,
        FilterOperator.IS_EMPTY,
        FilterOperator.IS_NOT_EMPTY,
    ),
    FieldType.CHECKBOX: (
        FilterOperator.IS_TRUE,
        FilterOperator.IS_FALSE,
    ),
    FieldType.SELECT: (
        FilterOperator.EQUALS,
        FilterOperator.NOT_EQUALS,
        FilterOperator.IS_EMPTY,
        FilterOperator.IS_NOT_EMPTY,
    ),
    FieldType.MULTISELECT: (
        FilterOperator.CONTAINS,
        FilterOperator.NOT_CONTAINS,
        FilterOperator.IS_EMPTY,
        FilterOperator.IS_NOT_EMPTY,
    ),
    FieldType.RATING: (
        FilterOperator.EQUALS,
        FilterOperator.GREATER_THAN,
        FilterOperator.LESS_THAN,
        FilterOperator.GREATER_OR_EQUAL,
        FilterOperator.LESS_OR_EQUAL,
    ),
    FieldType.FORMULA: _COMPUTED_OPERATORS,
    FieldType.ROLLUP: _COMPUTED_OPERATORS,
}

# Operators that test the stored value alone and take no operand
VALUELESS_OPERATORS = frozenset(
    {
        FilterOperator.IS_EMPTY,
        FilterOperator.IS_NOT_EMPTY,
        FilterOperator.IS_TRUE,
        FilterOperator.IS_FALSE,
    }
)

OPERATOR_LABELS: dict[FilterOperator, str] = {
    FilterOperator.EQUALS: "is",
    FilterOperator.NOT_EQUALS: "is not",
    FilterOperator.CONTAINS: "contains",
    FilterOperator.NOT_CONTAINS: "does not contain",
    FilterOperator.GREATER_THAN: ">",
    FilterOperator.LESS_THAN: "<",
    FilterOperator.GREATER_OR_EQUAL: "≥",
    FilterOperator.LESS_OR_EQUAL: "≤",
    FilterOperator.BEFORE: "is before",
    FilterOperator.AFTER: "is after",
    FilterOperator.IS_TRUE: "is checked",
    FilterOperator.IS_FALSE: "is unchecked",
    FilterOperator.IS_EMPTY: "is empty",
    FilterOperator.IS_NOT_EMPTY: "is not empty",
}


def get_operators_for_type(field_type: FieldType | str) -> tuple[FilterOperator, ...]:
    """
    Get the operators registered for a field type.

    Args:
        field_type: Field type or its string identifier

    Returns:
        Operators in picker order, empty for unknown types
    """
    try:
        return FIELD_OPERATORS[FieldType(field_type)]
    except ValueError:
        return ()


def is_operator_allowed(field_type: FieldType | str, operator: FilterOperator | str) -> bool:
    try:
        return FilterOperator(operator) in get_operators_for_type(field_type)
    except ValueError:
        return False


def operator_needs_value(operator: FilterOperator | str) -> bool:
    """Whether the operator compares against a user-supplied operand."""
    return FilterOperator(operator) not in VALUELESS_OPERATORS
