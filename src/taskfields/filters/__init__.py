"""Filter predicates over custom field values."""

from taskfields.filters.engine import (
    build_fields_index,
    build_filter_rule,
    build_values_index,
    filter_tasks,
    task_passes_all_filters,
    task_passes_filter,
    validate_filter_rule,
)
from taskfields.filters.operators import (
    FIELD_OPERATORS,
    OPERATOR_LABELS,
    get_operators_for_type,
    is_operator_allowed,
    operator_needs_value,
)

__all__ = [
    "FIELD_OPERATORS",
    "OPERATOR_LABELS",
    "build_fields_index",
    "build_filter_rule",
    "build_values_index",
    "filter_tasks",
    "get_operators_for_type",
    "is_operator_allowed",
    "operator_needs_value",
    "task_passes_all_filters",
    "task_passes_filter",
    "validate_filter_rule",
]
