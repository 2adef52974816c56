"""
taskfields - Typed evaluation core for custom task fields.

Attaches arbitrarily-typed custom fields to work items, computes derived
values for formula and rollup fields, and filters work items by predicates
over any field. Every entry point is pure: callers supply already-loaded
field definitions and values, the core never performs I/O.
"""

__version__ = "0.1.0"
__author__ = "taskfields Team"
__license__ = "MIT"

from taskfields.filters import task_passes_all_filters, task_passes_filter
from taskfields.formula import (
    FormulaContext,
    evaluate_formula,
    evaluate_rollup,
    extract_field_refs,
    get_available_functions,
    validate_formula,
)
from taskfields.services import CustomFieldService
from taskfields.values import TypedValue, ValueKind

__all__ = [
    "__version__",
    "CustomFieldService",
    "FormulaContext",
    "TypedValue",
    "ValueKind",
    "evaluate_formula",
    "evaluate_rollup",
    "extract_field_refs",
    "get_available_functions",
    "task_passes_all_filters",
    "task_passes_filter",
    "validate_formula",
]
