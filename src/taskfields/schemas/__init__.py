"""Schemas exchanged between the evaluation core and its callers."""

from taskfields.schemas.field import (
    AggregationKind,
    FieldDefinition,
    FieldOption,
    FieldType,
    FieldValue,
    RollupConfig,
    TaskSnapshot,
)
from taskfields.schemas.filter import FilterOperator, FilterRule
from taskfields.schemas.formula import (
    FormulaFailure,
    FormulaResult,
    FormulaSuccess,
    FormulaValidation,
    FunctionSignature,
)

__all__ = [
    "AggregationKind",
    "FieldDefinition",
    "FieldOption",
    "FieldType",
    "FieldValue",
    "FilterOperator",
    "FilterRule",
    "FormulaFailure",
    "FormulaResult",
    "FormulaSuccess",
    "FormulaValidation",
    "FunctionSignature",
    "RollupConfig",
    "TaskSnapshot",
]
