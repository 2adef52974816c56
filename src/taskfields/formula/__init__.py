"""Formula engine for task fields.

This module provides the formula evaluation system:
- Arithmetic operations (+, -, *, /, %, ^)
- Comparison operations (=, !=, <, >, <=, >=)
- Logical operations (AND, OR, NOT) with short-circuiting
- Text functions (CONCAT, LEFT, RIGHT, MID, LEN, TRIM, etc.)
- Numeric functions (SUM, AVG, MIN, MAX, ROUND, ABS, etc.)
- Logical functions (IF, IFS, SWITCH, IFERROR, etc.)
- Date functions (NOW, TODAY, DAYS_BETWEEN, DATE_ADD, etc.)
- Field references ({Field Name}, {{Field Name}}, field("Field Name"))
- Rollup aggregation over a field's values across tasks
"""

from taskfields.formula.context import BUILTIN_ATTRIBUTES, FormulaContext
from taskfields.formula.dependencies import FormulaDependencyGraph
from taskfields.formula.engine import (
    evaluate_formula,
    evaluate_rollup,
    extract_field_refs,
    get_available_functions,
    validate_formula,
)
from taskfields.formula.evaluator import FormulaEvaluator
from taskfields.formula.functions import FORMULA_FUNCTIONS, register_function
from taskfields.formula.parser import FormulaParser, get_parser

__all__ = [
    "BUILTIN_ATTRIBUTES",
    "FORMULA_FUNCTIONS",
    "FormulaContext",
    "FormulaDependencyGraph",
    "FormulaEvaluator",
    "FormulaParser",
    "evaluate_formula",
    "evaluate_rollup",
    "extract_field_refs",
    "get_available_functions",
    "get_parser",
    "register_function",
    "validate_formula",
]
