"""Public entry points of the formula engine.

Evaluation never raises: every failure becomes a ``FormulaFailure`` whose
error code is rendered verbatim in the cell.
"""

from typing import Any, Iterable, Optional

from taskfields.core.config import settings
from taskfields.core.exceptions import (
    FormulaArgumentError,
    FormulaError,
    FormulaSyntaxError,
    FormulaTypeError,
    UnknownFunctionError,
    ValidationErrorKind,
)
from taskfields.core.logging import get_logger
from taskfields.fields.types.rollup import RollupFieldHandler
from taskfields.formula.context import BUILTIN_ATTRIBUTES, FormulaContext
from taskfields.formula.evaluator import FormulaEvaluator
from taskfields.formula.functions import FORMULA_FUNCTIONS
from taskfields.formula.parser import get_parser
from taskfields.formula.references import extract_field_refs
from taskfields.schemas.field import AggregationKind
from taskfields.schemas.formula import (
    FormulaFailure,
    FormulaResult,
    FormulaSuccess,
    FormulaValidation,
    FunctionSignature,
)
from taskfields.values import TypedValue

logger = get_logger(__name__)

_OPENERS = {"(": ")", "{": "}"}
_CLOSERS = {")": "(", "}": "{"}


def _check_length(source: str) -> None:
    if len(source) > settings.formula_max_length:
        raise FormulaSyntaxError(
            f"Formula exceeds {settings.formula_max_length} characters",
            position=settings.formula_max_length,
        )


def evaluate_formula(source: Optional[str], context: FormulaContext | None = None) -> FormulaResult:
    """
    Evaluate a formula for one task.

    Args:
        source: Formula source; empty or blank sources evaluate to null
        context: Values the formula can reference

    Returns:
        FormulaSuccess with the value and its runtime kind, or FormulaFailure
        with #REF!, #DIV/0! or #ERROR!
    """
    if source is None or not source.strip():
        return FormulaSuccess.from_typed(TypedValue.null())

    try:
        _check_length(source)
        ast = get_parser().parse(source)
        value = FormulaEvaluator(context).evaluate(ast)
    except FormulaError as e:
        logger.debug(
            "Formula evaluation failed: %s",
            e.message,
            extra={"formula": source, "error_code": e.code},
        )
        return FormulaFailure.from_error(e)
    except RecursionError:
        logger.debug("Formula nested too deeply", extra={"formula": source})
        return FormulaFailure.from_error(FormulaTypeError("Formula is nested too deeply"))

    return FormulaSuccess.from_typed(value)


def evaluate_rollup(
    aggregation: AggregationKind | str,
    values: Iterable[Any],
    delimiter: str | None = None,
) -> FormulaResult:
    """
    Aggregate the values of a source field across tasks.

    Args:
        aggregation: sum, avg, count, min, max or concat
        values: Source values gathered by the caller, one per task
        delimiter: Separator for concat (default from settings)

    Returns:
        FormulaSuccess with the aggregate, or FormulaFailure (#ERROR!) for an
        unknown aggregation or avg/min/max over no numbers
    """
    try:
        value = RollupFieldHandler.compute(values, aggregation, delimiter=delimiter)
    except FormulaError as e:
        logger.debug(
            "Rollup evaluation failed: %s",
            e.message,
            extra={"aggregation": str(aggregation), "error_code": e.code},
        )
        return FormulaFailure.from_error(e)
    return FormulaSuccess.from_typed(value)


def _check_balance(source: str) -> None:
    """
    Check that parentheses, braces and quotes are balanced.

    Raises:
        FormulaSyntaxError: With kind UNBALANCED and the offending position
    """
    stack: list[tuple[str, int]] = []
    quote: str | None = None
    quote_start = 0
    escaped = False

    for position, char in enumerate(source):
        if quote is not None:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote, quote_start = char, position
        elif char in _OPENERS:
            stack.append((char, position))
        elif char in _CLOSERS:
            if not stack or stack[-1][0] != _CLOSERS[char]:
                raise FormulaSyntaxError(
                    f"Unexpected '{char}' at position {position}",
                    kind=ValidationErrorKind.UNBALANCED,
                    position=position,
                )
            stack.pop()

    if quote is not None:
        raise FormulaSyntaxError(
            f"Unterminated string starting at position {quote_start}",
            kind=ValidationErrorKind.UNBALANCED,
            position=quote_start,
        )
    if stack:
        char, position = stack[-1]
        raise FormulaSyntaxError(
            f"Unclosed '{char}' at position {position}",
            kind=ValidationErrorKind.UNBALANCED,
            position=position,
        )


def validate_formula(
    source: Optional[str],
    known_fields: Iterable[str] | None = None,
) -> FormulaValidation:
    """
    Check a formula without evaluating it.

    Reports, in this order: unbalanced delimiters, syntax errors, unknown
    functions, wrong argument counts, and (only when ``known_fields`` is
    given) references to fields outside it. Built-in task attributes are
    always known. An empty formula is valid.

    Args:
        source: Formula source
        known_fields: Names of the fields of the project

    Returns:
        FormulaValidation describing the first problem found
    """
    if source is None or not source.strip():
        return FormulaValidation(valid=True)

    parser = get_parser()
    try:
        _check_length(source)
        _check_balance(source)
        parser.parse(source)
        for call in parser.get_function_calls(source):
            func = FORMULA_FUNCTIONS.get(call.name)
            if func is None:
                raise UnknownFunctionError(call.name)
            func.check_arity(len(call.arguments))
    except FormulaSyntaxError as e:
        return FormulaValidation(valid=False, error=e.message, kind=e.kind, position=e.position)
    except UnknownFunctionError as e:
        return FormulaValidation(
            valid=False, error=e.message, kind=ValidationErrorKind.UNKNOWN_FUNCTION
        )
    except FormulaArgumentError as e:
        return FormulaValidation(
            valid=False, error=e.message, kind=ValidationErrorKind.INVALID_ARGUMENTS
        )

    if known_fields is not None:
        known = set(known_fields) | set(BUILTIN_ATTRIBUTES)
        for name in extract_field_refs(source):
            if name not in known:
                return FormulaValidation(
                    valid=False,
                    error=f"Unknown field: {name}",
                    kind=ValidationErrorKind.UNKNOWN_FIELD,
                )

    return FormulaValidation(valid=True)


def get_available_functions() -> list[FunctionSignature]:
    """Signatures of every formula function, aliases included, sorted by name."""
    return [
        FunctionSignature(
            name=func.name,
            category=func.category,
            description=func.description,
            syntax=func.syntax,
            min_args=func.min_args,
            max_args=func.max_args,
            returns=func.returns,
        )
        for func in sorted(FORMULA_FUNCTIONS.values(), key=lambda f: f.name)
    ]


__all__ = [
    "evaluate_formula",
    "evaluate_rollup",
    "extract_field_refs",
    "get_available_functions",
    "validate_formula",
]
