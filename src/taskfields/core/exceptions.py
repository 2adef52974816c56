"""
Custom exceptions for taskfields.

Provides a hierarchy of exceptions that map to the spreadsheet-style error
codes rendered in formula cells and include structured error information.
Formula errors are raised internally and converted into result objects at the
public entry points; only rule-construction errors reach callers.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes surfaced in formula and rollup results."""

    REF = "#REF!"
    ERROR = "#ERROR!"
    DIV_ZERO = "#DIV/0!"


class ValidationErrorKind(str, Enum):
    """Distinct failure kinds reported by formula validation."""

    SYNTAX = "syntax"
    UNBALANCED = "unbalanced"
    UNKNOWN_FUNCTION = "unknown_function"
    UNKNOWN_FIELD = "unknown_field"
    INVALID_ARGUMENTS = "invalid_arguments"


class TaskFieldsError(Exception):
    """
    Base exception for all taskfields errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error details
        """
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging or transport."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Field and filter definition errors
# =============================================================================


class InvalidFieldTypeError(TaskFieldsError):
    """Unknown field type specified."""

    def __init__(self, field_type: str) -> None:
        super().__init__(
            message=f"Invalid field type: {field_type}",
            code="INVALID_FIELD_TYPE",
            details={"field_type": field_type},
        )


class InvalidFilterRuleError(TaskFieldsError):
    """Filter rule is structurally invalid for its field."""

    def __init__(self, message: str, field_id: Any = None, operator: str | None = None) -> None:
        super().__init__(
            message=message,
            code="INVALID_FILTER_RULE",
            details={"field_id": field_id, "operator": operator},
        )


# =============================================================================
# Formula errors
# =============================================================================


class FormulaError(TaskFieldsError):
    """Formula could not be parsed or evaluated."""

    error_code: ErrorCode = ErrorCode.ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code=self.error_code.value, details=details)


class FormulaSyntaxError(FormulaError):
    """Formula source is malformed."""

    def __init__(
        self,
        message: str,
        kind: ValidationErrorKind = ValidationErrorKind.SYNTAX,
        position: int | None = None,
    ) -> None:
        self.kind = kind
        self.position = position
        super().__init__(message, details={"kind": kind.value, "position": position})


class FormulaReferenceError(FormulaError):
    """Formula or rollup names a field that does not exist."""

    error_code = ErrorCode.REF

    def __init__(self, field_name: str, message: str | None = None) -> None:
        self.field_name = field_name
        super().__init__(
            message or f"Unknown field: {field_name}",
            details={"field_name": field_name},
        )


class FormulaDivisionError(FormulaError):
    """Division or modulo by zero."""

    error_code = ErrorCode.DIV_ZERO

    def __init__(self, message: str = "Division by zero") -> None:
        super().__init__(message)


class FormulaTypeError(FormulaError):
    """Operator or function applied to values of an unsupported kind."""


class UnknownFunctionError(FormulaError):
    """Formula calls a function that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown function: {name}", details={"function": name})


class FormulaArgumentError(FormulaError):
    """Function called with the wrong number of arguments."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(message, details={"function": name})


class AggregationError(FormulaError):
    """Rollup aggregation is unknown or undefined for its input."""
