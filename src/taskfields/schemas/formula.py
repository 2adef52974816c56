"""Formula schemas: evaluation results, validation reports and signatures."""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from taskfields.core.exceptions import ErrorCode, FormulaError, ValidationErrorKind
from taskfields.values import TypedValue, ValueKind


class FormulaSuccess(BaseModel):
    """Successful formula or rollup evaluation."""

    model_config = ConfigDict(frozen=True)

    success: Literal[True] = True
    value: Any = Field(None, description="Result payload")
    type: ValueKind = Field(..., description="Runtime kind of the result")

    @classmethod
    def from_typed(cls, typed: TypedValue) -> "FormulaSuccess":
        return cls(value=typed.to_python(), type=typed.kind)

    @property
    def typed_value(self) -> TypedValue:
        if self.type is ValueKind.LIST:
            return TypedValue.list_of(self.value)
        return TypedValue(self.type, self.value)


class FormulaFailure(BaseModel):
    """Failed formula or rollup evaluation."""

    model_config = ConfigDict(frozen=True)

    success: Literal[False] = False
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Code rendered verbatim in the cell")

    @classmethod
    def from_error(cls, exc: FormulaError) -> "FormulaFailure":
        return cls(error=exc.message, error_code=exc.error_code)


FormulaResult = Union[FormulaSuccess, FormulaFailure]


class FormulaValidation(BaseModel):
    """Outcome of validating a formula without evaluating it."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    error: Optional[str] = None
    kind: Optional[ValidationErrorKind] = None
    position: Optional[int] = None


class FunctionSignature(BaseModel):
    """Description of a formula function for editor autocomplete and help."""

    model_config = ConfigDict(frozen=True)

    name: str
    category: str
    description: str
    syntax: str
    min_args: int = 0
    max_args: Optional[int] = Field(None, description="None means variadic")
    returns: Optional[ValueKind] = Field(None, description="None when it depends on arguments")
