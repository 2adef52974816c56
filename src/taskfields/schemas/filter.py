"""Filter schemas for custom field predicates."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FilterOperator(str, Enum):
    """Filter operators across all field types."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_OR_EQUAL = "greater_or_equal"
    LESS_OR_EQUAL = "less_or_equal"
    BEFORE = "before"
    AFTER = "after"
    IS_TRUE = "is_true"
    IS_FALSE = "is_false"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"


class FilterRule(BaseModel):
    """A single (field, operator, operand) filter condition."""

    model_config = ConfigDict(frozen=True)

    field_id: int | str = Field(..., description="Field to filter on")
    operator: FilterOperator = Field(..., description="Filter operator")
    value: str = Field(default="", description="Operand, as entered by the user")
    id: Optional[str] = Field(None, description="Client-side rule identifier")
