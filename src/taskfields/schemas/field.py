"""Field schemas for custom field definitions, stored values and tasks."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class FieldType(str, Enum):
    """Available custom field types."""

    # Text Types
    TEXT = "text"
    URL = "url"
    EMAIL = "email"

    # Numeric Types
    NUMBER = "number"
    CURRENCY = "currency"
    PERCENT = "percent"
    RATING = "rating"

    # Date/Boolean Types
    DATE = "date"
    CHECKBOX = "checkbox"

    # Selection Types
    SELECT = "select"
    MULTISELECT = "multiselect"

    # Computed Types
    FORMULA = "formula"
    ROLLUP = "rollup"


NUMERIC_FIELD_TYPES = frozenset(
    {FieldType.NUMBER, FieldType.CURRENCY, FieldType.PERCENT, FieldType.RATING}
)
COMPUTED_FIELD_TYPES = frozenset({FieldType.FORMULA, FieldType.ROLLUP})
SELECT_FIELD_TYPES = frozenset({FieldType.SELECT, FieldType.MULTISELECT})


class AggregationKind(str, Enum):
    """Rollup aggregation functions."""

    SUM = "sum"
    AVG = "avg"
    COUNT = "count"
    MIN = "min"
    MAX = "max"
    CONCAT = "concat"


class FieldOption(BaseModel):
    """A choice of a select or multiselect field."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1, description="Display label")
    value: str = Field(..., min_length=1, description="Stored value")
    color: Optional[str] = Field(None, description="Display color")


class RollupConfig(BaseModel):
    """Source and aggregation of a rollup field."""

    model_config = ConfigDict(frozen=True)

    source_field_name: str = Field(
        ..., min_length=1, description="Name of the field aggregated across tasks"
    )
    aggregation: AggregationKind = Field(..., description="Aggregation function")


class FieldDefinition(BaseModel):
    """
    A custom field attached to the tasks of a project.

    Only formula fields carry a formula, only rollup fields carry a rollup
    configuration, and only currency fields carry a currency code.
    """

    model_config = ConfigDict(frozen=True)

    id: int | str = Field(..., description="Field ID")
    name: str = Field(..., min_length=1, max_length=100, description="Field name")
    type: FieldType = Field(..., description="Field type")
    options: list[FieldOption] = Field(
        default_factory=list, description="Ordered choices for select/multiselect"
    )
    formula: Optional[str] = Field(None, description="Formula source (formula fields)")
    rollup_config: Optional[RollupConfig] = Field(
        None, description="Rollup configuration (rollup fields)"
    )
    currency_code: Optional[str] = Field(
        None, min_length=3, max_length=3, description="ISO 4217 code (currency fields)"
    )

    @field_validator("currency_code", mode="before")
    @classmethod
    def normalize_currency_code(cls, v: Optional[str]) -> Optional[str]:
        """Currency codes are stored upper-case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @model_validator(mode="after")
    def check_type_specific_settings(self) -> "FieldDefinition":
        """Enforce which settings each field type may carry."""
        if self.type == FieldType.FORMULA:
            if self.formula is None:
                raise ValueError("Formula field must specify a formula")
        elif self.formula is not None:
            raise ValueError(f"Field of type '{self.type.value}' cannot have a formula")

        if self.type == FieldType.ROLLUP:
            if self.rollup_config is None:
                raise ValueError("Rollup field must specify a rollup configuration")
        elif self.rollup_config is not None:
            raise ValueError(
                f"Field of type '{self.type.value}' cannot have a rollup configuration"
            )

        if self.currency_code is not None and self.type != FieldType.CURRENCY:
            raise ValueError(f"Field of type '{self.type.value}' cannot have a currency code")

        if self.options and self.type not in SELECT_FIELD_TYPES:
            raise ValueError(f"Field of type '{self.type.value}' cannot have options")

        return self

    @property
    def is_computed(self) -> bool:
        return self.type in COMPUTED_FIELD_TYPES

    def option_label(self, value: str) -> str:
        """Label of the option stored as ``value``, or the value itself."""
        for option in self.options:
            if option.value == value:
                return option.label
        return value


class FieldValue(BaseModel):
    """
    The stored value of one field on one task.

    At most one slot is populated; which one depends on the field type.
    A value with no populated slot is empty.
    """

    model_config = ConfigDict(frozen=True)

    field_id: int | str = Field(..., description="Field ID")
    task_id: int | str = Field(..., description="Task ID")
    value: Optional[str] = Field(None, description="text/url/email/select slot")
    numeric_value: Optional[Decimal] = Field(
        None, description="number/currency/percent/rating slot"
    )
    date_value: Optional[datetime] = Field(None, description="date slot")
    boolean_value: Optional[bool] = Field(None, description="checkbox slot")
    list_value: Optional[list[str]] = Field(None, description="multiselect slot")

    @property
    def is_blank(self) -> bool:
        """True when no slot is populated."""
        return (
            self.value is None
            and self.numeric_value is None
            and self.date_value is None
            and self.boolean_value is None
            and self.list_value is None
        )


class TaskSnapshot(BaseModel):
    """Built-in attributes of a task as loaded by the caller."""

    model_config = ConfigDict(frozen=True)

    id: int | str = Field(..., description="Task ID")
    title: str = Field(default="", description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    status: Optional[str] = Field(None, description="Workflow status")
    priority: Optional[str] = Field(None, description="Priority")
    deadline: Optional[datetime] = Field(None, description="Deadline")
    progress: Optional[float] = Field(None, description="Progress percentage")
