"""Typed value model shared by the formula, rollup and filter subsystems.

Every evaluation result is a ``TypedValue``: a value tagged with its runtime
kind, so formatting and coercion never depend on the declared type of the
field a value came from.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable

from taskfields.core.exceptions import FormulaTypeError

MS_PER_DAY = 86_400_000

# Floats beyond this magnitude are kept as floats rather than widened to int
_MAX_EXACT_INT = 2**53


class ValueKind(str, Enum):
    """Runtime kinds a TypedValue can carry."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    LIST = "list"
    NULL = "null"


@dataclass(frozen=True)
class TypedValue:
    """
    A value tagged with its kind.

    Payloads by kind:
        STRING: str
        NUMBER: int or float (integral values are stored as int)
        BOOLEAN: bool
        TIMESTAMP: int epoch milliseconds, UTC
        LIST: tuple of str (multiselect selections, in order)
        NULL: None
    """

    kind: ValueKind
    value: Any = None

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def string(cls, value: str) -> "TypedValue":
        return cls(ValueKind.STRING, str(value))

    @classmethod
    def number(cls, value: int | float | Decimal) -> "TypedValue":
        return cls(ValueKind.NUMBER, normalize_number(value))

    @classmethod
    def boolean(cls, value: bool) -> "TypedValue":
        return cls(ValueKind.BOOLEAN, bool(value))

    @classmethod
    def timestamp(cls, epoch_ms: int | float) -> "TypedValue":
        if isinstance(epoch_ms, bool) or not math.isfinite(float(epoch_ms)):
            raise FormulaTypeError(f"Invalid timestamp: {epoch_ms!r}")
        return cls(ValueKind.TIMESTAMP, int(epoch_ms))

    @classmethod
    def list_of(cls, items: Iterable[Any]) -> "TypedValue":
        return cls(ValueKind.LIST, tuple(str(item) for item in items))

    @classmethod
    def null(cls) -> "TypedValue":
        return NULL

    @classmethod
    def from_python(cls, value: Any) -> "TypedValue":
        """Infer a TypedValue from a plain Python value."""
        if value is None:
            return NULL
        if isinstance(value, TypedValue):
            return value
        if isinstance(value, bool):
            return cls.boolean(value)
        if isinstance(value, (int, float, Decimal)):
            return cls.number(value)
        if isinstance(value, (datetime, date)):
            return cls.timestamp(to_epoch_ms(value))
        if isinstance(value, str):
            return cls.string(value)
        if isinstance(value, (list, tuple)):
            return cls.list_of(value)
        return cls.string(str(value))

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    @property
    def is_empty(self) -> bool:
        """Null, the empty string, or an empty selection list."""
        if self.kind is ValueKind.NULL:
            return True
        if self.kind is ValueKind.STRING:
            return self.value == ""
        if self.kind is ValueKind.LIST:
            return len(self.value) == 0
        return False

    @property
    def is_truthy(self) -> bool:
        if self.kind is ValueKind.NULL:
            return False
        if self.kind is ValueKind.BOOLEAN:
            return self.value
        if self.kind is ValueKind.NUMBER:
            return self.value != 0
        if self.kind in (ValueKind.STRING, ValueKind.LIST):
            return len(self.value) > 0
        return True

    def as_number(self) -> int | float | None:
        """
        Attempt a numeric reading of this value.

        Returns None instead of raising when no numeric reading exists.
        """
        if self.kind in (ValueKind.NUMBER, ValueKind.TIMESTAMP):
            return self.value
        if self.kind is ValueKind.BOOLEAN:
            return 1 if self.value else 0
        if self.kind is ValueKind.STRING:
            parsed = parse_number(self.value)
            return None if parsed is None else normalize_number(parsed)
        return None

    def to_display(self) -> str:
        """String form used for concatenation and text comparisons."""
        if self.kind is ValueKind.NULL:
            return ""
        if self.kind is ValueKind.STRING:
            return self.value
        if self.kind is ValueKind.NUMBER:
            return format_number(self.value)
        if self.kind is ValueKind.BOOLEAN:
            return "TRUE" if self.value else "FALSE"
        if self.kind is ValueKind.TIMESTAMP:
            return format_timestamp(self.value)
        if self.kind is ValueKind.LIST:
            return ", ".join(self.value)
        raise AssertionError(f"Unhandled value kind: {self.kind}")

    def to_python(self) -> Any:
        if self.kind is ValueKind.LIST:
            return list(self.value)
        return self.value

    def __str__(self) -> str:
        return self.to_display()


NULL = TypedValue(ValueKind.NULL, None)


# =============================================================================
# Conversion helpers
# =============================================================================


def normalize_number(value: int | float | Decimal) -> int | float:
    """Store integral numbers as int, reject booleans and non-finite values."""
    if isinstance(value, bool):
        raise FormulaTypeError("Boolean is not a number")
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise FormulaTypeError(f"Number out of range: {value}")
        if value == value.to_integral_value() and abs(value) < _MAX_EXACT_INT:
            return int(value)
    result = float(value)
    if not math.isfinite(result):
        raise FormulaTypeError(f"Number out of range: {value}")
    if result.is_integer() and abs(result) < _MAX_EXACT_INT:
        return int(result)
    return result


def format_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    if value.is_integer() and abs(value) < _MAX_EXACT_INT:
        return str(int(value))
    return repr(value)


def parse_number(text: Any) -> float | None:
    """Parse a finite number from user input, None on failure."""
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float, Decimal)):
        result = float(text)
        return result if math.isfinite(result) else None
    candidate = str(text).strip()
    if not candidate or "_" in candidate:
        return None
    try:
        result = float(candidate)
    except ValueError:
        return None
    return result if math.isfinite(result) else None


def to_epoch_ms(value: datetime | date) -> int:
    """Convert a date or datetime to epoch milliseconds. Naive values are UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(round(value.timestamp() * 1000))
    return int(datetime(value.year, value.month, value.day, tzinfo=timezone.utc).timestamp()) * 1000


def from_epoch_ms(epoch_ms: int) -> datetime:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)


def parse_timestamp(text: Any) -> int | None:
    """
    Parse a timestamp from user input.

    Accepts ISO dates (``2025-01-15``), ISO datetimes with optional ``Z`` or
    offset, integer epoch milliseconds, and date/datetime objects.

    Returns:
        Epoch milliseconds (UTC), or None if the input cannot be parsed
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (datetime, date)):
        return to_epoch_ms(text)
    if isinstance(text, int):
        return text
    candidate = str(text).strip()
    if not candidate:
        return None
    if candidate.lstrip("-").isdigit():
        return int(candidate)
    try:
        return to_epoch_ms(date.fromisoformat(candidate))
    except ValueError:
        pass
    try:
        return to_epoch_ms(datetime.fromisoformat(candidate.replace("Z", "+00:00")))
    except ValueError:
        return None


def format_timestamp(epoch_ms: int) -> str:
    """ISO form of a timestamp; midnight values render as plain dates."""
    moment = from_epoch_ms(epoch_ms)
    if epoch_ms % MS_PER_DAY == 0:
        return moment.date().isoformat()
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")
