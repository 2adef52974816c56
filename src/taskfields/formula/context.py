"""Evaluation context for formulas."""

import time
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional

from taskfields.core.exceptions import FormulaReferenceError
from taskfields.values import TypedValue, to_epoch_ms

# Task attributes every formula can reference; they shadow custom fields
BUILTIN_ATTRIBUTES = ("status", "priority", "deadline", "progress", "title", "description")


def current_epoch_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class FormulaContext:
    """
    Values a formula can reference for one task.

    ``fields`` maps custom field names to their values; raw Python values are
    converted with ``TypedValue.from_python`` and the mapping is frozen.
    ``now`` is captured when the context is built so NOW() and TODAY() are
    stable for the lifetime of the context.
    """

    status: Optional[str] = None
    priority: Optional[str] = None
    deadline: Optional[int] = None
    progress: Optional[float] = None
    title: Optional[str] = None
    description: Optional[str] = None
    fields: Mapping[str, Any] = field(default_factory=dict)
    now: int = field(default_factory=current_epoch_ms)

    def __post_init__(self) -> None:
        if isinstance(self.deadline, (datetime, date)):
            object.__setattr__(self, "deadline", to_epoch_ms(self.deadline))
        if isinstance(self.now, (datetime, date)):
            object.__setattr__(self, "now", to_epoch_ms(self.now))
        typed = {str(name): TypedValue.from_python(value) for name, value in self.fields.items()}
        object.__setattr__(self, "fields", MappingProxyType(typed))

    def builtin(self, name: str) -> TypedValue:
        """Value of a built-in task attribute."""
        if name == "deadline":
            if self.deadline is None:
                return TypedValue.null()
            return TypedValue.timestamp(self.deadline)
        return TypedValue.from_python(getattr(self, name))

    def resolve(self, name: str) -> TypedValue:
        """
        Resolve a field reference.

        Built-in attributes resolve first, then custom fields.

        Raises:
            FormulaReferenceError: If the name is neither
        """
        if name in BUILTIN_ATTRIBUTES:
            return self.builtin(name)
        try:
            return self.fields[name]
        except KeyError:
            raise FormulaReferenceError(name) from None
