"""Rollup field type handler.

Rollup fields aggregate the values one source field holds across every task
of a project.
"""

from decimal import Decimal
from typing import Any, Iterable

from taskfields.core.config import settings
from taskfields.core.exceptions import AggregationError
from taskfields.fields.types.formula import FormulaFieldHandler
from taskfields.schemas.field import AggregationKind, FieldType
from taskfields.values import TypedValue, ValueKind


class RollupFieldHandler(FormulaFieldHandler):
    """
    Handler for rollup fields.

    Rollup fields are computed read-only fields. Storage, emptiness and
    filtering follow formula fields.

    Supported aggregation functions:
        - sum: Sum of numeric values (0 when there are none)
        - avg: Average of numeric values
        - min: Minimum numeric value
        - max: Maximum numeric value
        - count: Count of non-empty values of any kind
        - concat: Display text of non-empty values joined by a delimiter

    avg, min and max are undefined over an empty set and raise
    AggregationError. Values that are not numbers are ignored by the
    numeric aggregations; numeric-looking text is not coerced.
    """

    field_type = FieldType.ROLLUP

    AGGREGATIONS = frozenset(kind.value for kind in AggregationKind)

    @classmethod
    def resolve_aggregation(cls, aggregation: AggregationKind | str) -> AggregationKind:
        if isinstance(aggregation, AggregationKind):
            return aggregation
        try:
            return AggregationKind(str(aggregation).strip().lower())
        except ValueError:
            raise AggregationError(
                f"Invalid aggregation '{aggregation}'. "
                f"Supported: {', '.join(sorted(cls.AGGREGATIONS))}"
            ) from None

    @classmethod
    def compute(
        cls,
        values: Iterable[Any],
        aggregation: AggregationKind | str,
        delimiter: str | None = None,
    ) -> TypedValue:
        """
        Compute the aggregate of a collection of values.

        Args:
            values: Source values, one per task; plain Python values or
                TypedValues, with None for tasks that hold no value
            aggregation: Aggregation function
            delimiter: Separator for concat (default from settings)

        Returns:
            Aggregated value

        Raises:
            AggregationError: If the aggregation is unknown or undefined
                for the input
        """
        kind = cls.resolve_aggregation(aggregation)
        typed = [TypedValue.from_python(value) for value in values]

        if kind == AggregationKind.COUNT:
            return TypedValue.number(sum(1 for value in typed if not value.is_empty))

        if kind == AggregationKind.CONCAT:
            if delimiter is None:
                delimiter = settings.rollup_concat_delimiter
            return TypedValue.string(
                delimiter.join(value.to_display() for value in typed if not value.is_empty)
            )

        numbers = [Decimal(str(value.value)) for value in typed if value.kind is ValueKind.NUMBER]

        if kind == AggregationKind.SUM:
            return TypedValue.number(sum(numbers, Decimal(0)))

        if not numbers:
            raise AggregationError(f"Cannot compute {kind.value} of an empty set")

        if kind == AggregationKind.AVG:
            return TypedValue.number(sum(numbers, Decimal(0)) / len(numbers))
        if kind == AggregationKind.MIN:
            return TypedValue.number(min(numbers))
        if kind == AggregationKind.MAX:
            return TypedValue.number(max(numbers))

        raise AggregationError(f"Unsupported aggregation: {kind.value}")
