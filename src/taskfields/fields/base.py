"""Base class for field type handlers."""

from abc import ABC, abstractmethod
from typing import Any

from taskfields.schemas.field import FieldDefinition, FieldType, FieldValue
from taskfields.schemas.filter import FilterOperator
from taskfields.values import TypedValue


class BaseFieldTypeHandler(ABC):
    """
    Base class for field type handlers.

    Each field type (text, number, date, etc.) implements this class to
    describe how its stored slot is read as a TypedValue, when it counts as
    empty, and how filter operators compare it against a rule operand.

    Handlers never see operators outside their type's registered set; the
    filter engine checks the registry first. Operators a handler does not
    recognise are treated as passing.

    Example:
        class MyFieldHandler(BaseFieldTypeHandler):
            field_type = FieldType.TEXT

            @classmethod
            def to_typed_value(cls, field_value):
                if field_value is None or field_value.value is None:
                    return TypedValue.null()
                return TypedValue.string(field_value.value)
    """

    field_type: FieldType

    @classmethod
    @abstractmethod
    def to_typed_value(cls, field_value: FieldValue | None) -> TypedValue:
        """
        Read the stored slot of this field type.

        Args:
            field_value: Stored value, or None when the task has none

        Returns:
            TypedValue for the slot, null when the slot is unset
        """

    @classmethod
    @abstractmethod
    def is_empty(cls, field_value: FieldValue | None) -> bool:
        """
        Type-aware emptiness.

        Args:
            field_value: Stored value, or None when the task has none

        Returns:
            True if the field counts as empty on the task
        """

    @classmethod
    @abstractmethod
    def matches(
        cls,
        operator: FilterOperator,
        field_value: FieldValue,
        operand: str,
    ) -> bool:
        """
        Compare a stored value against a rule operand.

        Args:
            operator: Filter operator other than is_empty/is_not_empty
            field_value: Stored value
            operand: Operand as entered by the user

        Returns:
            True if the value satisfies the operator
        """

    @classmethod
    @abstractmethod
    def from_typed_value(
        cls,
        field_id: Any,
        task_id: Any,
        typed: TypedValue,
    ) -> FieldValue:
        """
        Store a TypedValue in this field type's slot.

        Args:
            field_id: Field the value belongs to
            task_id: Task the value belongs to
            typed: Value to store; null produces an empty FieldValue

        Returns:
            FieldValue with the matching slot populated
        """

    @classmethod
    def validate(cls, field_value: FieldValue, field: FieldDefinition | None = None) -> bool:
        """
        Validate a value entered for this field type.

        Args:
            field_value: Value to validate
            field: Field definition carrying options

        Returns:
            True if valid

        Raises:
            ValueError: If validation fails
        """
        return True

    @classmethod
    def format_display(
        cls,
        field_value: FieldValue | None,
        field: FieldDefinition | None = None,
    ) -> str:
        """Format a stored value for display."""
        return cls.to_typed_value(field_value).to_display()

    # ------------------------------------------------------------------
    # Comparison helpers shared by concrete handlers
    # ------------------------------------------------------------------

    @staticmethod
    def _compare_text(operator: FilterOperator, actual: str, operand: str) -> bool:
        """Case-insensitive text comparison."""
        actual = actual.lower()
        operand = operand.lower()
        if operator == FilterOperator.EQUALS:
            return actual == operand
        if operator == FilterOperator.NOT_EQUALS:
            return actual != operand
        if operator == FilterOperator.CONTAINS:
            return operand in actual
        if operator == FilterOperator.NOT_CONTAINS:
            return operand not in actual
        return True

    @staticmethod
    def _compare_numbers(operator: FilterOperator, actual: float, operand: float) -> bool:
        if operator == FilterOperator.EQUALS:
            return actual == operand
        if operator == FilterOperator.NOT_EQUALS:
            return actual != operand
        if operator == FilterOperator.GREATER_THAN:
            return actual > operand
        if operator == FilterOperator.LESS_THAN:
            return actual < operand
        if operator == FilterOperator.GREATER_OR_EQUAL:
            return actual >= operand
        if operator == FilterOperator.LESS_OR_EQUAL:
            return actual <= operand
        return True
