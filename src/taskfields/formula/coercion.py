"""Operator semantics shared by the evaluator and formula functions.

Arithmetic coerces numbers, booleans (1/0), null (0) and numeric text.
Timestamps take part in addition and subtraction only, shifted by days.
"""

import math
from typing import Any

from taskfields.core.exceptions import FormulaDivisionError, FormulaTypeError
from taskfields.values import MS_PER_DAY, TypedValue, ValueKind, normalize_number, parse_number


def to_number(value: TypedValue, operation: str = "operation") -> int | float:
    """
    Coerce a value to a number for arithmetic.

    Raises:
        FormulaTypeError: For non-numeric text, timestamps and lists
    """
    if value.kind is ValueKind.NUMBER:
        return value.value
    if value.kind is ValueKind.BOOLEAN:
        return 1 if value.value else 0
    if value.kind is ValueKind.NULL:
        return 0
    if value.kind is ValueKind.STRING:
        parsed = parse_number(value.value)
        if parsed is not None:
            return normalize_number(parsed)
        raise FormulaTypeError(f"Cannot use text '{value.value}' in {operation}")
    raise FormulaTypeError(f"Cannot use a {value.kind.value} in {operation}")


def to_integer(value: TypedValue, operation: str = "operation") -> int:
    return int(to_number(value, operation))


def _shift_days(epoch_ms: int, days: int | float) -> TypedValue:
    return TypedValue.timestamp(epoch_ms + round(days * MS_PER_DAY))


def add(left: TypedValue, right: TypedValue) -> TypedValue:
    if left.kind is ValueKind.STRING or right.kind is ValueKind.STRING:
        return TypedValue.string(left.to_display() + right.to_display())
    if left.kind is ValueKind.TIMESTAMP and right.kind is ValueKind.TIMESTAMP:
        raise FormulaTypeError("Cannot add two dates")
    if left.kind is ValueKind.TIMESTAMP:
        return _shift_days(left.value, to_number(right, "date arithmetic"))
    if right.kind is ValueKind.TIMESTAMP:
        return _shift_days(right.value, to_number(left, "date arithmetic"))
    return TypedValue.number(to_number(left, "addition") + to_number(right, "addition"))


def subtract(left: TypedValue, right: TypedValue) -> TypedValue:
    if left.kind is ValueKind.TIMESTAMP:
        if right.kind is ValueKind.TIMESTAMP:
            return TypedValue.number((left.value - right.value) / MS_PER_DAY)
        return _shift_days(left.value, -to_number(right, "date arithmetic"))
    return TypedValue.number(to_number(left, "subtraction") - to_number(right, "subtraction"))


def multiply(left: TypedValue, right: TypedValue) -> TypedValue:
    return TypedValue.number(to_number(left, "multiplication") * to_number(right, "multiplication"))


def divide(left: TypedValue, right: TypedValue) -> TypedValue:
    dividend = to_number(left, "division")
    divisor = to_number(right, "division")
    if divisor == 0:
        raise FormulaDivisionError()
    return TypedValue.number(dividend / divisor)


def remainder(left: TypedValue, right: TypedValue) -> TypedValue:
    """``%`` operator; the result takes the sign of the dividend."""
    dividend = to_number(left, "modulo")
    divisor = to_number(right, "modulo")
    if divisor == 0:
        raise FormulaDivisionError()
    return TypedValue.number(math.fmod(dividend, divisor))


def power(base: TypedValue, exponent: TypedValue) -> TypedValue:
    b = to_number(base, "exponentiation")
    e = to_number(exponent, "exponentiation")
    if b == 0 and e < 0:
        raise FormulaDivisionError()
    try:
        return TypedValue.number(math.pow(b, e))
    except ValueError:
        raise FormulaTypeError(f"{b} ^ {e} is not a real number") from None


def negate(value: TypedValue) -> TypedValue:
    return TypedValue.number(-to_number(value, "negation"))


def concat(left: TypedValue, right: TypedValue) -> TypedValue:
    return TypedValue.string(left.to_display() + right.to_display())


def values_equal(left: TypedValue, right: TypedValue) -> bool:
    """
    Equality used by ``=``, ``!=`` and SWITCH.

    Null equals only null. Two strings compare as text; otherwise values
    compare numerically when both sides have a numeric reading, and by kind
    and payload when they do not.
    """
    if left.is_null or right.is_null:
        return left.is_null and right.is_null
    if left.kind is ValueKind.STRING and right.kind is ValueKind.STRING:
        return left.value == right.value
    if ValueKind.LIST not in (left.kind, right.kind):
        left_number = left.as_number()
        right_number = right.as_number()
        if left_number is not None and right_number is not None:
            return left_number == right_number
    return left.kind is right.kind and left.value == right.value


def _ordering_key(value: TypedValue, operator: str) -> Any:
    number = None if value.kind is ValueKind.LIST else value.as_number()
    if number is None:
        raise FormulaTypeError(f"Cannot compare {value.kind.value} '{value}' with '{operator}'")
    return number


def compare(left: TypedValue, right: TypedValue, operator: str) -> bool:
    """
    Ordering comparison for ``<``, ``>``, ``<=`` and ``>=``.

    A null operand makes the comparison false. Two strings compare
    lexicographically; everything else compares numerically.
    """
    if left.is_null or right.is_null:
        return False
    if left.kind is ValueKind.STRING and right.kind is ValueKind.STRING:
        a: Any = left.value
        b: Any = right.value
    else:
        a = _ordering_key(left, operator)
        b = _ordering_key(right, operator)
    if operator == "<":
        return a < b
    if operator == ">":
        return a > b
    if operator == "<=":
        return a <= b
    if operator == ">=":
        return a >= b
    raise FormulaTypeError(f"Unknown comparison operator: {operator}")
