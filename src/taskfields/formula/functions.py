"""Formula functions for task field formulas.

Implements all built-in functions available in formulas. Every function
receives the evaluation context followed by its arguments as TypedValues
and returns a TypedValue. Lazy functions receive zero-argument callables
instead of values and evaluate only the branches they need.
"""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Iterable, Optional

from taskfields.core.exceptions import FormulaArgumentError, FormulaError, FormulaTypeError
from taskfields.formula.coercion import power, remainder, to_integer, to_number, values_equal
from taskfields.formula.context import FormulaContext
from taskfields.values import (
    MS_PER_DAY,
    TypedValue,
    ValueKind,
    from_epoch_ms,
    parse_number,
    parse_timestamp,
)

# Type alias for formula functions
FormulaCallable = Callable[..., TypedValue]
Thunk = Callable[[], TypedValue]


@dataclass(frozen=True)
class FormulaFunction:
    """A registered formula function and its metadata."""

    name: str
    func: FormulaCallable
    category: str
    description: str
    syntax: str
    min_args: int = 0
    max_args: Optional[int] = None
    returns: Optional[ValueKind] = None
    lazy: bool = False

    def check_arity(self, count: int) -> None:
        """
        Raises:
            FormulaArgumentError: If ``count`` arguments are not accepted
        """
        if count < self.min_args or (self.max_args is not None and count > self.max_args):
            if self.max_args is None:
                expected = f"at least {self.min_args}"
            elif self.min_args == self.max_args:
                expected = str(self.min_args)
            else:
                expected = f"{self.min_args} to {self.max_args}"
            raise FormulaArgumentError(
                self.name,
                f"{self.name} expects {expected} argument(s), got {count}. Usage: {self.syntax}",
            )

    def __call__(self, context: FormulaContext, *args: Any) -> TypedValue:
        return self.func(context, *args)


# Registry of formula functions
FORMULA_FUNCTIONS: dict[str, FormulaFunction] = {}


def register_function(
    name: str,
    *,
    category: str,
    description: str,
    syntax: str,
    min_args: int = 0,
    max_args: Optional[int] = None,
    returns: Optional[ValueKind] = None,
    lazy: bool = False,
    aliases: tuple[str, ...] = (),
) -> Callable[[FormulaCallable], FormulaCallable]:
    """Decorator to register a formula function under its name and aliases."""

    def decorator(func: FormulaCallable) -> FormulaCallable:
        for alias in (name, *aliases):
            alias = alias.upper()
            FORMULA_FUNCTIONS[alias] = FormulaFunction(
                name=alias,
                func=func,
                category=category,
                description=description,
                syntax=syntax if alias == name.upper() else syntax.replace(name.upper(), alias, 1),
                min_args=min_args,
                max_args=max_args,
                returns=returns,
                lazy=lazy,
            )
        return func

    return decorator


def get_function(name: str) -> FormulaFunction | None:
    return FORMULA_FUNCTIONS.get(name.upper())


def _flatten(args: Iterable[TypedValue]) -> list[TypedValue]:
    """Expand list values into their items."""
    flat: list[TypedValue] = []
    for arg in args:
        if arg.kind is ValueKind.LIST:
            flat.extend(TypedValue.string(item) for item in arg.value)
        else:
            flat.append(arg)
    return flat


def _numbers(args: Iterable[TypedValue]) -> list[int | float]:
    return [arg.value for arg in _flatten(args) if arg.kind is ValueKind.NUMBER]


def _text(value: TypedValue) -> str:
    return value.to_display()


def _timestamp(value: TypedValue, name: str) -> int | None:
    """Read a date argument; null stays None."""
    if value.is_null:
        return None
    if value.kind in (ValueKind.TIMESTAMP, ValueKind.NUMBER):
        return int(value.value)
    if value.kind is ValueKind.STRING:
        parsed = parse_timestamp(value.value)
        if parsed is not None:
            return parsed
    raise FormulaTypeError(f"{name} expects a date, got {value.kind.value} '{value}'")


# =============================================================================
# Aggregate Functions
# =============================================================================


@register_function(
    "SUM",
    category="aggregate",
    description="Sum of the numeric arguments",
    syntax="SUM(number1, number2, ...)",
    returns=ValueKind.NUMBER,
)
def func_sum(context: FormulaContext, *args: TypedValue) -> TypedValue:
    return TypedValue.number(sum((Decimal(str(n)) for n in _numbers(args)), Decimal(0)))


@register_function(
    "AVG",
    category="aggregate",
    description="Average of the numeric arguments, 0 when there are none",
    syntax="AVG(number1, number2, ...)",
    returns=ValueKind.NUMBER,
    aliases=("AVERAGE",),
)
def func_avg(context: FormulaContext, *args: TypedValue) -> TypedValue:
    numbers = _numbers(args)
    if not numbers:
        return TypedValue.number(0)
    total = sum((Decimal(str(n)) for n in numbers), Decimal(0))
    return TypedValue.number(total / len(numbers))


@register_function(
    "COUNT",
    category="aggregate",
    description="Number of non-null arguments",
    syntax="COUNT(value1, value2, ...)",
    returns=ValueKind.NUMBER,
)
def func_count(context: FormulaContext, *args: TypedValue) -> TypedValue:
    return TypedValue.number(sum(1 for arg in _flatten(args) if not arg.is_null))


@register_function(
    "MIN",
    category="aggregate",
    description="Smallest numeric argument, null when there are none",
    syntax="MIN(number1, number2, ...)",
)
def func_min(context: FormulaContext, *args: TypedValue) -> TypedValue:
    numbers = _numbers(args)
    return TypedValue.number(min(numbers)) if numbers else TypedValue.null()


@register_function(
    "MAX",
    category="aggregate",
    description="Largest numeric argument, null when there are none",
    syntax="MAX(number1, number2, ...)",
)
def func_max(context: FormulaContext, *args: TypedValue) -> TypedValue:
    numbers = _numbers(args)
    return TypedValue.number(max(numbers)) if numbers else TypedValue.null()


# =============================================================================
# Logical Functions
# =============================================================================


@register_function(
    "IF",
    category="logical",
    description="Value depending on a condition; only the chosen branch is evaluated",
    syntax="IF(condition, value_if_true, value_if_false)",
    min_args=2,
    max_args=3,
    lazy=True,
)
def func_if(
    context: FormulaContext,
    condition: Thunk,
    if_true: Thunk,
    if_false: Thunk | None = None,
) -> TypedValue:
    if condition().is_truthy:
        return if_true()
    return if_false() if if_false is not None else TypedValue.null()


@register_function(
    "IFS",
    category="logical",
    description="Value of the first condition that holds, null if none does",
    syntax="IFS(condition1, value1, condition2, value2, ...)",
    min_args=2,
    lazy=True,
)
def func_ifs(context: FormulaContext, *args: Thunk) -> TypedValue:
    if len(args) % 2:
        raise FormulaArgumentError("IFS", "IFS expects condition/value pairs")
    for condition, value in zip(args[::2], args[1::2]):
        if condition().is_truthy:
            return value()
    return TypedValue.null()


@register_function(
    "SWITCH",
    category="logical",
    description="Value paired with the first case equal to the expression",
    syntax="SWITCH(expression, case1, value1, ..., default)",
    min_args=3,
    lazy=True,
)
def func_switch(context: FormulaContext, expression: Thunk, *cases: Thunk) -> TypedValue:
    subject = expression()
    pairs = len(cases) // 2
    for index in range(pairs):
        if values_equal(subject, cases[2 * index]()):
            return cases[2 * index + 1]()
    if len(cases) % 2:
        return cases[-1]()
    return TypedValue.null()


@register_function(
    "AND",
    category="logical",
    description="TRUE if all arguments are true; stops at the first false one",
    syntax="AND(logical1, logical2, ...)",
    min_args=1,
    returns=ValueKind.BOOLEAN,
    lazy=True,
)
def func_and(context: FormulaContext, *args: Thunk) -> TypedValue:
    return TypedValue.boolean(all(arg().is_truthy for arg in args))


@register_function(
    "OR",
    category="logical",
    description="TRUE if any argument is true; stops at the first true one",
    syntax="OR(logical1, logical2, ...)",
    min_args=1,
    returns=ValueKind.BOOLEAN,
    lazy=True,
)
def func_or(context: FormulaContext, *args: Thunk) -> TypedValue:
    return TypedValue.boolean(any(arg().is_truthy for arg in args))


@register_function(
    "NOT",
    category="logical",
    description="Logical negation",
    syntax="NOT(logical)",
    min_args=1,
    max_args=1,
    returns=ValueKind.BOOLEAN,
)
def func_not(context: FormulaContext, value: TypedValue) -> TypedValue:
    return TypedValue.boolean(not value.is_truthy)


@register_function(
    "ISNULL",
    category="logical",
    description="TRUE if the value is null",
    syntax="ISNULL(value)",
    min_args=1,
    max_args=1,
    returns=ValueKind.BOOLEAN,
    aliases=("ISBLANK",),
)
def func_isnull(context: FormulaContext, value: TypedValue) -> TypedValue:
    return TypedValue.boolean(value.is_null)


@register_function(
    "IFNULL",
    category="logical",
    description="The value, or the fallback when the value is null",
    syntax="IFNULL(value, fallback)",
    min_args=2,
    max_args=2,
    lazy=True,
)
def func_ifnull(context: FormulaContext, value: Thunk, fallback: Thunk) -> TypedValue:
    result = value()
    return fallback() if result.is_null else result


@register_function(
    "ISERROR",
    category="logical",
    description="TRUE if evaluating the expression fails",
    syntax="ISERROR(expression)",
    min_args=1,
    max_args=1,
    returns=ValueKind.BOOLEAN,
    lazy=True,
)
def func_iserror(context: FormulaContext, expression: Thunk) -> TypedValue:
    try:
        expression()
    except FormulaError:
        return TypedValue.boolean(True)
    return TypedValue.boolean(False)


@register_function(
    "IFERROR",
    category="logical",
    description="The value, or the fallback when evaluating the value fails",
    syntax="IFERROR(value, fallback)",
    min_args=2,
    max_args=2,
    lazy=True,
)
def func_iferror(context: FormulaContext, value: Thunk, fallback: Thunk) -> TypedValue:
    try:
        return value()
    except FormulaError:
        return fallback()


# =============================================================================
# Text Functions
# =============================================================================


@register_function(
    "CONCAT",
    category="text",
    description="Join values into one text",
    syntax="CONCAT(text1, text2, ...)",
    returns=ValueKind.STRING,
)
def func_concat(context: FormulaContext, *args: TypedValue) -> TypedValue:
    return TypedValue.string("".join(_text(arg) for arg in _flatten(args)))


@register_function(
    "UPPER",
    category="text",
    description="Convert to uppercase",
    syntax="UPPER(text)",
    min_args=1,
    max_args=1,
    returns=ValueKind.STRING,
)
def func_upper(context: FormulaContext, text: TypedValue) -> TypedValue:
    return TypedValue.string(_text(text).upper())


@register_function(
    "LOWER",
    category="text",
    description="Convert to lowercase",
    syntax="LOWER(text)",
    min_args=1,
    max_args=1,
    returns=ValueKind.STRING,
)
def func_lower(context: FormulaContext, text: TypedValue) -> TypedValue:
    return TypedValue.string(_text(text).lower())


@register_function(
    "TRIM",
    category="text",
    description="Remove leading and trailing whitespace",
    syntax="TRIM(text)",
    min_args=1,
    max_args=1,
    returns=ValueKind.STRING,
)
def func_trim(context: FormulaContext, text: TypedValue) -> TypedValue:
    return TypedValue.string(_text(text).strip())


@register_function(
    "LEN",
    category="text",
    description="Number of characters",
    syntax="LEN(text)",
    min_args=1,
    max_args=1,
    returns=ValueKind.NUMBER,
)
def func_len(context: FormulaContext, text: TypedValue) -> TypedValue:
    return TypedValue.number(len(_text(text)))


@register_function(
    "LEFT",
    category="text",
    description="Leftmost characters",
    syntax="LEFT(text, count)",
    min_args=1,
    max_args=2,
    returns=ValueKind.STRING,
)
def func_left(
    context: FormulaContext, text: TypedValue, count: TypedValue | None = None
) -> TypedValue:
    n = 1 if count is None else max(0, to_integer(count, "LEFT"))
    return TypedValue.string(_text(text)[:n])


@register_function(
    "RIGHT",
    category="text",
    description="Rightmost characters",
    syntax="RIGHT(text, count)",
    min_args=1,
    max_args=2,
    returns=ValueKind.STRING,
)
def func_right(
    context: FormulaContext, text: TypedValue, count: TypedValue | None = None
) -> TypedValue:
    n = 1 if count is None else max(0, to_integer(count, "RIGHT"))
    s = _text(text)
    return TypedValue.string(s[len(s) - n :] if n else "")


@register_function(
    "MID",
    category="text",
    description="Substring starting at a 1-based position",
    syntax="MID(text, start, count)",
    min_args=3,
    max_args=3,
    returns=ValueKind.STRING,
)
def func_mid(
    context: FormulaContext, text: TypedValue, start: TypedValue, count: TypedValue
) -> TypedValue:
    # 1-indexed like spreadsheets
    begin = max(1, to_integer(start, "MID")) - 1
    length = max(0, to_integer(count, "MID"))
    return TypedValue.string(_text(text)[begin : begin + length])


@register_function(
    "SUBSTITUTE",
    category="text",
    description="Replace occurrences of old text with new text",
    syntax="SUBSTITUTE(text, old, new, count)",
    min_args=3,
    max_args=4,
    returns=ValueKind.STRING,
)
def func_substitute(
    context: FormulaContext,
    text: TypedValue,
    old: TypedValue,
    new: TypedValue,
    count: TypedValue | None = None,
) -> TypedValue:
    s, target, replacement = _text(text), _text(old), _text(new)
    if not target:
        return TypedValue.string(s)
    if count is None:
        return TypedValue.string(s.replace(target, replacement))
    return TypedValue.string(s.replace(target, replacement, max(0, to_integer(count, "SUBSTITUTE"))))


@register_function(
    "SEARCH",
    category="text",
    description="1-based position of text within text, ignoring case; null if absent",
    syntax="SEARCH(find, within, start)",
    min_args=2,
    max_args=3,
)
def func_search(
    context: FormulaContext,
    find: TypedValue,
    within: TypedValue,
    start: TypedValue | None = None,
) -> TypedValue:
    offset = 0 if start is None else max(1, to_integer(start, "SEARCH")) - 1
    index = _text(within).lower().find(_text(find).lower(), offset)
    return TypedValue.null() if index < 0 else TypedValue.number(index + 1)


@register_function(
    "REPT",
    category="text",
    description="Repeat text a number of times",
    syntax="REPT(text, count)",
    min_args=2,
    max_args=2,
    returns=ValueKind.STRING,
)
def func_rept(context: FormulaContext, text: TypedValue, count: TypedValue) -> TypedValue:
    return TypedValue.string(_text(text) * max(0, to_integer(count, "REPT")))


@register_function(
    "TEXT",
    category="text",
    description="Convert a value to text",
    syntax="TEXT(value)",
    min_args=1,
    max_args=1,
    returns=ValueKind.STRING,
)
def func_text(context: FormulaContext, value: TypedValue) -> TypedValue:
    return TypedValue.string(_text(value))


# =============================================================================
# Numeric Functions
# =============================================================================


@register_function(
    "ROUND",
    category="math",
    description="Round half away from zero to a number of decimal places",
    syntax="ROUND(number, decimals)",
    min_args=1,
    max_args=2,
    returns=ValueKind.NUMBER,
)
def func_round(
    context: FormulaContext, number: TypedValue, decimals: TypedValue | None = None
) -> TypedValue:
    places = 0 if decimals is None else to_integer(decimals, "ROUND")
    value = Decimal(str(to_number(number, "ROUND")))
    return TypedValue.number(value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


@register_function(
    "FLOOR",
    category="math",
    description="Round down to an integer",
    syntax="FLOOR(number)",
    min_args=1,
    max_args=1,
    returns=ValueKind.NUMBER,
)
def func_floor(context: FormulaContext, number: TypedValue) -> TypedValue:
    return TypedValue.number(math.floor(to_number(number, "FLOOR")))


@register_function(
    "CEIL",
    category="math",
    description="Round up to an integer",
    syntax="CEIL(number)",
    min_args=1,
    max_args=1,
    returns=ValueKind.NUMBER,
    aliases=("CEILING",),
)
def func_ceil(context: FormulaContext, number: TypedValue) -> TypedValue:
    return TypedValue.number(math.ceil(to_number(number, "CEIL")))


@register_function(
    "ABS",
    category="math",
    description="Absolute value",
    syntax="ABS(number)",
    min_args=1,
    max_args=1,
    returns=ValueKind.NUMBER,
)
def func_abs(context: FormulaContext, number: TypedValue) -> TypedValue:
    return TypedValue.number(abs(to_number(number, "ABS")))


@register_function(
    "SQRT",
    category="math",
    description="Square root",
    syntax="SQRT(number)",
    min_args=1,
    max_args=1,
    returns=ValueKind.NUMBER,
)
def func_sqrt(context: FormulaContext, number: TypedValue) -> TypedValue:
    value = to_number(number, "SQRT")
    if value < 0:
        raise FormulaTypeError("SQRT of a negative number")
    return TypedValue.number(math.sqrt(value))


@register_function(
    "POWER",
    category="math",
    description="Number raised to a power",
    syntax="POWER(base, exponent)",
    min_args=2,
    max_args=2,
    returns=ValueKind.NUMBER,
)
def func_power(context: FormulaContext, base: TypedValue, exponent: TypedValue) -> TypedValue:
    return power(base, exponent)


@register_function(
    "MOD",
    category="math",
    description="Remainder of a division, with the sign of the divisor",
    syntax="MOD(number, divisor)",
    min_args=2,
    max_args=2,
    returns=ValueKind.NUMBER,
)
def func_mod(context: FormulaContext, number: TypedValue, divisor: TypedValue) -> TypedValue:
    result = remainder(number, divisor)
    d = to_number(divisor, "MOD")
    if result.value != 0 and (result.value < 0) != (d < 0):
        return TypedValue.number(result.value + d)
    return result


@register_function(
    "NUMBER",
    category="math",
    description="Parse a value as a number, null if it is not numeric",
    syntax="NUMBER(value)",
    min_args=1,
    max_args=1,
    aliases=("VALUE",),
)
def func_number(context: FormulaContext, value: TypedValue) -> TypedValue:
    if value.kind is ValueKind.STRING:
        parsed = parse_number(value.value)
        return TypedValue.null() if parsed is None else TypedValue.number(parsed)
    number = value.as_number() if value.kind is not ValueKind.LIST else None
    return TypedValue.null() if number is None else TypedValue.number(number)


# =============================================================================
# Date Functions
# =============================================================================


@register_function(
    "NOW",
    category="date",
    description="Current date and time",
    syntax="NOW()",
    max_args=0,
    returns=ValueKind.TIMESTAMP,
)
def func_now(context: FormulaContext) -> TypedValue:
    return TypedValue.timestamp(context.now)


@register_function(
    "TODAY",
    category="date",
    description="Current date at midnight UTC",
    syntax="TODAY()",
    max_args=0,
    returns=ValueKind.TIMESTAMP,
)
def func_today(context: FormulaContext) -> TypedValue:
    return TypedValue.timestamp(context.now - context.now % MS_PER_DAY)


@register_function(
    "DAYS_BETWEEN",
    category="date",
    description="Whole days between two dates, rounded up; null if either is empty",
    syntax="DAYS_BETWEEN(date1, date2)",
    min_args=2,
    max_args=2,
)
def func_days_between(context: FormulaContext, first: TypedValue, second: TypedValue) -> TypedValue:
    start = _timestamp(first, "DAYS_BETWEEN")
    end = _timestamp(second, "DAYS_BETWEEN")
    if start is None or end is None:
        return TypedValue.null()
    return TypedValue.number(math.ceil(abs(end - start) / MS_PER_DAY))


@register_function(
    "DATE_ADD",
    category="date",
    description="Date shifted by a number of days; null if the date is empty",
    syntax="DATE_ADD(date, days)",
    min_args=2,
    max_args=2,
)
def func_date_add(context: FormulaContext, value: TypedValue, days: TypedValue) -> TypedValue:
    epoch_ms = _timestamp(value, "DATE_ADD")
    if epoch_ms is None:
        return TypedValue.null()
    return TypedValue.timestamp(epoch_ms + round(to_number(days, "DATE_ADD") * MS_PER_DAY))


def _date_part(value: TypedValue, name: str, part: Callable[[Any], int]) -> TypedValue:
    epoch_ms = _timestamp(value, name)
    if epoch_ms is None:
        return TypedValue.null()
    return TypedValue.number(part(from_epoch_ms(epoch_ms)))


@register_function(
    "YEAR",
    category="date",
    description="Year of a date",
    syntax="YEAR(date)",
    min_args=1,
    max_args=1,
)
def func_year(context: FormulaContext, value: TypedValue) -> TypedValue:
    return _date_part(value, "YEAR", lambda moment: moment.year)


@register_function(
    "MONTH",
    category="date",
    description="Month of a date (1-12)",
    syntax="MONTH(date)",
    min_args=1,
    max_args=1,
)
def func_month(context: FormulaContext, value: TypedValue) -> TypedValue:
    return _date_part(value, "MONTH", lambda moment: moment.month)


@register_function(
    "DAY",
    category="date",
    description="Day of the month of a date (1-31)",
    syntax="DAY(date)",
    min_args=1,
    max_args=1,
)
def func_day(context: FormulaContext, value: TypedValue) -> TypedValue:
    return _date_part(value, "DAY", lambda moment: moment.day)


@register_function(
    "WEEKDAY",
    category="date",
    description="Day of the week of a date, 0 for Sunday through 6 for Saturday",
    syntax="WEEKDAY(date)",
    min_args=1,
    max_args=1,
)
def func_weekday(context: FormulaContext, value: TypedValue) -> TypedValue:
    return _date_part(value, "WEEKDAY", lambda moment: (moment.weekday() + 1) % 7)
