"""Unit tests for formula functions."""

import pytest

from taskfields.formula import FormulaContext, evaluate_formula
from taskfields.formula.functions import FORMULA_FUNCTIONS, get_function
from taskfields.values import TypedValue, ValueKind

# 2025-01-15T10:30:00Z, a Wednesday
NOW = 1736937000000
JAN_15 = 1736899200000


def value_of(source: str, **fields):
    result = evaluate_formula(source, FormulaContext(fields=fields, now=NOW))
    assert result.success, result
    return result.value


def error_of(source: str, **fields) -> str:
    result = evaluate_formula(source, FormulaContext(fields=fields, now=NOW))
    assert not result.success
    return result.error_code.value


class TestRegistry:
    """Tests for the function registry."""

    def test_lookup_is_case_insensitive(self):
        assert get_function("sum") is FORMULA_FUNCTIONS["SUM"]

    def test_aliases_registered(self):
        assert get_function("AVERAGE").func is get_function("AVG").func
        assert get_function("CEILING").func is get_function("CEIL").func
        assert get_function("ISBLANK").func is get_function("ISNULL").func

    def test_alias_syntax_uses_alias_name(self):
        assert get_function("AVERAGE").syntax.startswith("AVERAGE(")

    def test_unknown_function(self):
        assert get_function("NOPE") is None
        assert error_of("NOPE(1)") == "#ERROR!"

    def test_wrong_arity_is_error(self):
        assert error_of("ROUND()") == "#ERROR!"
        assert error_of("IF(TRUE)") == "#ERROR!"


class TestAggregateFunctions:
    """Tests for SUM, AVG, COUNT, MIN and MAX."""

    def test_sum(self):
        assert value_of("SUM(1, 2, 3)") == 6

    def test_sum_ignores_non_numbers(self):
        assert value_of('SUM(1, "x", NULL, TRUE, 2)') == 3

    def test_sum_decimal_precision(self):
        assert value_of("SUM(0.1, 0.2)") == 0.3

    def test_avg(self):
        assert value_of("AVG(1, 2, 3, 4)") == 2.5
        assert value_of("AVERAGE(2, 4)") == 3

    def test_avg_of_nothing_is_zero(self):
        assert value_of("AVG()") == 0

    def test_count_skips_nulls(self):
        assert value_of('COUNT(1, NULL, "a", {x})', x=None) == 2

    def test_min_max(self):
        assert value_of("MIN(3, 1, 2)") == 1
        assert value_of("MAX(3, 1, 2)") == 3

    def test_min_of_nothing_is_null(self):
        assert value_of("MIN()") is None


class TestLogicalFunctions:
    """Tests for conditional and logical functions."""

    def test_if(self):
        assert value_of('IF(1 > 0, "yes", "no")') == "yes"
        assert value_of('IF(1 < 0, "yes", "no")') == "no"

    def test_if_without_else_is_null(self):
        assert value_of('IF(FALSE, "yes")') is None

    def test_if_skips_untaken_branch(self):
        assert value_of("IF(TRUE, 1, 1 / 0)") == 1

    def test_ifs(self):
        formula = 'IFS({p} > 80, "high", {p} > 40, "medium")'
        assert value_of(formula, p=90) == "high"
        assert value_of(formula, p=50) == "medium"
        assert value_of(formula, p=10) is None

    def test_ifs_requires_pairs(self):
        assert error_of("IFS(TRUE, 1, FALSE)") == "#ERROR!"

    def test_switch(self):
        formula = 'SWITCH({s}, "todo", 0, "done", 100, 50)'
        assert value_of(formula, s="done") == 100
        assert value_of(formula, s="review") == 50

    def test_switch_without_default_is_null(self):
        assert value_of('SWITCH(3, 1, "one", 2, "two")') is None

    def test_and_or_functions_short_circuit(self):
        assert value_of("AND(FALSE, 1 / 0)") is False
        assert value_of("OR(TRUE, 1 / 0)") is True
        assert value_of("AND(1, TRUE, \"x\")") is True

    def test_not(self):
        assert value_of("NOT(0)") is True

    def test_isnull(self):
        assert value_of("ISNULL({x})", x=None) is True
        assert value_of('ISBLANK("")') is False

    def test_ifnull(self):
        assert value_of("IFNULL({x}, 5)", x=None) == 5
        assert value_of("IFNULL({x}, 5)", x=2) == 2

    def test_iserror_and_iferror(self):
        assert value_of("ISERROR(1 / 0)") is True
        assert value_of("ISERROR(1 / 1)") is False
        assert value_of('IFERROR(1 / 0, "n/a")') == "n/a"


class TestTextFunctions:
    """Tests for text functions."""

    def test_concat_flattens_lists(self):
        assert value_of('CONCAT("a", 1, TRUE, {tags})', tags=["x", "y"]) == "a1TRUExy"

    def test_case_and_trim(self):
        assert value_of('UPPER("abc")') == "ABC"
        assert value_of('LOWER("ABC")') == "abc"
        assert value_of('TRIM("  hi  ")') == "hi"

    def test_len(self):
        assert value_of('LEN("hello")') == 5
        assert value_of("LEN({x})", x=None) == 0

    def test_left_right_mid(self):
        assert value_of('LEFT("hello", 2)') == "he"
        assert value_of('LEFT("hello")') == "h"
        assert value_of('RIGHT("hello", 3)') == "llo"
        assert value_of('RIGHT("hello", 0)') == ""
        assert value_of('MID("hello", 2, 3)') == "ell"

    def test_substitute(self):
        assert value_of('SUBSTITUTE("a-b-c", "-", "+")') == "a+b+c"
        assert value_of('SUBSTITUTE("a-b-c", "-", "+", 1)') == "a+b-c"

    def test_search_is_one_based_and_ignores_case(self):
        assert value_of('SEARCH("LO", "hello")') == 4
        assert value_of('SEARCH("l", "hello", 4)') == 4
        assert value_of('SEARCH("z", "hello")') is None

    def test_rept_and_text(self):
        assert value_of('REPT("ab", 3)') == "ababab"
        assert value_of("TEXT(2.5)") == "2.5"


class TestNumericFunctions:
    """Tests for math functions."""

    @pytest.mark.parametrize(
        "formula,expected",
        [
            ("ROUND(2.5)", 3),
            ("ROUND(-2.5)", -3),
            ("ROUND(1.005, 2)", 1.01),
            ("ROUND(1234.5, -2)", 1200),
            ("FLOOR(2.7)", 2),
            ("CEIL(2.1)", 3),
            ("CEILING(-2.1)", -2),
            ("ABS(-4)", 4),
            ("SQRT(16)", 4),
            ("POWER(2, 3)", 8),
        ],
    )
    def test_math(self, formula, expected):
        assert value_of(formula) == expected

    def test_sqrt_of_negative_is_error(self):
        assert error_of("SQRT(-1)") == "#ERROR!"

    def test_mod_takes_divisor_sign(self):
        assert value_of("MOD(10, 3)") == 1
        assert value_of("MOD(-7, 3)") == 2
        assert value_of("MOD(7, -3)") == -2

    def test_mod_by_zero(self):
        assert error_of("MOD(1, 0)") == "#DIV/0!"

    def test_number(self):
        assert value_of('NUMBER("42.5")') == 42.5
        assert value_of('VALUE("abc")') is None
        assert value_of("NUMBER(TRUE)") == 1


class TestDateFunctions:
    """Tests for date functions."""

    def test_now_and_today(self):
        assert value_of("NOW()") == NOW
        assert value_of("TODAY()") == JAN_15

    def test_now_result_kind(self):
        result = evaluate_formula("NOW()", FormulaContext(now=NOW))
        assert result.type is ValueKind.TIMESTAMP

    def test_days_between_rounds_up(self):
        assert value_of('DAYS_BETWEEN("2025-01-01", "2025-01-10")') == 9
        assert value_of("DAYS_BETWEEN(TODAY(), NOW())") == 1

    def test_days_between_with_empty_date_is_null(self):
        assert value_of("DAYS_BETWEEN({d}, NOW())", d=None) is None

    def test_date_add(self):
        assert value_of("DATE_ADD({d}, 1)", d=TypedValue.timestamp(JAN_15)) == JAN_15 + 86_400_000

    def test_date_parts(self):
        assert value_of('YEAR("2025-01-15")') == 2025
        assert value_of('MONTH("2025-01-15")') == 1
        assert value_of('DAY("2025-01-15")') == 15

    def test_weekday_counts_from_sunday(self):
        assert value_of('WEEKDAY("2025-01-15")') == 3
        assert value_of('WEEKDAY("2025-01-19")') == 0

    def test_invalid_date_is_error(self):
        assert error_of('YEAR("not a date")') == "#ERROR!"
