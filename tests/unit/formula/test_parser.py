"""Unit tests for FormulaParser."""

import pytest

from taskfields.core.exceptions import FormulaSyntaxError
from taskfields.formula.parser import (
    BinaryOpNode,
    BooleanNode,
    FieldRefNode,
    FormulaParser,
    FunctionCallNode,
    NullNode,
    NumberNode,
    StringNode,
    UnaryOpNode,
)


@pytest.fixture(scope="module")
def parser() -> FormulaParser:
    return FormulaParser()


class TestLiterals:
    """Tests for literal parsing."""

    def test_integer(self, parser):
        """Integral numbers parse as int."""
        assert parser.parse("42") == NumberNode(42)

    def test_decimal(self, parser):
        """Test parsing decimal and leading-dot numbers."""
        assert parser.parse("2.5") == NumberNode(2.5)
        assert parser.parse(".5") == NumberNode(0.5)

    def test_scientific(self, parser):
        assert parser.parse("1e3") == NumberNode(1000)

    def test_double_quoted_string(self, parser):
        assert parser.parse('"hello"') == StringNode("hello")

    def test_single_quoted_string(self, parser):
        assert parser.parse("'hello'") == StringNode("hello")

    def test_string_escapes(self, parser):
        """Backslash escapes are decoded."""
        assert parser.parse(r'"say \"hi\""') == StringNode('say "hi"')
        assert parser.parse(r"'a\nb'") == StringNode("a\nb")

    def test_booleans_case_insensitive(self, parser):
        assert parser.parse("TRUE") == BooleanNode(True)
        assert parser.parse("false") == BooleanNode(False)

    def test_null_and_blank(self, parser):
        assert parser.parse("NULL") == NullNode()
        assert parser.parse("blank") == NullNode()


class TestFieldReferences:
    """Tests for the three field reference forms."""

    def test_braces(self, parser):
        assert parser.parse("{budget}") == FieldRefNode("budget")

    def test_name_with_spaces_is_trimmed(self, parser):
        assert parser.parse("{ Story Points }") == FieldRefNode("Story Points")

    def test_legacy_double_braces(self, parser):
        """The legacy template form resolves to the same reference."""
        assert parser.parse("{{budget}}") == FieldRefNode("budget")

    def test_field_function(self, parser):
        assert parser.parse('field("budget")') == FieldRefNode("budget")
        assert parser.parse("FIELD('Story Points')") == FieldRefNode("Story Points")

    def test_field_function_requires_literal(self, parser):
        """field() with a computed argument is a syntax error."""
        with pytest.raises(FormulaSyntaxError):
            parser.parse('field("a" & "b")')


class TestOperators:
    """Tests for operator precedence and associativity."""

    def test_multiplication_binds_tighter(self, parser):
        ast = parser.parse("1 + 2 * 3")
        assert ast == BinaryOpNode(
            "+", NumberNode(1), BinaryOpNode("*", NumberNode(2), NumberNode(3))
        )

    def test_power_is_right_associative(self, parser):
        ast = parser.parse("2 ^ 3 ^ 2")
        assert ast == BinaryOpNode(
            "^", NumberNode(2), BinaryOpNode("^", NumberNode(3), NumberNode(2))
        )

    def test_concat_below_additive(self, parser):
        ast = parser.parse('"a" & 1 + 2')
        assert ast == BinaryOpNode(
            "&", StringNode("a"), BinaryOpNode("+", NumberNode(1), NumberNode(2))
        )

    def test_comparison_aliases(self, parser):
        """== is = and <> is !=."""
        assert parser.parse("1 == 1").operator == "="
        assert parser.parse("1 <> 2").operator == "!="

    def test_logical_keywords(self, parser):
        ast = parser.parse("TRUE and not FALSE or FALSE")
        assert ast == BinaryOpNode(
            "OR",
            BinaryOpNode("AND", BooleanNode(True), UnaryOpNode("NOT", BooleanNode(False))),
            BooleanNode(False),
        )

    def test_unary_minus(self, parser):
        assert parser.parse("-{x}") == UnaryOpNode("-", FieldRefNode("x"))


class TestFunctionCalls:
    """Tests for function call parsing."""

    def test_name_is_upper_cased(self, parser):
        ast = parser.parse("sum(1, 2)")
        assert ast == FunctionCallNode("SUM", (NumberNode(1), NumberNode(2)))

    def test_no_arguments(self, parser):
        assert parser.parse("NOW()") == FunctionCallNode("NOW", ())

    def test_and_or_call_form(self, parser):
        """AND(...) and OR(...) parse as function calls."""
        assert parser.parse("AND(TRUE, FALSE)").name == "AND"
        assert parser.parse("or(TRUE)").name == "OR"

    def test_nested_calls(self, parser):
        ast = parser.parse("IF({x} > 0, ROUND({x}, 2), 0)")
        assert isinstance(ast, FunctionCallNode)
        assert isinstance(ast.arguments[1], FunctionCallNode)


class TestSyntaxErrors:
    """Tests for malformed formulas."""

    @pytest.mark.parametrize("source", ["1 +", "(1 + 2", "SUM(1,", "1 2", "{}"])
    def test_invalid_syntax_raises(self, parser, source):
        with pytest.raises(FormulaSyntaxError):
            parser.parse(source)

    def test_error_carries_position(self, parser):
        with pytest.raises(FormulaSyntaxError) as exc_info:
            parser.parse("1 + * 2")
        assert exc_info.value.position == 4


class TestFieldReferenceExtraction:
    """Tests for get_field_references."""

    def test_first_occurrence_order_without_duplicates(self, parser):
        refs = parser.get_field_references('{b} + {a} + field("b") + {{c}}')
        assert refs == ["b", "a", "c"]

    def test_validate(self, parser):
        assert parser.validate("1 + 1") == (True, None)
        valid, error = parser.validate("1 +")
        assert valid is False
        assert error
