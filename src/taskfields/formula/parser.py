"""Formula parser for task field formulas.

Parses formula strings into an AST using the Lark parser.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterator

from lark import Lark, Transformer, v_args
from lark.exceptions import LarkError, UnexpectedEOF, UnexpectedInput, VisitError

from taskfields.core.exceptions import FormulaSyntaxError
from taskfields.core.logging import LoggerMixin
from taskfields.formula.grammar import FORMULA_GRAMMAR

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}
_ESCAPE_PATTERN = re.compile(r"\\(.)", re.DOTALL)

# Name of the function-style field reference, field("Field Name")
FIELD_FUNCTION = "FIELD"


# AST Node types
@dataclass(frozen=True)
class NumberNode:
    value: float | int


@dataclass(frozen=True)
class StringNode:
    value: str


@dataclass(frozen=True)
class BooleanNode:
    value: bool


@dataclass(frozen=True)
class NullNode:
    pass


@dataclass(frozen=True)
class FieldRefNode:
    field_name: str


@dataclass(frozen=True)
class FunctionCallNode:
    name: str
    arguments: tuple[Any, ...]


@dataclass(frozen=True)
class BinaryOpNode:
    operator: str
    left: Any
    right: Any


@dataclass(frozen=True)
class UnaryOpNode:
    operator: str
    operand: Any


def _unescape(body: str) -> str:
    return _ESCAPE_PATTERN.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


class FormulaTransformer(Transformer):
    """Transform Lark parse tree into AST nodes."""

    @v_args(inline=True)
    def number(self, token):
        value = float(token)
        # Keep as int if no decimal
        if value.is_integer() and abs(value) < 2**53:
            value = int(value)
        return NumberNode(value)

    @v_args(inline=True)
    def string(self, token):
        # Remove quotes
        return StringNode(_unescape(str(token)[1:-1]))

    @v_args(inline=True)
    def boolean(self, token):
        return BooleanNode(str(token).upper() == "TRUE")

    @v_args(inline=True)
    def null(self, token):
        return NullNode()

    @v_args(inline=True)
    def field_ref(self, token):
        # Extract field name from {Field Name} or {{Field Name}}
        text = str(token)
        if text.startswith("{{"):
            field_name = text[2:-2]
        else:
            field_name = text[1:-1]
        return FieldRefNode(field_name.strip())

    def function_call(self, items):
        name = str(items[0]).upper()
        args = tuple(items[1]) if len(items) > 1 and items[1] else ()
        if name == FIELD_FUNCTION:
            if len(args) != 1 or not isinstance(args[0], StringNode):
                raise FormulaSyntaxError(
                    'field() takes a single quoted field name, e.g. field("Budget")'
                )
            return FieldRefNode(args[0].value.strip())
        return FunctionCallNode(name, args)

    def arguments(self, items):
        return list(items)

    # Binary operators
    @v_args(inline=True)
    def add(self, left, right):
        return BinaryOpNode("+", left, right)

    @v_args(inline=True)
    def sub(self, left, right):
        return BinaryOpNode("-", left, right)

    @v_args(inline=True)
    def mul(self, left, right):
        return BinaryOpNode("*", left, right)

    @v_args(inline=True)
    def div(self, left, right):
        return BinaryOpNode("/", left, right)

    @v_args(inline=True)
    def mod(self, left, right):
        return BinaryOpNode("%", left, right)

    @v_args(inline=True)
    def pow(self, left, right):
        return BinaryOpNode("^", left, right)

    @v_args(inline=True)
    def string_concat(self, left, right):
        return BinaryOpNode("&", left, right)

    # Comparison operators
    @v_args(inline=True)
    def eq(self, left, right):
        return BinaryOpNode("=", left, right)

    @v_args(inline=True)
    def ne(self, left, right):
        return BinaryOpNode("!=", left, right)

    @v_args(inline=True)
    def lt(self, left, right):
        return BinaryOpNode("<", left, right)

    @v_args(inline=True)
    def gt(self, left, right):
        return BinaryOpNode(">", left, right)

    @v_args(inline=True)
    def le(self, left, right):
        return BinaryOpNode("<=", left, right)

    @v_args(inline=True)
    def ge(self, left, right):
        return BinaryOpNode(">=", left, right)

    # Logical operators
    @v_args(inline=True)
    def and_op(self, left, right):
        return BinaryOpNode("AND", left, right)

    @v_args(inline=True)
    def or_op(self, left, right):
        return BinaryOpNode("OR", left, right)

    @v_args(inline=True)
    def not_op(self, operand):
        return UnaryOpNode("NOT", operand)

    # Unary operators
    @v_args(inline=True)
    def neg(self, operand):
        return UnaryOpNode("-", operand)

    @v_args(inline=True)
    def pos(self, operand):
        return UnaryOpNode("+", operand)


class FormulaParser(LoggerMixin):
    """
    Parser for task field formulas.

    Parses formula strings into an AST that can be evaluated. Parsed ASTs
    are immutable and cached per source string.
    """

    def __init__(self, cache_size: int = 512):
        self._parser = Lark(
            FORMULA_GRAMMAR,
            parser="lalr",
            transformer=FormulaTransformer(),
        )
        self._parse_cached = lru_cache(maxsize=cache_size)(self._parse)

    def parse(self, formula: str) -> Any:
        """
        Parse a formula string into an AST.

        Args:
            formula: Formula string to parse

        Returns:
            AST root node

        Raises:
            FormulaSyntaxError: If formula syntax is invalid
        """
        return self._parse_cached(formula)

    def _parse(self, formula: str) -> Any:
        try:
            return self._parser.parse(formula)
        except FormulaSyntaxError:
            raise
        except LarkError as e:
            self.logger.debug("Formula failed to parse: %s", e)
            raise _to_syntax_error(formula, e) from e

    def validate(self, formula: str) -> tuple[bool, str | None]:
        """
        Validate formula syntax.

        Args:
            formula: Formula string to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            self.parse(formula)
            return True, None
        except FormulaSyntaxError as e:
            return False, e.message

    def get_field_references(self, formula: str) -> list[str]:
        """
        Extract all field references from a formula.

        Args:
            formula: Formula string

        Returns:
            Field names in first-occurrence order, without duplicates
        """
        ast = self.parse(formula)
        fields: list[str] = []
        collect_field_refs(ast, fields)
        return list(dict.fromkeys(fields))

    def get_function_calls(self, formula: str) -> list[FunctionCallNode]:
        """All function call nodes of a formula, outermost first."""
        calls: list[FunctionCallNode] = []
        _collect_calls(self.parse(formula), calls)
        return calls


def _children(node: Any) -> tuple[Any, ...]:
    if isinstance(node, BinaryOpNode):
        return (node.left, node.right)
    if isinstance(node, UnaryOpNode):
        return (node.operand,)
    if isinstance(node, FunctionCallNode):
        return node.arguments
    return ()


def _walk(node: Any) -> Iterator[Any]:
    """Yield AST nodes depth-first, left to right, parents before children.

    Uses an explicit stack so deeply nested formulas cannot exhaust the
    interpreter's recursion limit.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(_children(current)))


def collect_field_refs(node: Any, fields: list[str]) -> None:
    """Collect field references from AST, left to right."""
    fields.extend(n.field_name for n in _walk(node) if isinstance(n, FieldRefNode))


def _collect_calls(node: Any, calls: list[FunctionCallNode]) -> None:
    calls.extend(n for n in _walk(node) if isinstance(n, FunctionCallNode))


@lru_cache(maxsize=1)
def get_parser() -> FormulaParser:
    """Shared parser instance; building the LALR tables is done once."""
    return FormulaParser()


def _to_syntax_error(formula: str, error: LarkError) -> FormulaSyntaxError:
    """Translate a Lark failure into a FormulaSyntaxError with a position."""
    if isinstance(error, VisitError):
        if isinstance(error.orig_exc, FormulaSyntaxError):
            return error.orig_exc
        return FormulaSyntaxError(f"Invalid formula syntax: {error.orig_exc}")
    if isinstance(error, UnexpectedEOF):
        return FormulaSyntaxError(
            "Invalid formula syntax: unexpected end of formula", position=len(formula)
        )
    if isinstance(error, UnexpectedInput):
        position = getattr(error, "pos_in_stream", None)
        if position is None or position < 0:
            position = len(formula)
        return FormulaSyntaxError(
            f"Invalid formula syntax at position {position}", position=position
        )
    return FormulaSyntaxError(f"Invalid formula syntax: {error}")
