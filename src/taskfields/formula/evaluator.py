"""Formula evaluator for task field formulas.

Evaluates parsed formula ASTs against a FormulaContext.
"""

from decimal import DecimalException
from typing import Any

from taskfields.core.exceptions import (
    FormulaDivisionError,
    FormulaError,
    FormulaTypeError,
    UnknownFunctionError,
)
from taskfields.formula import coercion
from taskfields.formula.context import FormulaContext
from taskfields.formula.functions import FORMULA_FUNCTIONS
from taskfields.formula.parser import (
    BinaryOpNode,
    BooleanNode,
    FieldRefNode,
    FunctionCallNode,
    NullNode,
    NumberNode,
    StringNode,
    UnaryOpNode,
    collect_field_refs,
)
from taskfields.values import TypedValue

_ARITHMETIC = {
    "+": coercion.add,
    "-": coercion.subtract,
    "*": coercion.multiply,
    "/": coercion.divide,
    "%": coercion.remainder,
    "^": coercion.power,
    "&": coercion.concat,
}

_ORDERING = frozenset({"<", ">", "<=", ">="})


class FormulaEvaluator:
    """
    Evaluates formula ASTs against one task's context.

    Every field reference is resolved before evaluation starts, so a formula
    naming a missing field fails with #REF! even when the reference sits in
    a branch that would not be taken. Sub-expressions are then evaluated
    left to right; AND, OR and the lazy functions short-circuit.
    """

    def __init__(self, context: FormulaContext | None = None):
        self._context = context or FormulaContext()

    def evaluate(self, ast: Any) -> TypedValue:
        """
        Evaluate an AST.

        Args:
            ast: Parsed formula AST

        Returns:
            Evaluation result

        Raises:
            FormulaError: On any evaluation failure
        """
        self.check_references(ast)
        return self._eval(ast)

    def check_references(self, ast: Any) -> None:
        names: list[str] = []
        collect_field_refs(ast, names)
        for name in names:
            self._context.resolve(name)

    def _eval(self, node: Any) -> TypedValue:
        """Recursively evaluate an AST node."""
        if isinstance(node, NumberNode):
            return TypedValue.number(node.value)

        if isinstance(node, StringNode):
            return TypedValue.string(node.value)

        if isinstance(node, BooleanNode):
            return TypedValue.boolean(node.value)

        if isinstance(node, NullNode):
            return TypedValue.null()

        if isinstance(node, FieldRefNode):
            return self._context.resolve(node.field_name)

        if isinstance(node, FunctionCallNode):
            return self._eval_function(node)

        if isinstance(node, BinaryOpNode):
            return self._eval_binary(node)

        if isinstance(node, UnaryOpNode):
            return self._eval_unary(node)

        raise FormulaTypeError(f"Unknown expression node: {type(node).__name__}")

    def _eval_function(self, node: FunctionCallNode) -> TypedValue:
        """Evaluate a function call."""
        func = FORMULA_FUNCTIONS.get(node.name)
        if func is None:
            raise UnknownFunctionError(node.name)
        func.check_arity(len(node.arguments))

        if func.lazy:
            args: list[Any] = [self._thunk(arg) for arg in node.arguments]
        else:
            args = [self._eval(arg) for arg in node.arguments]

        try:
            return func(self._context, *args)
        except FormulaError:
            raise
        except (ArithmeticError, DecimalException) as e:
            raise self._arithmetic_error(e) from e

    def _thunk(self, node: Any):
        return lambda: self._eval(node)

    def _eval_binary(self, node: BinaryOpNode) -> TypedValue:
        """Evaluate a binary operation."""
        op = node.operator

        # Logical operators short-circuit
        if op == "AND":
            return TypedValue.boolean(
                self._eval(node.left).is_truthy and self._eval(node.right).is_truthy
            )
        if op == "OR":
            return TypedValue.boolean(
                self._eval(node.left).is_truthy or self._eval(node.right).is_truthy
            )

        left = self._eval(node.left)
        right = self._eval(node.right)

        if op == "=":
            return TypedValue.boolean(coercion.values_equal(left, right))
        if op == "!=":
            return TypedValue.boolean(not coercion.values_equal(left, right))
        if op in _ORDERING:
            return TypedValue.boolean(coercion.compare(left, right, op))

        operation = _ARITHMETIC.get(op)
        if operation is None:
            raise FormulaTypeError(f"Unknown operator: {op}")
        try:
            return operation(left, right)
        except FormulaError:
            raise
        except ArithmeticError as e:
            raise self._arithmetic_error(e) from e

    def _eval_unary(self, node: UnaryOpNode) -> TypedValue:
        """Evaluate a unary operation."""
        operand = self._eval(node.operand)
        op = node.operator

        if op == "-":
            return coercion.negate(operand)
        if op == "+":
            return TypedValue.number(coercion.to_number(operand, "unary plus"))
        if op == "NOT":
            return TypedValue.boolean(not operand.is_truthy)

        raise FormulaTypeError(f"Unknown unary operator: {op}")

    @staticmethod
    def _arithmetic_error(error: Exception) -> FormulaError:
        if isinstance(error, ZeroDivisionError):
            return FormulaDivisionError()
        return FormulaTypeError(f"Arithmetic error: {error}")
