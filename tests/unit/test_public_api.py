"""Unit tests for the top-level package exports."""

import taskfields
from taskfields import FormulaContext, TypedValue, ValueKind, evaluate_formula


class TestPublicApi:
    """Tests for the names exported from taskfields."""

    def test_exports(self):
        for name in taskfields.__all__:
            assert hasattr(taskfields, name)

    def test_evaluate_through_package(self):
        context = FormulaContext(fields={"budget": TypedValue.number(40)})
        result = evaluate_formula("{budget} * 2", context)
        assert result.success
        assert result.value == 80
        assert result.typed_value.kind is ValueKind.NUMBER
