"""
Pytest configuration and fixtures for taskfields tests.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from taskfields.formula import FormulaContext
from taskfields.schemas import (
    AggregationKind,
    FieldDefinition,
    FieldOption,
    FieldType,
    FieldValue,
    RollupConfig,
    TaskSnapshot,
)

# 2025-01-15T10:30:00Z
FIXED_NOW = 1736937000000


@pytest.fixture
def fixed_now() -> int:
    return FIXED_NOW


@pytest.fixture
def empty_context() -> FormulaContext:
    return FormulaContext(now=FIXED_NOW)


@pytest.fixture
def budget_field() -> FieldDefinition:
    return FieldDefinition(id=1, name="budget", type=FieldType.CURRENCY, currency_code="usd")


@pytest.fixture
def hours_field() -> FieldDefinition:
    return FieldDefinition(id=2, name="hours", type=FieldType.NUMBER)


@pytest.fixture
def priority_field() -> FieldDefinition:
    return FieldDefinition(
        id=3,
        name="severity",
        type=FieldType.SELECT,
        options=[
            FieldOption(label="Low", value="low"),
            FieldOption(label="High", value="high", color="#ff0000"),
        ],
    )


@pytest.fixture
def due_field() -> FieldDefinition:
    return FieldDefinition(id=4, name="due", type=FieldType.DATE)


@pytest.fixture
def approved_field() -> FieldDefinition:
    return FieldDefinition(id=5, name="approved", type=FieldType.CHECKBOX)


@pytest.fixture
def tags_field() -> FieldDefinition:
    return FieldDefinition(
        id=6,
        name="tags",
        type=FieldType.MULTISELECT,
        options=[
            FieldOption(label="Backend", value="backend"),
            FieldOption(label="Frontend", value="frontend"),
        ],
    )


@pytest.fixture
def rate_field() -> FieldDefinition:
    return FieldDefinition(id=7, name="rate", type=FieldType.FORMULA, formula="{budget} / {hours}")


@pytest.fixture
def total_budget_field() -> FieldDefinition:
    return FieldDefinition(
        id=8,
        name="total_budget",
        type=FieldType.ROLLUP,
        rollup_config=RollupConfig(source_field_name="budget", aggregation=AggregationKind.SUM),
    )


@pytest.fixture
def catalog(
    budget_field,
    hours_field,
    priority_field,
    due_field,
    approved_field,
    tags_field,
    rate_field,
    total_budget_field,
) -> list[FieldDefinition]:
    return [
        budget_field,
        hours_field,
        priority_field,
        due_field,
        approved_field,
        tags_field,
        rate_field,
        total_budget_field,
    ]


@pytest.fixture
def tasks() -> list[TaskSnapshot]:
    return [
        TaskSnapshot(id=101, title="Design API", status="in_progress", priority="high"),
        TaskSnapshot(id=102, title="Write docs", status="todo", priority="low"),
        TaskSnapshot(
            id=103,
            title="Ship release",
            status="todo",
            deadline=datetime(2025, 2, 1, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture
def values_index() -> dict[int, dict[int, FieldValue]]:
    """Stored values: task 101 is high priority with budget 100, task 102
    high with budget 50, task 103 has no budget."""
    return {
        101: {
            1: FieldValue(field_id=1, task_id=101, numeric_value=Decimal("100")),
            2: FieldValue(field_id=2, task_id=101, numeric_value=Decimal("4")),
            3: FieldValue(field_id=3, task_id=101, value="high"),
            4: FieldValue(
                field_id=4, task_id=101, date_value=datetime(2025, 1, 15, tzinfo=timezone.utc)
            ),
            5: FieldValue(field_id=5, task_id=101, boolean_value=True),
            6: FieldValue(field_id=6, task_id=101, list_value=["backend", "frontend"]),
        },
        102: {
            1: FieldValue(field_id=1, task_id=102, numeric_value=Decimal("50")),
            2: FieldValue(field_id=2, task_id=102, numeric_value=Decimal("0")),
            3: FieldValue(field_id=3, task_id=102, value="high"),
            5: FieldValue(field_id=5, task_id=102, boolean_value=False),
        },
        103: {
            3: FieldValue(field_id=3, task_id=103, value="low"),
            6: FieldValue(field_id=6, task_id=103, list_value=[]),
        },
    }
