"""Filter predicate engine.

Decides whether a task's custom field values satisfy a conjunction of
filter rules. Rules are validated against the operator registry when they
are built; evaluation itself never raises.
"""

from typing import Any, Iterable, Mapping, Optional

from taskfields.core.exceptions import InvalidFilterRuleError
from taskfields.core.logging import get_logger
from taskfields.fields import get_field_handler
from taskfields.filters.operators import get_operators_for_type, operator_needs_value
from taskfields.schemas.field import FieldDefinition, FieldValue
from taskfields.schemas.filter import FilterOperator, FilterRule

logger = get_logger(__name__)

ValuesIndex = Mapping[Any, Mapping[Any, FieldValue]]
FieldsIndex = Mapping[Any, FieldDefinition]


def build_filter_rule(
    field: FieldDefinition,
    operator: FilterOperator | str,
    value: str = "",
    rule_id: Optional[str] = None,
) -> FilterRule:
    """
    Build a filter rule for a field.

    Args:
        field: Field the rule filters on
        operator: Filter operator
        value: Operand, ignored by operators that take none
        rule_id: Client-side identifier

    Returns:
        Validated FilterRule

    Raises:
        InvalidFilterRuleError: If the operator is not registered for the
            field type or a required operand is missing
    """
    try:
        op = FilterOperator(operator)
    except ValueError:
        raise InvalidFilterRuleError(
            f"Unknown filter operator: {operator}", field_id=field.id, operator=str(operator)
        ) from None

    rule = FilterRule(
        field_id=field.id,
        operator=op,
        value=value if operator_needs_value(op) else "",
        id=rule_id,
    )
    validate_filter_rule(rule, field)
    return rule


def validate_filter_rule(rule: FilterRule, field: FieldDefinition) -> None:
    """
    Check a rule against the operator registry.

    Raises:
        InvalidFilterRuleError: If the rule does not fit the field
    """
    if rule.field_id != field.id:
        raise InvalidFilterRuleError(
            f"Rule targets field {rule.field_id}, not {field.id}",
            field_id=rule.field_id,
            operator=rule.operator.value,
        )
    if rule.operator not in get_operators_for_type(field.type):
        raise InvalidFilterRuleError(
            f"Operator '{rule.operator.value}' is not available for "
            f"{field.type.value} field '{field.name}'",
            field_id=field.id,
            operator=rule.operator.value,
        )
    if operator_needs_value(rule.operator) and not rule.value.strip():
        raise InvalidFilterRuleError(
            f"Operator '{rule.operator.value}' requires a value",
            field_id=field.id,
            operator=rule.operator.value,
        )


def _is_empty(field_value: Optional[FieldValue], field: FieldDefinition) -> bool:
    handler = get_field_handler(field.type)
    return handler.is_empty(field_value)


def task_passes_filter(
    rule: FilterRule,
    field_value: Optional[FieldValue],
    field: FieldDefinition,
) -> bool:
    """
    Evaluate one rule against a task's stored value.

    Args:
        rule: Filter rule
        field_value: The task's value of the field, None when it has none
        field: Definition of the field

    Returns:
        True if the value satisfies the rule; True as well for a rule whose
        operator is not registered for the field type
    """
    operator = rule.operator
    if operator not in get_operators_for_type(field.type):
        logger.warning(
            "Ignoring filter rule with unsupported operator",
            extra={
                "field_id": field.id,
                "field_type": field.type.value,
                "operator": operator.value,
            },
        )
        return True

    if operator == FilterOperator.IS_EMPTY:
        return _is_empty(field_value, field)
    if operator == FilterOperator.IS_NOT_EMPTY:
        return not _is_empty(field_value, field)

    handler = get_field_handler(field.type)

    # Boolean checks treat a missing value as unchecked
    if operator in (FilterOperator.IS_TRUE, FilterOperator.IS_FALSE):
        return handler.matches(operator, field_value, rule.value)

    # No value to compare against
    if field_value is None:
        return False

    return handler.matches(operator, field_value, rule.value)


def task_passes_all_filters(
    rules: Iterable[FilterRule],
    task_id: Any,
    values_index: ValuesIndex,
    fields_index: FieldsIndex,
) -> bool:
    """
    Evaluate a conjunction of rules for one task.

    Args:
        rules: Filter rules; an empty set passes every task
        task_id: Task to test
        values_index: task id -> field id -> stored value
        fields_index: field id -> field definition

    Returns:
        True if the task satisfies every rule. Rules naming a field that is
        not in ``fields_index`` (e.g. a deleted field) are ignored.
    """
    task_values = values_index.get(task_id, {})
    for rule in rules:
        field = fields_index.get(rule.field_id)
        if field is None:
            continue
        if not task_passes_filter(rule, task_values.get(rule.field_id), field):
            return False
    return True


def filter_tasks(
    rules: Iterable[FilterRule],
    task_ids: Iterable[Any],
    values_index: ValuesIndex,
    fields_index: FieldsIndex,
) -> list[Any]:
    """IDs of the tasks passing every rule, in input order."""
    rules = list(rules)
    return [
        task_id
        for task_id in task_ids
        if task_passes_all_filters(rules, task_id, values_index, fields_index)
    ]


def build_values_index(values: Iterable[FieldValue]) -> dict[Any, dict[Any, FieldValue]]:
    """Group stored values by task id, then field id."""
    index: dict[Any, dict[Any, FieldValue]] = {}
    for value in values:
        index.setdefault(value.task_id, {})[value.field_id] = value
    return index


def build_fields_index(fields: Iterable[FieldDefinition]) -> dict[Any, FieldDefinition]:
    return {field.id: field for field in fields}
