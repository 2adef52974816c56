"""Custom field service: evaluation glue between stored values and the core.

Maps a project's field catalog and stored values onto formula contexts,
rollup inputs and filter indexes. Performs no I/O; callers load the
catalog and values and persist whatever this service returns.
"""

from typing import Any, Iterable, Mapping, Optional, Sequence

from taskfields.core.exceptions import ErrorCode, FormulaReferenceError
from taskfields.core.logging import LoggerMixin
from taskfields.fields import require_field_handler
from taskfields.formula.context import FormulaContext, current_epoch_ms
from taskfields.formula.dependencies import FormulaDependencyGraph
from taskfields.formula.engine import evaluate_formula, evaluate_rollup
from taskfields.formula.references import extract_field_refs
from taskfields.schemas.field import FieldDefinition, FieldType, FieldValue, TaskSnapshot
from taskfields.schemas.formula import FormulaFailure, FormulaResult
from taskfields.values import TypedValue

TaskValues = Mapping[Any, FieldValue]
ValuesIndex = Mapping[Any, TaskValues]


class CustomFieldService(LoggerMixin):
    """Service for evaluating the custom fields of one project."""

    def __init__(self, catalog: Iterable[FieldDefinition]):
        """
        Args:
            catalog: All field definitions of the project
        """
        self.catalog: list[FieldDefinition] = list(catalog)
        self._by_name = {field.name: field for field in self.catalog}

    def get_field_by_name(self, name: str) -> Optional[FieldDefinition]:
        return self._by_name.get(name)

    def build_formula_context(
        self,
        task: TaskSnapshot,
        task_values: TaskValues,
        now: Optional[int] = None,
    ) -> FormulaContext:
        """
        Build the formula context of one task.

        Every catalog field is exposed under its name; fields the task has
        no value for read as null.

        Args:
            task: Built-in attributes of the task
            task_values: The task's stored values, keyed by field id
            now: Epoch milliseconds used by NOW() and TODAY()

        Returns:
            FormulaContext for the task
        """
        fields = {
            field.name: require_field_handler(field.type).to_typed_value(task_values.get(field.id))
            for field in self.catalog
        }
        return FormulaContext(
            status=task.status,
            priority=task.priority,
            deadline=task.deadline,
            progress=task.progress,
            title=task.title,
            description=task.description,
            fields=fields,
            now=current_epoch_ms() if now is None else now,
        )

    def collect_rollup_values(
        self,
        field: FieldDefinition,
        values_index: ValuesIndex,
        task_ids: Optional[Iterable[Any]] = None,
    ) -> list[TypedValue]:
        """
        Gather the source values of a rollup field across tasks.

        Args:
            field: Rollup field
            values_index: task id -> field id -> stored value
            task_ids: Tasks to aggregate over (default: every task in the index)

        Returns:
            Source values in task order

        Raises:
            FormulaReferenceError: If the source field is not in the catalog
        """
        source_name = field.rollup_config.source_field_name
        source = self.get_field_by_name(source_name)
        if source is None:
            raise FormulaReferenceError(source_name, f"Rollup source field not found: {source_name}")

        handler = require_field_handler(source.type)
        if task_ids is None:
            task_ids = list(values_index)
        return [
            handler.to_typed_value(values_index.get(task_id, {}).get(source.id))
            for task_id in task_ids
        ]

    def evaluate_formula_field(
        self,
        field: FieldDefinition,
        task: TaskSnapshot,
        task_values: TaskValues,
        now: Optional[int] = None,
    ) -> FormulaResult:
        """Evaluate a formula field for one task."""
        if field.type != FieldType.FORMULA:
            return FormulaFailure(
                error=f"Field '{field.name}' is not a formula field",
                error_code=ErrorCode.ERROR,
            )
        context = self.build_formula_context(task, task_values, now=now)
        return evaluate_formula(field.formula, context)

    def evaluate_rollup_field(
        self,
        field: FieldDefinition,
        values_index: ValuesIndex,
        task_ids: Optional[Iterable[Any]] = None,
    ) -> FormulaResult:
        """Evaluate a rollup field across the project's tasks."""
        if field.type != FieldType.ROLLUP:
            return FormulaFailure(
                error=f"Field '{field.name}' is not a rollup field",
                error_code=ErrorCode.ERROR,
            )
        try:
            values = self.collect_rollup_values(field, values_index, task_ids)
        except FormulaReferenceError as e:
            self.logger.debug("Rollup field '%s' failed: %s", field.name, e.message)
            return FormulaFailure.from_error(e)
        return evaluate_rollup(field.rollup_config.aggregation, values)

    def compute_derived_values(
        self,
        tasks: Sequence[TaskSnapshot],
        values_index: ValuesIndex,
        now: Optional[int] = None,
    ) -> dict[Any, dict[Any, FieldValue]]:
        """
        Evaluate every formula and rollup field for a set of tasks.

        Computed fields are evaluated in dependency order, so a formula may
        use a rollup or another formula. Results are returned as FieldValues
        so derived fields can be filtered like stored ones; failures are
        stored as their error code text. A field reading a failed field is
        not evaluated and takes over that field's error code; a rollup fails
        when its source failed for any of the tasks.

        Args:
            tasks: Tasks of the project
            values_index: task id -> field id -> stored value
            now: Epoch milliseconds shared by every formula of the run

        Returns:
            task id -> field id -> derived value
        """
        now = current_epoch_ms() if now is None else now
        graph = FormulaDependencyGraph.from_fields(self.catalog)
        computed = [field for field in self.catalog if field.is_computed]
        unresolvable = graph.get_unresolvable_fields()
        order = graph.get_evaluation_order(
            field.name for field in computed if field.name not in unresolvable
        )

        task_ids = [task.id for task in tasks]
        working = {task.id: dict(values_index.get(task.id, {})) for task in tasks}
        derived: dict[Any, dict[Any, FieldValue]] = {task.id: {} for task in tasks}
        failures: dict[Any, dict[str, FormulaFailure]] = {task.id: {} for task in tasks}

        def store(field: FieldDefinition, task_id: Any, result: FormulaResult) -> None:
            value = self._to_field_value(field, task_id, result)
            working[task_id][field.id] = value
            derived[task_id][field.id] = value
            if not result.success:
                failures[task_id][field.name] = result

        for field in computed:
            if field.name in unresolvable:
                failure = FormulaFailure(
                    error=f"Circular reference involving field '{field.name}'",
                    error_code=ErrorCode.ERROR,
                )
                for task_id in task_ids:
                    store(field, task_id, failure)

        for name in order:
            field = self._by_name[name]
            inputs = self._computed_inputs(field)
            if field.type == FieldType.FORMULA:
                for task in tasks:
                    result = self._upstream_failure(field, inputs, [failures[task.id]])
                    if result is None:
                        result = self.evaluate_formula_field(field, task, working[task.id], now)
                    store(field, task.id, result)
            else:
                result = self._upstream_failure(
                    field, inputs, [failures[task_id] for task_id in task_ids]
                )
                if result is None:
                    result = self.evaluate_rollup_field(field, working, task_ids)
                for task_id in task_ids:
                    store(field, task_id, result)

        return derived

    def _computed_inputs(self, field: FieldDefinition) -> list[str]:
        """Names of the computed fields ``field`` reads, in reference order."""
        if field.type == FieldType.FORMULA:
            names = extract_field_refs(field.formula)
        else:
            names = [field.rollup_config.source_field_name]
        return [
            name
            for name in names
            if name in self._by_name and self._by_name[name].is_computed
        ]

    def _upstream_failure(
        self,
        field: FieldDefinition,
        inputs: list[str],
        failed: Iterable[Mapping[str, FormulaFailure]],
    ) -> Optional[FormulaFailure]:
        for task_failures in failed:
            for name in inputs:
                upstream = task_failures.get(name)
                if upstream is not None:
                    self.logger.debug(
                        "Field '%s' not evaluated: input '%s' failed",
                        field.name,
                        name,
                        extra={"error_code": upstream.error_code.value},
                    )
                    return FormulaFailure(
                        error=f"Field '{name}' failed: {upstream.error}",
                        error_code=upstream.error_code,
                    )
        return None

    def check_field_dependencies(self, field: FieldDefinition) -> Optional[str]:
        """
        Check whether saving ``field`` would create a reference cycle.

        Args:
            field: New or updated field definition

        Returns:
            Error message, or None when the field can be saved
        """
        others = [other for other in self.catalog if other.id != field.id]
        graph = FormulaDependencyGraph.from_fields(others)
        if field.type == FieldType.FORMULA:
            depends_on = set(extract_field_refs(field.formula))
        elif field.type == FieldType.ROLLUP:
            depends_on = {field.rollup_config.source_field_name}
        else:
            return None

        if graph.detect_circular_reference(field.name, depends_on):
            return f"Field '{field.name}' would create a circular reference"
        return None

    def format_field_value(self, field: FieldDefinition, field_value: Optional[FieldValue]) -> str:
        """Display text of a stored value."""
        return require_field_handler(field.type).format_display(field_value, field)

    def validate_field_value(self, field: FieldDefinition, field_value: FieldValue) -> bool:
        """
        Validate a value entered for a field.

        Raises:
            ValueError: If the value is not acceptable for the field
        """
        if field.is_computed:
            raise ValueError(f"Field '{field.name}' is computed and cannot be edited")
        return require_field_handler(field.type).validate(field_value, field)

    @staticmethod
    def _to_field_value(field: FieldDefinition, task_id: Any, result: FormulaResult) -> FieldValue:
        if result.success:
            return require_field_handler(field.type).from_typed_value(
                field.id, task_id, result.typed_value
            )
        return FieldValue(field_id=field.id, task_id=task_id, value=result.error_code.value)


def get_custom_field_service(catalog: Iterable[FieldDefinition]) -> CustomFieldService:
    """Create a service for a project's field catalog."""
    return CustomFieldService(catalog)
