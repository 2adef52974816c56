"""Formula dependency tracking for task fields.

Tracks which computed fields depend on which other fields, keyed by field
name, for recalculation order and circular reference detection.
"""

from collections import defaultdict, deque
from typing import Iterable

from taskfields.core.logging import get_logger
from taskfields.formula.references import extract_field_refs
from taskfields.schemas.field import FieldDefinition, FieldType

logger = get_logger(__name__)


class FormulaDependencyGraph:
    """
    Track computed field dependencies for recalculation.

    Maintains a bidirectional graph of field dependencies:
    - dependencies: field name -> names of fields that depend on it
    - reverse: field name -> names of fields it depends on
    """

    def __init__(self):
        # If field A changes, all fields in dependencies[A] need recalculation
        self.dependencies: dict[str, set[str]] = defaultdict(set)

        # To calculate field A, we need all fields in reverse[A]
        self.reverse: dict[str, set[str]] = defaultdict(set)

        # Computed fields left out of the graph because they close a cycle
        self.cyclic: set[str] = set()

    @classmethod
    def from_fields(cls, catalog: Iterable[FieldDefinition]) -> "FormulaDependencyGraph":
        """
        Build the graph of a project's field catalog.

        Formula fields depend on the fields their formula references; rollup
        fields depend on their source field. Fields whose dependencies would
        close a cycle are recorded in ``cyclic`` instead of being added.

        Args:
            catalog: All field definitions of a project

        Returns:
            Dependency graph
        """
        graph = cls()
        for definition in catalog:
            if definition.type == FieldType.FORMULA:
                depends_on = set(extract_field_refs(definition.formula))
            elif definition.type == FieldType.ROLLUP and definition.rollup_config:
                depends_on = {definition.rollup_config.source_field_name}
            else:
                continue

            added, error = graph.add_formula_field(definition.name, depends_on)
            if not added:
                logger.warning(
                    "Field '%s' not added to dependency graph: %s", definition.name, error
                )
                graph.cyclic.add(definition.name)
        return graph

    def add_formula_field(self, field_name: str, depends_on: set[str]) -> tuple[bool, str | None]:
        """
        Add or replace a computed field in the dependency graph.

        Args:
            field_name: Name of the computed field
            depends_on: Names of the fields it references

        Returns:
            Tuple of (success, error_message)
        """
        if self.detect_circular_reference(field_name, depends_on):
            return False, f"Circular reference detected for field '{field_name}'"

        self._unlink(field_name)

        self.reverse[field_name] = set(depends_on)
        for dep in depends_on:
            self.dependencies[dep].add(field_name)

        return True, None

    def remove_formula_field(self, field_name: str) -> None:
        """Remove a computed field and the edges pointing at it."""
        self._unlink(field_name)
        self.reverse.pop(field_name, None)
        self.dependencies.pop(field_name, None)
        self.cyclic.discard(field_name)

    def _unlink(self, field_name: str) -> None:
        for dep in self.reverse.get(field_name, ()):
            self.dependencies[dep].discard(field_name)

    def get_affected_fields(self, changed_field: str) -> list[str]:
        """
        Get computed fields that need recalculation when a field changes.

        Breadth-first over transitive dependents, nearest first.

        Args:
            changed_field: Name of the field that changed

        Returns:
            Names of fields that need recalculation
        """
        affected: list[str] = []
        to_process = deque([changed_field])
        seen = {changed_field}

        while to_process:
            current = to_process.popleft()
            for dependent in sorted(self.dependencies.get(current, ())):
                if dependent not in seen:
                    seen.add(dependent)
                    affected.append(dependent)
                    to_process.append(dependent)

        return affected

    def get_unresolvable_fields(self) -> set[str]:
        """Fields left out for closing a cycle, and every field depending on them."""
        unresolvable = set(self.cyclic)
        for name in self.cyclic:
            unresolvable.update(self.get_affected_fields(name))
        return unresolvable

    def get_evaluation_order(self, field_names: Iterable[str]) -> list[str]:
        """
        Get evaluation order for several computed fields.

        Topological sort (Kahn's algorithm). Fields that do not depend on
        each other keep their input order.

        Args:
            field_names: Names of the computed fields to evaluate

        Returns:
            Ordered names, or an empty list if the fields contain a cycle
        """
        ordered = list(dict.fromkeys(field_names))
        wanted = set(ordered)
        in_degree = {
            name: sum(1 for dep in self.reverse.get(name, ()) if dep in wanted and dep != name)
            for name in ordered
        }
        queue = deque(name for name in ordered if in_degree[name] == 0)

        result: list[str] = []
        while queue:
            name = queue.popleft()
            result.append(name)
            dependents = self.dependencies.get(name, set())
            for dependent in ordered:
                if dependent in dependents and dependent != name:
                    in_degree[dependent] -= 1
                    if in_degree[dependent] == 0:
                        queue.append(dependent)

        if len(result) != len(ordered):
            return []
        return result

    def detect_circular_reference(self, field_name: str, depends_on: set[str]) -> bool:
        """
        Check if giving ``field_name`` these dependencies would create a cycle.

        Depth-first walk from the new dependencies through existing edges.

        Args:
            field_name: Name of the field being added or updated
            depends_on: Names of the fields it would reference

        Returns:
            True if circular reference detected
        """
        if field_name in depends_on:
            return True

        visited: set[str] = set()
        to_check = list(depends_on)

        while to_check:
            current = to_check.pop()
            if current == field_name:
                return True
            if current in visited:
                continue
            visited.add(current)
            to_check.extend(self.reverse.get(current, ()))

        return False

    def get_dependencies(self, field_name: str) -> set[str]:
        """Direct dependencies of a field."""
        return set(self.reverse.get(field_name, ()))

    def get_dependents(self, field_name: str) -> set[str]:
        """Direct dependents of a field."""
        return set(self.dependencies.get(field_name, ()))

    def clear(self) -> None:
        self.dependencies.clear()
        self.reverse.clear()
        self.cyclic.clear()

    def __repr__(self) -> str:
        return (
            f"FormulaDependencyGraph("
            f"fields={len(self.reverse)}, "
            f"edges={sum(len(deps) for deps in self.dependencies.values())})"
        )
