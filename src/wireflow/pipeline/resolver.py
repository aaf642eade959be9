"""Dependency graph resolution.

Produces a deterministic execution order for a target workflow: every
dependency before its dependents, the target last. Dependencies are
visited in the order they are declared.
"""

import logging
from pathlib import Path

from wireflow.exceptions import (
    CircularDependencyError,
    DependencyNotFoundError,
    WorkflowConfigError,
    WorkflowNotFoundError,
)
from wireflow.project.config import ListAppend, dedupe, read_config_file
from wireflow.project.paths import CONFIG_FILENAME, is_valid_workflow_name

logger = logging.getLogger(__name__)


def read_dependency_names(workflow_dir: Path) -> list[str]:
    """Declared depends_on of one workflow, without resolving its config cascade."""
    try:
        data = read_config_file(workflow_dir / CONFIG_FILENAME)
    except ValueError as e:
        raise WorkflowConfigError(workflow_dir.name, str(e)) from e

    value = data.get("depends_on")
    if value is None:
        return []
    if isinstance(value, dict):
        try:
            value = ListAppend.model_validate(value).append
        except ValueError as e:
            raise WorkflowConfigError(workflow_dir.name, f"invalid depends_on: {e}") from e
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise WorkflowConfigError(workflow_dir.name, "depends_on must be a list of workflow names")
    return dedupe([v for v in value if v])


class DependencyGraph:
    """Workflow dependency edges, loaded on demand from the workflows root."""

    def __init__(self, workflows_root: Path, extra_edges: dict[str, list[str]] | None = None) -> None:
        """Initialize the graph.

        Args:
            workflows_root: Directory containing one subdirectory per workflow
            extra_edges: Additional dependencies per workflow (e.g. from CLI flags)
        """
        self.workflows_root = workflows_root
        self._extra_edges = extra_edges or {}
        self._edges: dict[str, list[str]] = {}

    def exists(self, name: str) -> bool:
        return is_valid_workflow_name(name) and (self.workflows_root / name).is_dir()

    def dependencies(self, name: str) -> list[str]:
        if name not in self._edges:
            declared = read_dependency_names(self.workflows_root / name)
            self._edges[name] = dedupe(declared + self._extra_edges.get(name, []))
        return self._edges[name]

    def resolve_order(self, target: str) -> list[str]:
        """Topological order ending with target.

        Raises:
            WorkflowNotFoundError: If target does not exist
            WorkflowConfigError: If a dependency name is not a plain workflow name
            DependencyNotFoundError: If a declared dependency does not exist
            CircularDependencyError: If the graph reachable from target has a cycle
        """
        if not self.exists(target):
            raise WorkflowNotFoundError(target)

        visited: set[str] = set()
        on_stack: set[str] = set()
        path: list[str] = []
        order: list[str] = []

        def visit(name: str) -> None:
            if name in on_stack:
                raise CircularDependencyError(path[path.index(name):] + [name])
            if name in visited:
                return

            on_stack.add(name)
            path.append(name)
            for dep in self.dependencies(name):
                if not is_valid_workflow_name(dep):
                    raise WorkflowConfigError(name, f"invalid dependency name '{dep}'")
                if not self.exists(dep):
                    raise DependencyNotFoundError(dep, required_by=name)
                visit(dep)
            path.pop()
            on_stack.discard(name)
            visited.add(name)
            order.append(name)

        visit(target)
        logger.debug("Resolved order for %s: %s", target, " -> ".join(order))
        return order


def resolve_order(
    target: str,
    workflows_root: Path,
    extra_edges: dict[str, list[str]] | None = None,
) -> list[str]:
    """Resolve the execution order for target. See DependencyGraph.resolve_order."""
    return DependencyGraph(workflows_root, extra_edges).resolve_order(target)
