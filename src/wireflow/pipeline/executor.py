"""Dependency execution in an isolated configuration scope."""

import logging
from typing import TYPE_CHECKING, Callable

from wireflow.core.schemas import WorkflowSettings
from wireflow.exceptions import DependencyExecutionError, ExecutionFailedError, WireflowError

if TYPE_CHECKING:
    from wireflow.engine.runner import RunOutcome, WorkflowRunner
    from wireflow.project.context import ProjectContext

logger = logging.getLogger(__name__)


def isolated_settings(project: "ProjectContext", name: str) -> WorkflowSettings:
    """Settings a dependency runs with.

    Built from the baseline captured at project load, with workflow-only
    fields cleared, then the dependency's own config.yaml. Nothing from the
    target's CLI overrides or from sibling dependencies is visible.
    """
    return project.workflow_settings(name)


def execute_dependency(
    project: "ProjectContext",
    name: str,
    runner: "WorkflowRunner",
    dry_run: bool = False,
    on_log: Callable[[], None] | None = None,
) -> "RunOutcome":
    """Run one stale dependency as a standalone invocation.

    The dependency's own predecessors are not resolved again; the caller
    has already ordered the whole graph.

    Raises:
        DependencyExecutionError: If the dependency fails. No execution log
            is written for it.
    """
    settings = isolated_settings(project, name)
    logger.info("Executing dependency %s", name)

    try:
        return runner.run(name, settings, dry_run=dry_run, on_log=on_log)
    except ExecutionFailedError as e:
        raise DependencyExecutionError(name, e.exit_code, e.stderr or e.message) from e
    except WireflowError as e:
        raise DependencyExecutionError(name, 1, e.message) from e
