"""Workflow listing utilities."""

import logging
from typing import TYPE_CHECKING, Any

from wireflow.exceptions import WireflowError
from wireflow.pipeline.resolver import read_dependency_names
from wireflow.pipeline.staleness import execution_status, execution_timestamp
from wireflow.project.paths import list_workflow_names

if TYPE_CHECKING:
    from wireflow.project.context import ProjectContext

logger = logging.getLogger(__name__)


def describe_workflow(project: "ProjectContext", name: str) -> dict[str, Any]:
    """Summary row for one workflow. Config problems become an error status."""
    info: dict[str, Any] = {"name": name, "depends_on": []}
    try:
        info["depends_on"] = read_dependency_names(project.workflow_dir(name))
        info["executed_at"] = execution_timestamp(project, name)
        info["status"] = execution_status(project, name)
    except WireflowError as e:
        logger.debug("Cannot determine status of %s: %s", name, e)
        info.setdefault("executed_at", "-")
        info["status"] = "error: invalid config"
    return info


def list_workflows(project: "ProjectContext") -> list[dict[str, Any]]:
    """Describe every workflow in the project, sorted by name."""
    return [describe_workflow(project, name) for name in list_workflow_names(project.workflows_root)]
