"""Project layout helpers.

A project is any directory containing .workflow/. Workflows live in
.workflow/run/<name>/ and their published outputs in .workflow/output/.
"""

import re
from pathlib import Path

from wireflow.exceptions import ProjectNotInitializedError

WIREFLOW_DIRNAME = ".workflow"
CONFIG_FILENAME = "config.yaml"
TASK_FILENAME = "task.txt"
EXECUTION_LOG_FILENAME = "execution.json"
REQUEST_FILENAME = "request.json"
PROJECT_DESCRIPTION_FILENAME = "project.txt"

WORKFLOW_NAME_PATTERN = re.compile(r"[A-Za-z0-9._-]+")


def is_valid_workflow_name(name: str) -> bool:
    """A single path component of letters, digits, "._-", not starting or ending with a dot."""
    return bool(WORKFLOW_NAME_PATTERN.fullmatch(name)) and name.strip(".") == name


def get_wireflow_dir(project_dir: Path | None = None) -> Path:
    """Get the .workflow directory path."""
    if project_dir is None:
        project_dir = Path.cwd()
    return project_dir / WIREFLOW_DIRNAME


def get_workflows_dir(project_dir: Path | None = None) -> Path:
    """Get the workflows root (.workflow/run)."""
    return get_wireflow_dir(project_dir) / "run"


def get_output_dir(project_dir: Path | None = None) -> Path:
    """Get the directory holding each workflow's latest output."""
    return get_wireflow_dir(project_dir) / "output"


def is_initialized(project_dir: Path | None = None) -> bool:
    """Check if a wireflow project exists at project_dir (not its parents)."""
    return get_wireflow_dir(project_dir).is_dir()


def find_project_root(start: Path | None = None) -> Path:
    """Walk up from start (default cwd) to the first directory containing .workflow/.

    Raises:
        ProjectNotInitializedError: If no ancestor is a project
    """
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / WIREFLOW_DIRNAME).is_dir():
            return candidate
    raise ProjectNotInitializedError(str(current))


def list_workflow_names(workflows_dir: Path) -> list[str]:
    """Names of all workflow directories, sorted."""
    if not workflows_dir.exists():
        return []
    return sorted(
        path.name
        for path in workflows_dir.iterdir()
        if path.is_dir() and not path.name.startswith(".")
    )


def to_project_relative(path: Path, project_root: Path) -> str:
    """Express a path relative to the project root when it lies inside it."""
    resolved = path if path.is_absolute() else (Path.cwd() / path)
    resolved = resolved.resolve()
    try:
        return resolved.relative_to(project_root.resolve()).as_posix()
    except ValueError:
        return str(resolved)
