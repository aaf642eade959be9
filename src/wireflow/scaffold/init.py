"""Project and workflow scaffolding."""

import re
from pathlib import Path

from wireflow.core.schemas import GenerationConfig
from wireflow.env import get_settings
from wireflow.exceptions import InvalidArgumentError, WorkflowAlreadyExistsError
from wireflow.project.paths import (
    CONFIG_FILENAME,
    PROJECT_DESCRIPTION_FILENAME,
    TASK_FILENAME,
    get_output_dir,
    get_wireflow_dir,
    get_workflows_dir,
    is_valid_workflow_name,
)
from wireflow.scaffold.template_render import render_template

GITIGNORE_CONTENT = """# wireflow
# Track configuration and tasks, ignore generated artifacts
/output/
/run/*/output.*
/run/*/request.json
/run/*/execution.json
"""


def sanitize_workflow_name(name: str) -> str:
    """Normalize a workflow name to a single safe path component.

    Raises:
        InvalidArgumentError: If nothing usable remains
    """
    sanitized = re.sub(r"\s+", "-", name.strip())
    sanitized = re.sub(r"[^A-Za-z0-9._-]", "", sanitized)
    sanitized = sanitized.strip(".")
    if not is_valid_workflow_name(sanitized):
        raise InvalidArgumentError("name", f"'{name}' is not a valid workflow name")
    return sanitized


def init_project(project_dir: Path | None = None) -> Path:
    """Initialize a wireflow project.

    Creates:
    - .workflow/config.yaml (commented defaults)
    - .workflow/project.txt (empty project description)
    - .workflow/run/ and .workflow/output/
    - .workflow/.gitignore

    Existing files are left untouched.

    Returns:
        Path to the .workflow directory
    """
    if project_dir is None:
        project_dir = Path.cwd()

    wireflow_dir = get_wireflow_dir(project_dir)
    wireflow_dir.mkdir(parents=True, exist_ok=True)
    get_workflows_dir(project_dir).mkdir(exist_ok=True)
    get_output_dir(project_dir).mkdir(exist_ok=True)

    config_path = wireflow_dir / CONFIG_FILENAME
    if not config_path.exists():
        config_path.write_text(
            render_template(
                "project/config.yaml.j2",
                defaults=GenerationConfig(),
                global_config=get_settings().global_config_file,
            )
        )

    description_path = wireflow_dir / PROJECT_DESCRIPTION_FILENAME
    if not description_path.exists():
        description_path.write_text("")

    gitignore_path = wireflow_dir / ".gitignore"
    if not gitignore_path.exists():
        gitignore_path.write_text(GITIGNORE_CONTENT)

    return wireflow_dir


def create_workflow(
    project_root: Path,
    name: str,
    depends_on: list[str] | None = None,
) -> Path:
    """Create a workflow directory with a task skeleton and config.yaml.

    Args:
        project_root: Root of an initialized project
        name: Workflow name (will be sanitized)
        depends_on: Workflows whose outputs this one consumes

    Returns:
        Path to the new workflow directory

    Raises:
        WorkflowAlreadyExistsError: If the workflow exists
    """
    workflow_name = sanitize_workflow_name(name)
    workflow_dir = get_workflows_dir(project_root) / workflow_name
    if workflow_dir.exists():
        raise WorkflowAlreadyExistsError(workflow_name)

    deps = [sanitize_workflow_name(dep) for dep in depends_on or []]
    workflow_dir.mkdir(parents=True)
    (workflow_dir / TASK_FILENAME).write_text(
        render_template("workflow/task.txt.j2", name=workflow_name, depends_on=deps)
    )
    (workflow_dir / CONFIG_FILENAME).write_text(
        render_template("workflow/config.yaml.j2", name=workflow_name, depends_on=deps)
    )
    return workflow_dir
