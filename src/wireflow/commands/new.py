"""New command implementation."""

from wireflow.commands.common import exit_on_error, load_project
from wireflow.discovery.display import print_warning, print_workflow_created
from wireflow.scaffold.init import create_workflow


def new_command(name: str, depends_on: list[str] | None = None) -> None:
    """Create a workflow in the current project."""
    with exit_on_error():
        project = load_project()
        workflow_dir = create_workflow(project.root, name, depends_on)

    for dep in depends_on or []:
        if not project.workflow_exists(dep):
            print_warning(f"Dependency '{dep}' does not exist yet. Create it with: wfw new {dep}")

    print_workflow_created(workflow_dir, workflow_dir.name)
