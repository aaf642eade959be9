"""Cat command implementation."""

from wireflow.commands.common import exit_on_error, load_project
from wireflow.discovery.display import console, print_error
from wireflow.engine.request import published_output
from wireflow.exceptions import WorkflowNotFoundError


def cat_command(name: str) -> None:
    """Print a workflow's latest output."""
    with exit_on_error():
        project = load_project()
        if not project.workflow_exists(name):
            raise WorkflowNotFoundError(name)

    output = published_output(project, name)
    if output is None:
        print_error(f"No output for {name} yet. Run it with: wfw run {name}")
        raise SystemExit(1)

    console.print(output.read_text(errors="replace"), markup=False, highlight=False, end="")
