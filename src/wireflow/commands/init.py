"""Init command implementation."""

from pathlib import Path

from wireflow.discovery.display import console, print_error, print_info, print_success
from wireflow.project.paths import is_initialized
from wireflow.scaffold.init import init_project


def init_command(path: Path | None = None) -> None:
    """Initialize a wireflow project.

    This function contains the business logic for the init command.
    """
    project_dir = (path or Path.cwd()).resolve()
    if is_initialized(project_dir):
        print_info(f"wireflow is already initialized in {project_dir}")
        console.print("  Run 'wfw list' to see workflows")
        console.print("  Run 'wfw new <name>' to create a new workflow")
        return

    try:
        wireflow_dir = init_project(project_dir)
    except OSError as e:
        print_error(f"Failed to initialize project: {e}")
        raise SystemExit(1) from None

    print_success(f"Initialized wireflow project in {wireflow_dir}")
    console.print()
    console.print("[bold]Next steps:[/]")
    console.print(f"  1. Describe the project in [cyan]{wireflow_dir / 'project.txt'}[/]")
    console.print("  2. Run [cyan]wfw new <name>[/] to create a workflow")
