"""Status command implementation."""

from wireflow.commands.common import exit_on_error, load_project
from wireflow.discovery.display import console
from wireflow.pipeline.resolver import read_dependency_names
from wireflow.pipeline.staleness import check_staleness, execution_timestamp


def status_command(name: str) -> None:
    """Show whether a workflow is fresh, and why not if it is stale."""
    with exit_on_error():
        project = load_project()
        settings = project.workflow_settings(name)
        result = check_staleness(project, name, settings)
        log = project.log_store.read(name)
        depends_on = read_dependency_names(project.workflow_dir(name))

    if result.stale:
        state = f"[yellow]stale[/] [dim]({result.reason})[/]"
    else:
        state = "[green]fresh[/]"

    console.print(f"[bold]Workflow:[/] {name}")
    console.print(f"[bold]Status:[/] {state}")
    console.print(f"[bold]Last run:[/] {execution_timestamp(project, name)}")
    if log is not None:
        console.print(f"[bold]Execution hash:[/] {log.execution_hash}")
        console.print(f"[bold]Output:[/] {log.output.path}")
    if depends_on:
        console.print(f"[bold]Depends on:[/] {', '.join(depends_on)}")
