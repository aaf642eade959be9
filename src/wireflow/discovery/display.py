"""Rich display utilities for the wfw CLI."""

from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from wireflow.core.schemas import SNAPSHOT_KEYS, WorkflowSettings
from wireflow.pipeline.driver import PipelineReport, StepAction

console = Console()

SOURCE_STYLES = {
    "builtin": "dim",
    "global": "blue",
    "project": "cyan",
    "workflow": "green",
    "cli": "bold magenta",
    "unset": "dim",
}


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]✓[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]✗[/] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]⚠[/] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[bold blue]ℹ[/] {message}")


def _status_style(status: str) -> str:
    if status == "fresh":
        return "green"
    if status.startswith("stale"):
        return "yellow"
    return "dim"


def print_workflow_created(workflow_dir: Path, name: str) -> None:
    """Print workflow creation success."""
    console.print()
    console.print(
        Panel(
            f"[bold green]Workflow created successfully![/]\n\n"
            f"[bold]Name:[/] {name}\n"
            f"[bold]Path:[/] {workflow_dir}\n\n"
            f"[dim]Next steps:[/]\n"
            f"  1. Describe the task in [cyan]{workflow_dir}/task.txt[/]\n"
            f"  2. Add context or input files to [cyan]{workflow_dir}/config.yaml[/]\n"
            f"  3. Run [cyan]wfw run {name} --dry-run[/] to inspect the request\n"
            f"  4. Run [cyan]wfw run {name}[/] to execute",
            title="[bold]wireflow[/]",
            border_style="green",
        )
    )


def print_workflow_list(workflows: list[dict[str, Any]]) -> None:
    """Print a table of workflows with their last run and status."""
    if not workflows:
        print_info("No workflows found. Create one with [cyan]wfw new <name>[/]")
        return

    table = Table(title="Workflows")
    table.add_column("Name", style="cyan")
    table.add_column("Depends on")
    table.add_column("Last run")
    table.add_column("Status")

    for wf in workflows:
        status = wf.get("status", "pending")
        table.add_row(
            wf["name"],
            ", ".join(wf.get("depends_on", [])) or "-",
            wf.get("executed_at", "(not run)"),
            f"[{_status_style(status)}]{status}[/]",
        )

    console.print(table)


def print_config(name: str | None, settings: WorkflowSettings) -> None:
    """Print effective configuration with the tier each value came from."""
    title = f"Configuration: {name}" if name else "Project configuration"
    table = Table(title=title)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_column("Source")

    snapshot = settings.generation.snapshot()
    sources = settings.config_sources()
    for key in SNAPSHOT_KEYS:
        value = snapshot[key]
        if isinstance(value, list):
            value = ", ".join(value) or "-"
        source = sources[key]
        table.add_row(key, str(value), f"[{SOURCE_STYLES.get(source, '')}]{source}[/]")

    for key in ("context", "input", "depends_on"):
        values = getattr(settings, key)
        source = settings.source_of(key)
        table.add_row(key, "\n".join(values) or "-", f"[{SOURCE_STYLES.get(source, '')}]{source}[/]")

    if settings.export_file:
        source = settings.source_of("export_file")
        table.add_row("export_file", settings.export_file, f"[{SOURCE_STYLES.get(source, '')}]{source}[/]")

    console.print(table)


def print_pipeline_report(report: PipelineReport) -> None:
    """Print what happened to each node of a pipeline run."""
    for step in report.steps:
        label = "target" if step.name == report.target else "dependency"
        if step.action == StepAction.EXECUTED:
            console.print(f"  [green]✓[/] {step.name} [dim]({label}, {step.reason})[/]")
        elif step.action == StepAction.DRY_RUN:
            console.print(f"  [yellow]○[/] {step.name} [dim]({label}, dry run, {step.reason})[/]")
        else:
            console.print(f"  [dim]-[/] {step.name} [dim]({label}, {step.reason})[/]")
