"""wfw CLI - Main entry point.

Commands:
- init: Create a wireflow project
- new: Create a workflow
- run: Execute a workflow and its stale dependencies
- list: List workflows with their status
- status: Show why a workflow is fresh or stale
- config: Show effective configuration and its sources
- cat: Print a workflow's output
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from wireflow import __version__
from wireflow.commands import (
    cat_command,
    config_command,
    init_command,
    list_command,
    new_command,
    run_command,
    status_command,
)
from wireflow.env import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

app = typer.Typer(
    help="wireflow - incremental AI workflows.\n\nRe-runs a workflow only when its task, files, config or dependencies change.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"wfw {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else get_settings().wireflow_log_level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Enable debug logging")
    ] = False,
) -> None:
    """wireflow - incremental AI workflows."""
    configure_logging(verbose)


@app.command()
def init(
    path: Annotated[
        Optional[Path], typer.Argument(help="Project directory (defaults to current directory)")
    ] = None,
) -> None:
    """Initialize a wireflow project.

    Creates .workflow/ with config.yaml, project.txt, run/ and output/.

    Examples:
        wfw init
        wfw init ~/projects/report
    """
    init_command(path)


@app.command()
def new(
    name: Annotated[str, typer.Argument(help="Workflow name (e.g., extract, report)")],
    depends_on: Annotated[
        Optional[list[str]],
        typer.Option("--depends-on", "-d", help="Workflow whose output this one uses (repeatable)"),
    ] = None,
) -> None:
    """Create a new workflow.

    Examples:
        wfw new extract
        wfw new report --depends-on extract
    """
    new_command(name, depends_on)


@app.command()
def run(
    name: Annotated[str, typer.Argument(help="Workflow to run")],
    profile: Annotated[
        Optional[str], typer.Option("--profile", help="Model profile: fast, balanced or deep")
    ] = None,
    model: Annotated[
        Optional[str], typer.Option("--model", "-m", help="Explicit model id (overrides profile)")
    ] = None,
    temperature: Annotated[
        Optional[float],
        typer.Option("--temperature", "-t", min=0.0, max=1.0, help="Sampling temperature"),
    ] = None,
    max_tokens: Annotated[
        Optional[int], typer.Option("--max-tokens", min=1, help="Maximum output tokens")
    ] = None,
    enable_thinking: Annotated[
        Optional[bool],
        typer.Option("--enable-thinking/--disable-thinking", help="Extended thinking"),
    ] = None,
    thinking_budget: Annotated[
        Optional[int], typer.Option("--thinking-budget", min=1024, help="Thinking token budget")
    ] = None,
    effort: Annotated[
        Optional[str], typer.Option("--effort", help="Effort level: low, medium or high")
    ] = None,
    system: Annotated[
        Optional[str],
        typer.Option("--system", "-p", help="Comma-separated system prompt components"),
    ] = None,
    output_format: Annotated[
        Optional[str], typer.Option("--format", "-f", help="Output file extension (md, json, txt)")
    ] = None,
    enable_citations: Annotated[
        Optional[bool],
        typer.Option("--enable-citations/--disable-citations", help="Document citations"),
    ] = None,
    context: Annotated[
        Optional[list[str]],
        typer.Option("--context-file", "-cx", help="Extra context file (repeatable)"),
    ] = None,
    input_files: Annotated[
        Optional[list[str]],
        typer.Option("--input-file", "-in", help="Extra input file (repeatable)"),
    ] = None,
    depends_on: Annotated[
        Optional[list[str]],
        typer.Option("--depends-on", "-d", help="Extra dependency (repeatable)"),
    ] = None,
    export_file: Annotated[
        Optional[str], typer.Option("--export-file", "-e", help="Copy output here")
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Write request.json only; no API call"),
    ] = False,
    no_auto_deps: Annotated[
        bool, typer.Option("--no-auto-deps", help="Do not execute stale dependencies")
    ] = False,
    force: Annotated[
        bool, typer.Option("--force", help="Execute even if fresh")
    ] = False,
) -> None:
    """Run a workflow, executing stale dependencies first.

    Examples:
        wfw run report
        wfw run report --profile deep --force
        wfw run report -cx notes.md --dry-run
    """
    options = {
        "profile": profile,
        "model": model,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "enable_thinking": enable_thinking,
        "thinking_budget": thinking_budget,
        "effort": effort,
        "system": system,
        "output_format": output_format,
        "enable_citations": enable_citations,
        "context": context,
        "input": input_files,
        "depends_on": depends_on,
        "export_file": export_file,
    }
    dry_run = dry_run or get_settings().wireflow_dry_run
    run_command(name, options, dry_run=dry_run, force=force, auto_deps=not no_auto_deps)


@app.command("list")
def list_cmd() -> None:
    """List workflows with last run time and status.

    Examples:
        wfw list
    """
    list_command()


@app.command()
def status(
    name: Annotated[str, typer.Argument(help="Workflow to check")],
) -> None:
    """Show whether a workflow is fresh or stale, and why.

    Examples:
        wfw status report
    """
    status_command(name)


@app.command()
def config(
    name: Annotated[
        Optional[str], typer.Argument(help="Workflow name (omit for project configuration)")
    ] = None,
) -> None:
    """Show effective configuration with the source of each value.

    Examples:
        wfw config
        wfw config report
    """
    config_command(name)


@app.command()
def cat(
    name: Annotated[str, typer.Argument(help="Workflow whose output to print")],
) -> None:
    """Print a workflow's latest output.

    Examples:
        wfw cat report
    """
    cat_command(name)


if __name__ == "__main__":
    app()
