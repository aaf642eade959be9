"""Run command implementation."""

from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from wireflow.commands.common import exit_on_error, load_project
from wireflow.discovery.display import console, print_info, print_pipeline_report, print_success
from wireflow.engine.container import Container
from wireflow.exceptions import InvalidArgumentError
from wireflow.pipeline.driver import StepAction
from wireflow.project.config import ConfigLayer, ListAppend
from wireflow.project.paths import to_project_relative


def build_overrides(project_root: Path, options: dict[str, Any]) -> ConfigLayer:
    """Turn CLI options into the cli tier of the cascade.

    Scalars replace; file lists and dependencies extend the workflow's own
    lists. File paths are taken relative to the current directory.

    Raises:
        InvalidArgumentError: If a value fails validation
    """
    data: dict[str, Any] = {k: v for k, v in options.items() if v is not None}

    system = data.pop("system", None)
    if system:
        data["system_prompts"] = [p.strip() for p in system.split(",") if p.strip()]

    for key in ("context", "input"):
        paths = data.pop(key, None)
        if paths:
            data[key] = ListAppend(append=[to_project_relative(Path(p), project_root) for p in paths])

    depends_on = data.pop("depends_on", None)
    if depends_on:
        data["depends_on"] = ListAppend(append=list(depends_on))

    export_file = data.pop("export_file", None)
    if export_file:
        data["export_file"] = str(Path(export_file).resolve())

    try:
        return ConfigLayer.model_validate(data)
    except PydanticValidationError as e:
        error = e.errors()[0]
        argument = ".".join(str(part) for part in error["loc"]) or "option"
        raise InvalidArgumentError(argument, error["msg"]) from None


def run_command(
    name: str,
    options: dict[str, Any],
    dry_run: bool = False,
    force: bool = False,
    auto_deps: bool = True,
) -> None:
    """Run a workflow, executing stale dependencies first.

    This function contains the business logic for the run command.
    """
    with exit_on_error():
        project = load_project()
        overrides = build_overrides(project.root, options)
        settings = project.workflow_settings(name, overrides)

        if dry_run:
            print_info(f"Dry run: {name}")
        else:
            print_info(f"Running workflow: {name}")

        driver = Container.pipeline_driver(project)
        report = driver.run(name, settings, force=force, auto_deps=auto_deps, dry_run=dry_run)

    print_pipeline_report(report)
    console.print()

    target = report.steps[-1]
    if target.action == StepAction.DRY_RUN:
        print_success(f"Request written to {project.workflow_dir(name) / 'request.json'}")
    elif target.action == StepAction.EXECUTED:
        output = project.output_dir / f"{name}.{settings.generation.output_format}"
        print_success(f"{name} completed: {output}")
    else:
        print_success(f"{name} is up to date ({target.reason})")
