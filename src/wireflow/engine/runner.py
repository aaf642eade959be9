"""Workflow runner with dependency injection.

WorkflowRunner executes a single workflow: build the request, call the
injected generation backend, write and publish the output, then record the
execution log. The hash and file records are taken before the backend call,
so they describe the inputs the request was built from. The log is written
last, only after everything else succeeded.
"""

import json
import logging
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel

from wireflow.core.schemas import WorkflowSettings
from wireflow.engine.protocols import GenerationBackend, GenerationResult
from wireflow.engine.request import build_request
from wireflow.exceptions import ExecutionFailedError, WireflowError
from wireflow.pipeline.hashing import compute_execution_hash
from wireflow.project.paths import REQUEST_FILENAME

if TYPE_CHECKING:
    from wireflow.project.context import ProjectContext

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"


class RunOutcome(BaseModel):
    """What a single workflow execution produced."""

    workflow: str
    request_file: Path
    dry_run: bool = False
    output_file: Path | None = None
    published_file: Path | None = None
    export_file: Path | None = None
    execution_hash: str | None = None
    result: GenerationResult | None = None


def publish_output(output_file: Path, published: Path) -> Path:
    """Hard-link output into the shared output directory (copy if linking fails)."""
    published.parent.mkdir(parents=True, exist_ok=True)
    published.unlink(missing_ok=True)
    try:
        os.link(output_file, published)
    except OSError:
        logger.debug("Hard link failed for %s, copying instead", published)
        shutil.copy2(output_file, published)
    return published


class WorkflowRunner:
    """Executes workflows with an injected generation backend.

    Separates execution orchestration from the remote call itself, so tests
    and alternative providers can swap the backend.
    """

    def __init__(self, project: "ProjectContext", backend: GenerationBackend) -> None:
        """Initialize runner with dependencies.

        Args:
            project: Loaded project the workflows belong to
            backend: Generation backend performing the remote call
        """
        self.project = project
        self._backend = backend

    def run(
        self,
        name: str,
        settings: WorkflowSettings,
        dry_run: bool = False,
        on_log: Callable[[], None] | None = None,
    ) -> RunOutcome:
        """Execute one workflow with fully resolved settings.

        Args:
            name: Workflow name
            settings: Settings to run with (already isolated by the caller)
            dry_run: Only write request.json; no backend call, no log
            on_log: Called once the output is in place, right before the
                execution log is written

        Returns:
            RunOutcome describing the files written

        Raises:
            TaskFileNotFoundError: If the workflow has no task.txt
            DependencyOutputMissingError: If a dependency never produced output
            ExecutionFailedError: If the backend call fails
        """
        project = self.project
        workflow_dir = project.workflow_dir(name)

        request = build_request(project, name, settings, strict=not dry_run)
        request_file = workflow_dir / REQUEST_FILENAME
        request_file.write_text(json.dumps(request.payload(), indent=2) + "\n")
        logger.debug("Wrote %s", request_file)

        if dry_run:
            logger.info("Dry run for %s: request written to %s", name, request_file)
            return RunOutcome(workflow=name, request_file=request_file, dry_run=True)

        fmt = settings.generation.output_format
        output_file = workflow_dir / f"output.{fmt}"
        execution_hash = compute_execution_hash(
            workflow_dir,
            project.root,
            settings,
            project.log_store.recorded_hash,
        )
        log = project.log_store.build(name, settings, execution_hash, output_file)

        logger.info("Generating %s with %s", name, request.model)
        try:
            result = self._backend.generate(request)
        except WireflowError:
            raise
        except Exception as e:
            logger.error("Generation failed for %s: %s", name, e)
            raise ExecutionFailedError(name, 1, str(e)) from e

        if output_file.exists():
            output_file.replace(output_file.with_name(output_file.name + BACKUP_SUFFIX))
        output_file.write_text(result.text)

        published = publish_output(output_file, project.output_dir / f"{name}.{fmt}")

        export_file = None
        if settings.export_file:
            export_file = Path(settings.export_file)
            if not export_file.is_absolute():
                export_file = project.root / export_file
            export_file.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(output_file, export_file)
            logger.info("Exported %s to %s", name, export_file)

        if on_log:
            on_log()
        project.log_store.write(project.log_store.with_output(log, output_file))

        return RunOutcome(
            workflow=name,
            request_file=request_file,
            output_file=output_file,
            published_file=published,
            export_file=export_file,
            execution_hash=execution_hash,
            result=result,
        )
