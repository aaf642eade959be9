"""Execution log persistence.

One execution.json per workflow, written only after a successful run and
fully overwritten each time. A missing or unreadable log means the workflow
is treated as never executed.
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from wireflow.core.schemas import (
    DependencyRecord,
    ExecutionLog,
    FileRecord,
    OutputRecord,
    WorkflowSettings,
)
from wireflow.pipeline.hashing import HASH_PREFIX, file_record, hash_file
from wireflow.project.paths import EXECUTION_LOG_FILENAME

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_timestamp(now: datetime | None = None) -> str:
    """UTC ISO-8601 timestamp with a Z suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_executed_at(value: str) -> float | None:
    """Epoch seconds for a recorded executed_at, or None if unparsable."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


class ExecutionLogStore:
    """Reads and writes execution logs under the workflows root."""

    def __init__(self, project_root: Path, workflows_root: Path) -> None:
        self.project_root = project_root
        self.workflows_root = workflows_root

    def log_path(self, workflow_name: str) -> Path:
        return self.workflows_root / workflow_name / EXECUTION_LOG_FILENAME

    def exists(self, workflow_name: str) -> bool:
        return self.log_path(workflow_name).is_file()

    def read(self, workflow_name: str) -> ExecutionLog | None:
        """Load a workflow's log. Missing or corrupt -> None."""
        path = self.log_path(workflow_name)
        if not path.is_file():
            return None

        try:
            return ExecutionLog.model_validate_json(path.read_bytes())
        except (OSError, ValueError, PydanticValidationError) as e:
            logger.warning("Ignoring unreadable execution log %s: %s", path, e)
            return None

    def recorded_hash(self, workflow_name: str) -> str | None:
        """The execution_hash a workflow's log currently records."""
        log = self.read(workflow_name)
        return log.execution_hash if log else None

    def build(
        self,
        workflow_name: str,
        settings: WorkflowSettings,
        execution_hash: str,
        output_file: Path,
        executed_at: str | None = None,
    ) -> ExecutionLog:
        """Assemble the log for a run.

        Called before the backend call so file records describe the state
        the request was built from. Dependency entries snapshot each
        dependency's execution_hash as recorded right now, not a live
        reference. The output record is refreshed by with_output().
        """
        context = self._file_records(settings.context)
        inputs = self._file_records(settings.input)

        depends_on = []
        for dep in settings.depends_on:
            dep_log = self.read(dep)
            depends_on.append(
                DependencyRecord(
                    workflow=dep,
                    execution_hash=dep_log.execution_hash if dep_log else "",
                    output_path=dep_log.output.path if dep_log else "",
                )
            )

        return ExecutionLog(
            workflow=workflow_name,
            executed_at=executed_at or utc_timestamp(),
            execution_hash=execution_hash,
            config=settings.generation.snapshot(),
            config_sources=settings.config_sources(),
            context=context,
            input=inputs,
            depends_on=depends_on,
            output=self._output_record(output_file),
        )

    def with_output(self, log: ExecutionLog, output_file: Path) -> ExecutionLog:
        """Copy of log whose output record describes output_file as it is now."""
        return log.model_copy(update={"output": self._output_record(output_file)})

    def write(self, log: ExecutionLog) -> Path:
        """Atomically replace the workflow's execution.json."""
        path = self.log_path(log.workflow)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(log.model_dump(mode="json"), indent=2) + "\n"

        fd, tmp_name = tempfile.mkstemp(prefix=".execution-", suffix=".json", dir=path.parent)
        try:
            with os.fdopen(fd, "w") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info("Wrote execution log for %s (%s)", log.workflow, log.execution_hash)
        return path

    def _file_records(self, paths: tuple[str, ...]) -> list[FileRecord]:
        records = []
        for rel_path in paths:
            record = file_record(self.project_root, rel_path)
            if record is None:
                logger.debug("Not recording missing file %s", rel_path)
                continue
            records.append(record)
        return records

    def _output_record(self, output_file: Path) -> OutputRecord:
        try:
            rel_path = output_file.resolve().relative_to(self.project_root.resolve()).as_posix()
        except ValueError:
            rel_path = str(output_file)

        if not output_file.is_file():
            return OutputRecord(path=rel_path)

        digest = hash_file(output_file)
        return OutputRecord(
            path=rel_path,
            size=output_file.stat().st_size,
            hash=f"{HASH_PREFIX}{digest}" if digest else "",
        )
