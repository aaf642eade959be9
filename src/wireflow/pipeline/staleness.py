"""Staleness detection.

Decides whether a workflow's last execution still reflects its inputs.
The fast path only stats files and reads dependency logs; the execution
hash is recomputed only when something looks newer or different.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from wireflow.core.schemas import ExecutionLog, FileRecord, StalenessResult, WorkflowSettings
from wireflow.pipeline.hashing import HASH_PREFIX, compute_execution_hash, hash_file
from wireflow.pipeline.log_store import parse_executed_at

if TYPE_CHECKING:
    from wireflow.project.context import ProjectContext

logger = logging.getLogger(__name__)

FRESH = "fresh"
NOT_RUN = "not run"
OUTPUT_MISSING = "output missing"
INVALID_TIMESTAMP = "invalid timestamp"
TASK_CHANGED = "task changed"
CONTEXT_CHANGED = "context changed"
INPUT_CHANGED = "input changed"
CONFIG_CHANGED = "config changed"
DEPENDENCY_CHANGED = "dependency changed"
DEPENDENCY_NOT_RUN = "dependency not run"
INPUTS_CHANGED = "inputs changed"


def _current_mtime(path: Path) -> float | None:
    try:
        return path.stat().st_mtime
    except OSError:
        return None


def _newer_file(records: list[FileRecord]) -> FileRecord | None:
    """First logged file whose current mtime is newer than its logged mtime.

    Files that no longer exist are skipped.
    """
    for record in records:
        current = _current_mtime(Path(record.abs_path))
        if current is not None and current > record.mtime:
            return record
    return None


def _dependency_drift(project: "ProjectContext", log: ExecutionLog) -> str | None:
    """Reason if a dependency's recorded hash no longer matches the snapshot."""
    for dep in log.depends_on:
        current = project.log_store.recorded_hash(dep.workflow)
        if current is None:
            return DEPENDENCY_NOT_RUN
        if current != dep.execution_hash:
            return DEPENDENCY_CHANGED
    return None


def _declaration_drift(project: "ProjectContext", log: ExecutionLog, settings: WorkflowSettings) -> str | None:
    """Reason if the declared config or file lists moved away from the log.

    Covers changes that leave no trace in file timestamps: a different
    model or temperature, a new context/input file, or a changed
    dependency list. Files that were logged but no longer exist are not
    reported here.
    """
    if log.config != settings.generation.snapshot():
        return CONFIG_CHANGED

    for key, reason in (("context", CONTEXT_CHANGED), ("input", INPUT_CHANGED)):
        logged = {record.path for record in getattr(log, key)}
        for rel_path in getattr(settings, key):
            if rel_path not in logged and (project.root / rel_path).is_file():
                return reason

    if [dep.workflow for dep in log.depends_on] != list(settings.depends_on):
        return DEPENDENCY_CHANGED
    return None


def _task_mtime_newer(task_file: Path, executed_epoch: float) -> bool:
    current = _current_mtime(task_file)
    return current is not None and current > executed_epoch


def explain_change(
    project: "ProjectContext",
    workflow_name: str,
    log: ExecutionLog,
    settings: WorkflowSettings,
) -> str:
    """Best-effort category of what changed, for display only."""
    drift = _declaration_drift(project, log, settings)
    if drift:
        return drift

    for key, reason in (("context", CONTEXT_CHANGED), ("input", INPUT_CHANGED)):
        for record in getattr(log, key):
            digest = hash_file(Path(record.abs_path))
            if digest is not None and f"{HASH_PREFIX}{digest}" != record.hash:
                return reason

    dep_reason = _dependency_drift(project, log)
    if dep_reason:
        return dep_reason

    executed_epoch = parse_executed_at(log.executed_at)
    if executed_epoch is not None and _task_mtime_newer(project.task_file(workflow_name), executed_epoch):
        return TASK_CHANGED

    return INPUTS_CHANGED


def check_staleness(
    project: "ProjectContext",
    workflow_name: str,
    settings: WorkflowSettings,
) -> StalenessResult:
    """Decide whether a workflow must re-run.

    Args:
        project: Loaded project
        workflow_name: Workflow to check
        settings: The settings the workflow would run with now

    Returns:
        StalenessResult with a short reason ("fresh" when not stale)
    """
    log = project.log_store.read(workflow_name)
    if log is None:
        return StalenessResult(stale=True, reason=NOT_RUN)

    if not log.output.path or not log.output_file(project.root).is_file():
        return StalenessResult(stale=True, reason=OUTPUT_MISSING)

    executed_epoch = parse_executed_at(log.executed_at)
    if executed_epoch is None:
        return StalenessResult(stale=True, reason=INVALID_TIMESTAMP)

    suspect = None
    newer = _newer_file(log.context) or _newer_file(log.input)
    if newer is not None:
        suspect = f"{newer.path} modified"
    elif _task_mtime_newer(project.task_file(workflow_name), executed_epoch):
        suspect = "task modified"
    else:
        suspect = _dependency_drift(project, log) or _declaration_drift(project, log, settings)

    if suspect is None:
        return StalenessResult(stale=False, reason=FRESH)

    logger.debug("%s possibly stale (%s), verifying execution hash", workflow_name, suspect)
    current_hash = compute_execution_hash(
        project.workflow_dir(workflow_name),
        project.root,
        settings,
        project.log_store.recorded_hash,
    )
    if current_hash == log.execution_hash:
        return StalenessResult(stale=False, reason=FRESH)

    return StalenessResult(stale=True, reason=explain_change(project, workflow_name, log, settings))


def execution_status(project: "ProjectContext", workflow_name: str) -> str:
    """Status label for listings: pending, fresh, or stale: <reason>."""
    if not project.log_store.exists(workflow_name):
        return "pending"

    settings = project.workflow_settings(workflow_name)
    result = check_staleness(project, workflow_name, settings)
    if result.stale:
        return f"stale: {result.reason}"
    return FRESH


def execution_timestamp(project: "ProjectContext", workflow_name: str) -> str:
    """Last execution time in local time, or "(not run)"."""
    log = project.log_store.read(workflow_name)
    if log is None:
        return "(not run)"

    epoch = parse_executed_at(log.executed_at)
    if epoch is None:
        return log.executed_at or "(unknown)"
    return datetime.fromtimestamp(epoch, tz=timezone.utc).astimezone().strftime("%Y-%m-%d %H:%M")
