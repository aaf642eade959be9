"""Execution fingerprints.

The execution hash summarizes everything that can change a workflow's
output: generation config, context/input file contents, the recorded
execution hashes of its dependencies, and the task file. Two runs over the
same effective state produce the same hash.

Known approximations:
- Files larger than LARGE_FILE_THRESHOLD contribute a sentinel instead of
  their content, so edits to them are invisible to the hash.
- Missing or unreadable files are skipped, so deleting a context file is
  only noticed when the slow path runs for another reason.
- Files contribute in declaration order; reordering them changes the hash.
"""

import hashlib
import logging
from collections.abc import Callable
from pathlib import Path

from wireflow.core.schemas import FileRecord, GenerationConfig, WorkflowSettings
from wireflow.project.paths import TASK_FILENAME

logger = logging.getLogger(__name__)

HASH_LENGTH = 16
LARGE_FILE_THRESHOLD = 10 * 1024 * 1024
LARGE_FILE_SENTINEL = "skipped-large-file"
HASH_PREFIX = "sha256:"


def short_digest(data: bytes) -> str:
    """sha256 of data truncated to HASH_LENGTH hex characters."""
    return hashlib.sha256(data).hexdigest()[:HASH_LENGTH]


def hash_file(path: Path) -> str | None:
    """Digest of a file's bytes, the large-file sentinel, or None if unreadable."""
    try:
        if path.stat().st_size > LARGE_FILE_THRESHOLD:
            return LARGE_FILE_SENTINEL
        hasher = hashlib.sha256()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(1024 * 1024), b""):
                hasher.update(chunk)
        return hasher.hexdigest()[:HASH_LENGTH]
    except OSError as e:
        logger.debug("Skipping unreadable file %s: %s", path, e)
        return None


def file_record(project_root: Path, rel_path: str) -> FileRecord | None:
    """Stat and hash one project file for the execution log."""
    abs_path = project_root / rel_path
    try:
        if not abs_path.is_file():
            return None
        stat = abs_path.stat()
    except OSError:
        return None

    digest = hash_file(abs_path)
    if digest is None:
        return None

    return FileRecord(
        path=rel_path,
        abs_path=str(abs_path),
        mtime=stat.st_mtime,
        size=stat.st_size,
        hash=f"{HASH_PREFIX}{digest}",
    )


def _flag(value: bool) -> str:
    return "true" if value else "false"


def config_fingerprint(generation: GenerationConfig) -> str:
    """Canonical config segment of the hash input, fixed field order."""
    prompts = "".join(f"{name}," for name in generation.system_prompts)
    return (
        f"config:{generation.profile}|{generation.effective_model}|"
        f"{generation.temperature}|{generation.max_tokens}|"
        f"thinking:{_flag(generation.enable_thinking)}|{generation.thinking_budget}|"
        f"effort:{generation.effort}|citations:{_flag(generation.enable_citations)}|"
        f"format:{generation.output_format}|"
        f"prompts:{prompts}|"
    )


def build_hash_input(
    workflow_dir: Path,
    project_root: Path,
    settings: WorkflowSettings,
    dependency_hash: Callable[[str], str | None],
) -> str:
    """Assemble the canonical string the execution hash is computed over.

    Args:
        workflow_dir: Directory holding task.txt
        project_root: Root that context/input paths are relative to
        settings: Resolved settings in effect for this workflow
        dependency_hash: Returns a dependency's recorded execution hash
    """
    parts = [config_fingerprint(settings.generation)]

    for tag, paths in (("cx", settings.context), ("in", settings.input)):
        for rel_path in paths:
            abs_path = project_root / rel_path
            if not abs_path.is_file():
                continue
            digest = hash_file(abs_path)
            if digest is None:
                continue
            parts.append(f"{tag}:{rel_path}:{digest}|")

    # Trust each dependency's last log; never recompute it here
    for dep in settings.depends_on:
        parts.append(f"dep:{dep}:{dependency_hash(dep) or ''}|")

    task_file = workflow_dir / TASK_FILENAME
    if task_file.is_file():
        task_digest = hash_file(task_file)
        if task_digest is not None:
            parts.append(f"task:{task_digest}")

    return "".join(parts)


def compute_execution_hash(
    workflow_dir: Path,
    project_root: Path,
    settings: WorkflowSettings,
    dependency_hash: Callable[[str], str | None],
) -> str:
    """Short deterministic fingerprint of a workflow's effective inputs."""
    hash_input = build_hash_input(workflow_dir, project_root, settings, dependency_hash)
    return short_digest(hash_input.encode("utf-8"))
