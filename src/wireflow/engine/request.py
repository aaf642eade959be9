"""Request assembly for one workflow execution.

System blocks: prompt components, then the project description.
User blocks, most stable first: context documents, dependency outputs,
input documents, then the task text.
"""

import logging
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from wireflow.core.schemas import WorkflowSettings
from wireflow.engine.protocols import GenerationRequest
from wireflow.exceptions import ConfigurationError, DependencyOutputMissingError, TaskFileNotFoundError
from wireflow.project.paths import PROJECT_DESCRIPTION_FILENAME

if TYPE_CHECKING:
    from wireflow.project.context import ProjectContext

logger = logging.getLogger(__name__)

PROMPT_SUFFIX = ".txt"
DEFAULT_EFFORT = "high"
EPHEMERAL = {"type": "ephemeral"}


def find_prompt_file(name: str, prefix: Path) -> Path | Traversable | None:
    """Locate a system prompt component: user prefix first, then builtin prompts."""
    candidate = prefix / f"{name}{PROMPT_SUFFIX}"
    if candidate.is_file():
        return candidate

    builtin = resources.files("wireflow") / "prompts" / f"{name}{PROMPT_SUFFIX}"
    if builtin.is_file():
        return builtin
    return None


def _text_block(text: str, cache: bool = False) -> dict[str, Any]:
    block: dict[str, Any] = {"type": "text", "text": text}
    if cache:
        block["cache_control"] = EPHEMERAL
    return block


def _mark_cached(blocks: list[dict[str, Any]]) -> None:
    """Put a cache breakpoint on the last block of a section."""
    if blocks:
        blocks[-1] = {**blocks[-1], "cache_control": EPHEMERAL}


def _read_text(path: Path) -> str:
    return path.read_bytes().decode("utf-8", errors="replace")


def system_blocks(project: "ProjectContext", settings: WorkflowSettings) -> list[dict[str, Any]]:
    """Prompt components followed by the project description."""
    blocks = []
    for name in settings.generation.system_prompts:
        path = find_prompt_file(name, project.env.prompt_prefix)
        if path is None:
            raise ConfigurationError(f"System prompt component not found: {name}")
        blocks.append(_text_block(path.read_text(encoding="utf-8")))
    _mark_cached(blocks)

    description = project.wireflow_dir / PROJECT_DESCRIPTION_FILENAME
    text = _read_text(description).strip() if description.is_file() else ""
    if text:
        tag = project.root.name or "project"
        blocks.append(_text_block(f"<{tag}>\n{text}\n</{tag}>", cache=True))
    return blocks


def document_blocks(
    project: "ProjectContext",
    paths: tuple[str, ...],
    citations: bool,
) -> list[dict[str, Any]]:
    """One document block per existing file. Missing files are skipped."""
    blocks = []
    for rel_path in paths:
        abs_path = project.root / rel_path
        if not abs_path.is_file():
            logger.warning("File not found, skipping: %s", rel_path)
            continue
        block: dict[str, Any] = {
            "type": "document",
            "source": {"type": "text", "media_type": "text/plain", "data": _read_text(abs_path)},
            "title": rel_path,
        }
        if citations:
            block["citations"] = {"enabled": True}
        blocks.append(block)
    return blocks


def published_output(project: "ProjectContext", name: str) -> Path | None:
    """The output a workflow published to .workflow/output.

    Prefers the extension of its last logged output, then any extension.
    """
    log = project.log_store.read(name)
    if log is not None and log.output.path:
        published = project.output_dir / f"{name}{Path(log.output.path).suffix}"
        if published.is_file():
            return published

    matches = sorted(p for p in project.output_dir.glob(f"{name}.*") if p.is_file())
    return matches[0] if matches else None


def dependency_blocks(
    project: "ProjectContext",
    depends_on: tuple[str, ...],
    strict: bool = True,
) -> list[dict[str, Any]]:
    """Outputs of declared dependencies as tagged text blocks.

    Raises:
        DependencyOutputMissingError: If strict and a dependency has no output
    """
    blocks = []
    for dep in depends_on:
        path = published_output(project, dep)
        if path is None:
            expected = str(project.output_dir / f"{dep}.*")
            if strict:
                raise DependencyOutputMissingError(dep, expected)
            logger.warning("No output yet for dependency %s (%s)", dep, expected)
            continue
        text = f'<dependency workflow="{dep}">\n{_read_text(path)}\n</dependency>'
        blocks.append(_text_block(text))
    return blocks


def build_request(
    project: "ProjectContext",
    name: str,
    settings: WorkflowSettings,
    strict: bool = True,
) -> GenerationRequest:
    """Assemble the request for one workflow.

    Args:
        project: Loaded project
        name: Workflow name
        settings: Resolved settings to run with
        strict: Fail when a dependency output is missing (dry runs pass False)

    Raises:
        TaskFileNotFoundError: If task.txt does not exist
        DependencyOutputMissingError: If strict and a dependency never produced output
        ConfigurationError: If a system prompt component cannot be found
    """
    task_file = project.task_file(name)
    if not task_file.is_file():
        raise TaskFileNotFoundError(name, str(task_file))

    generation = settings.generation
    citations = generation.enable_citations

    context = document_blocks(project, settings.context, citations)
    _mark_cached(context)
    dependencies = dependency_blocks(project, settings.depends_on, strict=strict)
    _mark_cached(dependencies)
    inputs = document_blocks(project, settings.input, citations)
    task = [_text_block(_read_text(task_file))]

    return GenerationRequest(
        model=generation.effective_model,
        max_tokens=generation.max_tokens,
        temperature=generation.temperature,
        system=system_blocks(project, settings),
        messages=[{"role": "user", "content": context + dependencies + inputs + task}],
        thinking=(
            {"type": "enabled", "budget_tokens": generation.thinking_budget}
            if generation.enable_thinking
            else None
        ),
        output_config={"effort": generation.effort} if generation.effort != DEFAULT_EFFORT else None,
    )
