"""Configuration cascade: builtin -> global -> project -> workflow -> CLI.

Each tier is a YAML mapping. A key that is absent or null inherits from the
tier below; a value replaces it; a list key written as ``{append: [...]}``
extends the inherited list; ``[]`` clears it.

Example workflow config.yaml:
    temperature: 0.4
    depends_on: [extract]
    context:
      append: ["notes/*.md"]
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from wireflow.core.schemas import ConfigTier, GenerationConfig, WorkflowSettings

logger = logging.getLogger(__name__)

GENERATION_KEYS = (
    "profile",
    "model_fast",
    "model_balanced",
    "model_deep",
    "model",
    "temperature",
    "max_tokens",
    "enable_thinking",
    "thinking_budget",
    "effort",
    "enable_citations",
    "output_format",
    "system_prompts",
)

# Never inherited from global/project tiers
WORKFLOW_ONLY_KEYS = ("input", "depends_on", "export_file")


class ListAppend(BaseModel):
    """List value that extends the inherited list instead of replacing it."""

    model_config = ConfigDict(extra="forbid")

    append: list[str] = Field(default_factory=list)


ListValue = list[str] | ListAppend | None


class ConfigLayer(BaseModel):
    """One tier of the cascade, as written in a config.yaml."""

    model_config = ConfigDict(extra="forbid")

    profile: str | None = None
    model_fast: str | None = None
    model_balanced: str | None = None
    model_deep: str | None = None
    model: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=1.0)
    max_tokens: int | None = Field(default=None, gt=0)
    enable_thinking: bool | None = None
    thinking_budget: int | None = Field(default=None, ge=1024)
    effort: str | None = None
    enable_citations: bool | None = None
    output_format: str | None = None
    system_prompts: ListValue = None

    context: ListValue = None
    input: ListValue = None
    depends_on: ListValue = None
    export_file: str | None = None

    def is_set(self, key: str) -> bool:
        return getattr(self, key) is not None


def read_config_file(config_path: Path) -> dict[str, Any]:
    """Read a tier file as a raw mapping. Missing or empty file -> {}.

    Raises:
        ValueError: If the file is not valid YAML or not a mapping
    """
    if not config_path.exists():
        return {}

    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping in {config_path}, got {type(data).__name__}")
    return data


def load_layer(config_path: Path) -> ConfigLayer:
    """Load and validate one tier.

    Raises:
        ValueError: If the file cannot be parsed or has invalid values
    """
    data = read_config_file(config_path)
    try:
        return ConfigLayer.model_validate(data)
    except PydanticValidationError as e:
        raise ValueError(f"Invalid config in {config_path}: {e}") from e


def expand_paths(entries: list[str], project_root: Path) -> list[str]:
    """Expand globs and directories into project-relative file paths.

    Globs expand from the project root (matches sorted per pattern);
    directories expand non-recursively. Literal paths that do not exist
    are kept so they can be reported when the request is built.
    """
    expanded: list[str] = []
    for entry in entries:
        if any(ch in entry for ch in "*?["):
            matches = sorted(p for p in project_root.glob(entry) if p.is_file())
            if not matches:
                logger.warning("Pattern matched no files: %s", entry)
            expanded.extend(p.relative_to(project_root).as_posix() for p in matches)
            continue

        candidate = project_root / entry
        if candidate.is_dir():
            expanded.extend(
                p.relative_to(project_root).as_posix()
                for p in sorted(candidate.iterdir())
                if p.is_file() and not p.name.startswith(".")
            )
        else:
            expanded.append(entry)
    return dedupe(expanded)


def dedupe(items: list[str]) -> list[str]:
    """Remove duplicates, keeping first occurrence."""
    seen: set[str] = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def _merge_list(current: tuple[str, ...], value: ListValue) -> list[str]:
    if isinstance(value, ListAppend):
        return list(current) + list(value.append)
    return list(value or [])


def apply_layer(
    settings: WorkflowSettings,
    layer: ConfigLayer,
    tier: ConfigTier,
    project_root: Path,
) -> WorkflowSettings:
    """Return new settings with one tier applied on top. Never mutates settings."""
    generation_updates: dict[str, Any] = {}
    updates: dict[str, Any] = {}
    sources = dict(settings.sources)

    for key in GENERATION_KEYS:
        if not layer.is_set(key):
            continue
        value = getattr(layer, key)
        if key == "system_prompts":
            value = tuple(dedupe(_merge_list(settings.generation.system_prompts, value)))
        generation_updates[key] = value
        sources[key] = tier.value

    for key in ("context", "input", "depends_on"):
        if not layer.is_set(key):
            continue
        if key in WORKFLOW_ONLY_KEYS and tier in (ConfigTier.GLOBAL, ConfigTier.PROJECT):
            logger.warning("Ignoring workflow-only key '%s' in %s config", key, tier.value)
            continue
        value = getattr(layer, key)
        if key == "depends_on":
            merged = dedupe(_merge_list(settings.depends_on, value))
        else:
            current = getattr(settings, key)
            if isinstance(value, ListAppend):
                merged = expand_paths(list(current) + list(value.append), project_root)
            else:
                merged = expand_paths(list(value or []), project_root)
        updates[key] = tuple(merged)
        sources[key] = tier.value

    if layer.export_file is not None and tier not in (ConfigTier.GLOBAL, ConfigTier.PROJECT):
        updates["export_file"] = layer.export_file or None
        sources["export_file"] = tier.value

    if generation_updates:
        updates["generation"] = settings.generation.model_copy(update=generation_updates)
    updates["sources"] = sources
    return settings.model_copy(update=updates)


def finalize(settings: WorkflowSettings) -> WorkflowSettings:
    """Apply cross-key rules: a path listed as input is not also context."""
    if not settings.input:
        return settings
    inputs = set(settings.input)
    context = tuple(path for path in settings.context if path not in inputs)
    if context == settings.context:
        return settings
    return settings.model_copy(update={"context": context})


def builtin_settings() -> WorkflowSettings:
    """Hard-coded defaults, every key sourced from the builtin tier."""
    sources = {key: ConfigTier.BUILTIN.value for key in GENERATION_KEYS}
    for key in ("context", *WORKFLOW_ONLY_KEYS):
        sources[key] = ConfigTier.UNSET.value
    return WorkflowSettings(generation=GenerationConfig(), sources=sources)


def clear_workflow_only(settings: WorkflowSettings) -> WorkflowSettings:
    """Reset workflow-only fields so they never leak between workflows."""
    sources = dict(settings.sources)
    for key in WORKFLOW_ONLY_KEYS:
        sources[key] = ConfigTier.UNSET.value
    return settings.model_copy(
        update={"depends_on": (), "input": (), "export_file": None, "sources": sources}
    )
