"""Pydantic schemas for wireflow configuration and execution logs."""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wireflow.exceptions import ConfigurationError

EXECUTION_LOG_VERSION = 1


class ConfigTier(str, Enum):
    """Cascade tier that supplied a configuration value."""

    BUILTIN = "builtin"
    GLOBAL = "global"
    PROJECT = "project"
    WORKFLOW = "workflow"
    CLI = "cli"
    UNSET = "unset"


class Profile(str, Enum):
    """Model tier selected when no explicit model is configured."""

    FAST = "fast"
    BALANCED = "balanced"
    DEEP = "deep"


class GenerationConfig(BaseModel):
    """Resolved generation parameters for one workflow execution.

    Frozen: a dependency never sees another workflow's overrides because
    every override produces a new object via model_copy(update=...).
    """

    model_config = ConfigDict(frozen=True)

    profile: str = Profile.BALANCED.value
    model_fast: str = "claude-haiku-4-5"
    model_balanced: str = "claude-sonnet-4-5"
    model_deep: str = "claude-opus-4-5"
    model: str = ""  # Empty = use profile tier
    temperature: float = 1.0
    max_tokens: int = 16000
    enable_thinking: bool = False
    thinking_budget: int = 10000
    effort: str = "high"
    enable_citations: bool = False
    output_format: str = "md"
    system_prompts: tuple[str, ...] = ("base",)

    @property
    def effective_model(self) -> str:
        """Explicit model if set, otherwise the model of the selected profile."""
        if self.model:
            return self.model
        tiers = {
            Profile.FAST.value: self.model_fast,
            Profile.BALANCED.value: self.model_balanced,
            Profile.DEEP.value: self.model_deep,
        }
        if self.profile not in tiers:
            raise ConfigurationError(
                f"Unknown profile '{self.profile}' (expected one of: {', '.join(tiers)})"
            )
        return tiers[self.profile]

    def snapshot(self) -> dict[str, Any]:
        """Generation-parameter snapshot stored in the execution log."""
        return {
            "profile": self.profile,
            "model": self.effective_model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "enable_thinking": self.enable_thinking,
            "thinking_budget": self.thinking_budget,
            "effort": self.effort,
            "enable_citations": self.enable_citations,
            "output_format": self.output_format,
            "system_prompts": list(self.system_prompts),
        }


# Keys that appear in the execution log's config/config_sources objects
SNAPSHOT_KEYS = (
    "profile",
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


class WorkflowSettings(BaseModel):
    """Everything the engine consumes for one workflow, fully resolved.

    context/input hold project-relative paths in declaration order,
    already glob-expanded.
    """

    model_config = ConfigDict(frozen=True)

    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    sources: dict[str, str] = Field(default_factory=dict)
    context: tuple[str, ...] = ()
    input: tuple[str, ...] = ()
    depends_on: tuple[str, ...] = ()
    export_file: str | None = None

    def source_of(self, key: str) -> str:
        """Cascade tier that supplied a key."""
        return self.sources.get(key, ConfigTier.BUILTIN.value)

    def config_sources(self) -> dict[str, str]:
        """Provenance map for the execution log."""
        result = {}
        for key in SNAPSHOT_KEYS:
            if key == "model" and not self.generation.model:
                # Model came from the profile tier
                result[key] = self.source_of(f"model_{self.generation.profile}")
            else:
                result[key] = self.source_of(key)
        return result


# Execution log


class FileRecord(BaseModel):
    """Snapshot of one context or input file at execution time."""

    path: str
    abs_path: str
    mtime: float
    size: int
    hash: str


class DependencyRecord(BaseModel):
    """Snapshot of a dependency's execution hash when this log was written."""

    workflow: str
    execution_hash: str = ""
    output_path: str = ""


class OutputRecord(BaseModel):
    """The artifact produced by the execution."""

    path: str
    size: int = 0
    hash: str = ""


class ExecutionLog(BaseModel):
    """Provenance record of a workflow's last successful execution.

    Stored as execution.json in the workflow directory and fully
    overwritten on every successful run.
    """

    version: int = EXECUTION_LOG_VERSION
    workflow: str
    executed_at: str
    execution_hash: str
    config: dict[str, Any] = Field(default_factory=dict)
    config_sources: dict[str, str] = Field(default_factory=dict)
    context: list[FileRecord] = Field(default_factory=list)
    input: list[FileRecord] = Field(default_factory=list)
    depends_on: list[DependencyRecord] = Field(default_factory=list)
    output: OutputRecord

    def output_file(self, project_root: Path) -> Path:
        """Absolute path of the recorded output."""
        return project_root / self.output.path


class StalenessResult(BaseModel):
    """Outcome of a staleness check."""

    model_config = ConfigDict(frozen=True)

    stale: bool
    reason: str
