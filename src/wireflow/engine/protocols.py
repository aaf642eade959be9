"""Protocols for the generation engine.

Defines the contract for generation backends, enabling dependency
injection and testability.
"""

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class GenerationRequest(BaseModel):
    """Request payload for one workflow execution.

    Serialized verbatim to request.json before the backend is called.
    """

    model_config = ConfigDict(frozen=True)

    model: str
    max_tokens: int
    temperature: float
    system: list[dict[str, Any]] = Field(default_factory=list)
    messages: list[dict[str, Any]] = Field(default_factory=list)
    thinking: dict[str, Any] | None = None
    output_config: dict[str, Any] | None = None

    def payload(self) -> dict[str, Any]:
        """Keyword arguments for messages.create, without unset options."""
        return self.model_dump(exclude_none=True)


class GenerationResult(BaseModel):
    """Result of a generation call.

    Frozen because results are immutable facts about past executions.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    model: str = ""
    stop_reason: str | None = None
    input_tokens: int = 0
    output_tokens: int = 0


@runtime_checkable
class GenerationBackend(Protocol):
    """Protocol for generation backends.

    Implementations perform the remote call and return its text.
    Examples: AnthropicBackend, MockGenerationBackend
    """

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Execute a request and return the result."""
        ...
