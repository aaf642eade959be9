"""Generation engine for workflows.

- WorkflowRunner: executes one workflow with an injected backend
- GenerationBackend: protocol for the remote call (Anthropic, mocks)
- Container: composition root binding the default backend
"""

from wireflow.engine.backends import AnthropicBackend
from wireflow.engine.container import Container
from wireflow.engine.mocks import MockGenerationBackend
from wireflow.engine.protocols import GenerationBackend, GenerationRequest, GenerationResult
from wireflow.engine.request import build_request
from wireflow.engine.runner import RunOutcome, WorkflowRunner

__all__ = [
    "WorkflowRunner",
    "RunOutcome",
    "build_request",
    # Protocols
    "GenerationBackend",
    "GenerationRequest",
    "GenerationResult",
    # Implementations
    "AnthropicBackend",
    "MockGenerationBackend",
    "Container",
]
