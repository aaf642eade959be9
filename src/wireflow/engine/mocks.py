"""Mock implementations for testing the engine layer.

Provides an in-memory backend that can be used in tests without network
access.
"""

from collections.abc import Callable

from wireflow.engine.protocols import GenerationBackend, GenerationRequest, GenerationResult


class MockGenerationBackend:
    """Mock generation backend for testing.

    Records every request without calling any API. Returns a configurable
    text, or raises a configured exception.
    """

    def __init__(
        self,
        text: str | Callable[[GenerationRequest], str] = "mock output",
        error: Exception | None = None,
    ) -> None:
        """Initialize with the response to return.

        Args:
            text: Response text, or a callable computing it from the request
            error: Exception to raise from generate() instead of returning
        """
        self.text = text
        self.error = error
        self.requests: list[GenerationRequest] = []

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Record the request and return the configured result."""
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        text = self.text(request) if callable(self.text) else self.text
        return GenerationResult(text=text, model=request.model, stop_reason="end_turn")

    def set_text(self, text: str | Callable[[GenerationRequest], str]) -> None:
        """Change the response for subsequent calls."""
        self.text = text

    def fail_with(self, error: Exception | None) -> None:
        """Raise error from subsequent calls (None to stop failing)."""
        self.error = error

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def reset(self) -> None:
        """Clear recorded requests."""
        self.requests.clear()


# Verify protocol compliance at import time
assert isinstance(MockGenerationBackend(), GenerationBackend)
