"""Generation backend implementations.

Concrete implementation of the GenerationBackend protocol.
"""

import logging

from anthropic import Anthropic, APIConnectionError, InternalServerError, RateLimitError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from wireflow.engine.protocols import GenerationBackend, GenerationRequest, GenerationResult
from wireflow.env import get_settings
from wireflow.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Transient API failures worth another attempt
RETRYABLE_ERRORS = (RateLimitError, APIConnectionError, InternalServerError)
MAX_ATTEMPTS = 4


class AnthropicBackend(GenerationBackend):
    """Execute requests against the Anthropic Messages API.

    Rate limits, connection errors and 5xx responses are retried with
    exponential backoff; anything else propagates immediately.
    """

    def __init__(self, api_key: str | None = None, client: Anthropic | None = None) -> None:
        """Initialize the backend.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY)
            client: Preconfigured client, mainly for tests
        """
        self.api_key = api_key
        self._client = client

    @property
    def client(self) -> Anthropic:
        """Client created on first use, so dry runs never need a key."""
        if self._client is None:
            api_key = self.api_key or get_settings().anthropic_api_key
            if not api_key:
                raise ConfigurationError("ANTHROPIC_API_KEY is not set")
            self._client = Anthropic(api_key=api_key)
        return self._client

    @retry(
        stop=stop_after_attempt(MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        reraise=True,
    )
    def _create(self, request: GenerationRequest):
        payload = request.payload()
        extra_body = {}
        if "output_config" in payload:
            # Not a named parameter of messages.create
            extra_body["output_config"] = payload.pop("output_config")
        if extra_body:
            payload["extra_body"] = extra_body
        return self.client.messages.create(**payload)

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Send the request and collect the text blocks of the response."""
        logger.debug("Calling %s (max_tokens=%d)", request.model, request.max_tokens)
        response = self._create(request)

        text_blocks = [block.text for block in response.content if getattr(block, "type", "") == "text"]
        usage = getattr(response, "usage", None)
        return GenerationResult(
            text="\n".join(text_blocks),
            model=response.model,
            stop_reason=response.stop_reason,
            input_tokens=getattr(usage, "input_tokens", 0) or 0,
            output_tokens=getattr(usage, "output_tokens", 0) or 0,
        )
