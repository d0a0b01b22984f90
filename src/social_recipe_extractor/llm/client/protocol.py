"""LLM Client Protocol definition.

Defines the interface that generative-AI clients must implement so the
text extractor, frame analyzer and consolidator can be driven by any
backend (or a test double).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel


if TYPE_CHECKING:
    from social_recipe_extractor.llm.models import LLMCompletionResult


T = TypeVar("T", bound=BaseModel)


@runtime_checkable
class LLMClientProtocol(Protocol):
    """Protocol for LLM client implementations.

    Key methods:
    - generate: Text generation with optional structured output
    - generate_structured: Returns a parsed Pydantic model or raises
    - describe_image: Vision prompt over a single image reference
    - initialize/shutdown: Lifecycle management for connection pools
    """

    async def initialize(self) -> None:
        """Initialize client resources (HTTP connections, etc.)."""
        ...

    async def shutdown(self) -> None:
        """Release client resources."""
        ...

    async def generate(
        self,
        prompt: str,
        *,
        model: str | None = None,
        system: str | None = None,
        schema: type[T] | None = None,
        options: dict[str, Any] | None = None,
    ) -> LLMCompletionResult:
        """Generate text completion from the LLM.

        Args:
            prompt: Input prompt text.
            model: Model override (uses client default if None).
            system: Optional system prompt.
            schema: Optional Pydantic model for structured JSON output.
            options: Model-specific options (temperature, max_tokens).

        Returns:
            LLMCompletionResult with raw_response, parsed output or refusal.

        Raises:
            LLMUnavailableError: Service unreachable.
            LLMTimeoutError: Request timed out.
            LLMRateLimitError: Service rate limited the request.
            LLMResponseError: HTTP error from service.
            LLMValidationError: Response doesn't match schema.
        """
        ...

    async def generate_structured(
        self,
        prompt: str,
        schema: type[T],
        *,
        model: str | None = None,
        system: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> T:
        """Generate structured output matching a Pydantic schema.

        Returns:
            Instance of the schema class populated from LLM response.

        Raises:
            LLMRefusalError: The model explicitly declined.
            LLMValidationError: No parsed output or schema mismatch.
        """
        ...

    async def describe_image(
        self,
        prompt: str,
        image_url: str,
        *,
        model: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> str:
        """Ask a vision-capable model about one image.

        Args:
            prompt: Instructions for the model.
            image_url: Public URL or ``data:`` URI with inline image bytes.
            model: Model override.
            options: Model-specific options.

        Returns:
            Free-text response (expected to embed a JSON object).
        """
        ...
