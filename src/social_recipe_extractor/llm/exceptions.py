"""LLM client exceptions.

These exceptions describe failures at the generative-AI boundary. Transport
errors (unavailable, timeout, rate limit) propagate to callers; refusals and
schema mismatches are usually converted into low-confidence results.
"""

from __future__ import annotations

from social_recipe_extractor.core.exceptions import SocialRecipeError


class LLMError(SocialRecipeError):
    """Base exception for LLM client errors."""


class LLMUnavailableError(LLMError):
    """Raised when the LLM service cannot be reached.

    This includes connection errors, timeouts, and service unavailability.
    """


class LLMTimeoutError(LLMUnavailableError):
    """Raised when an LLM request times out."""


class LLMResponseError(LLMError):
    """Raised when the LLM returns an HTTP error response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LLMValidationError(LLMError):
    """Raised when the LLM response is missing or fails schema validation."""


class LLMRefusalError(LLMError):
    """Raised when the model explicitly declines to answer.

    Attributes:
        refusal: The refusal text returned by the model.
    """

    def __init__(self, refusal: str) -> None:
        super().__init__(f"Model refused the request: {refusal}")
        self.refusal = refusal


class LLMRateLimitError(LLMError):
    """Raised when the LLM service rate limits the request (HTTP 429)."""


class LLMConfigurationError(LLMError):
    """Raised when the LLM client is misconfigured."""
