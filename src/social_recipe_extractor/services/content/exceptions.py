"""Content acquisition exceptions.

A ContentAcquisitionError describes one provider's failure and whether it
is worth retrying. AggregateAcquisitionError is raised only after every
provider (and the legacy fallback, when enabled) has failed, and keeps
each provider's individual diagnosis.
"""

from __future__ import annotations

from dataclasses import dataclass

from social_recipe_extractor.core.exceptions import SocialRecipeError


class ContentAcquisitionError(SocialRecipeError):
    """Raised when a single provider fails to acquire content.

    Attributes:
        provider: Name of the provider that failed.
        url: URL that was being acquired.
        is_retryable: Whether a retry might succeed (rate limit, timeout, 5xx).
        cause: Underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        url: str,
        is_retryable: bool = False,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.url = url
        self.is_retryable = is_retryable
        self.cause = cause


@dataclass(frozen=True)
class ProviderFailure:
    """One provider's final failure, kept for diagnostics."""

    provider: str
    message: str
    retryable: bool

    def __str__(self) -> str:
        suffix = " (retryable)" if self.retryable else ""
        return f"{self.provider}: {self.message}{suffix}"


class AggregateAcquisitionError(SocialRecipeError):
    """Raised when every provider failed to acquire content.

    Attributes:
        url: URL that was being acquired.
        platform: Detected platform of the URL.
        failures: One record per failed provider, in attempt order.
    """

    def __init__(
        self,
        url: str,
        platform: str,
        failures: list[ProviderFailure],
    ) -> None:
        self.url = url
        self.platform = platform
        self.failures = list(failures)

        lines = [f"Failed to acquire content from {url} (platform: {platform})"]
        if self.failures:
            lines.extend(f"  - {failure}" for failure in self.failures)
        else:
            lines.append("  - no configured provider supports this URL")
        super().__init__("\n".join(lines))

    @property
    def providers(self) -> list[str]:
        """Names of the providers that failed, in attempt order."""
        return [failure.provider for failure in self.failures]
