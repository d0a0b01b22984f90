"""Content acquisition service with provider failover.

Providers are tried in priority order. Each supported provider gets up to
``max_retries + 1`` attempts for retryable failures; a non-retryable failure
moves straight on to the next provider. When every provider has failed the
optional legacy parser runs last, and if that fails too an
AggregateAcquisitionError carrying every provider's diagnosis is raised.
"""

from __future__ import annotations

import asyncio
import random
from typing import TYPE_CHECKING

from social_recipe_extractor.core.config.settings import ContentAcquisitionSettings
from social_recipe_extractor.observability.logging import get_logger
from social_recipe_extractor.schemas.content import ProviderName
from social_recipe_extractor.services.content.exceptions import (
    AggregateAcquisitionError,
    ContentAcquisitionError,
    ProviderFailure,
)
from social_recipe_extractor.services.content.platform import detect_platform


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from social_recipe_extractor.schemas.content import AcquiredContent
    from social_recipe_extractor.services.content.providers.base import (
        ContentProvider,
    )
    from social_recipe_extractor.services.content.providers.legacy import (
        LegacyProvider,
    )


logger = get_logger(__name__)


def compute_retry_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    jitter: float = 0.2,
    uniform: Callable[[float, float], float] = random.uniform,
) -> float:
    """Backoff delay in seconds before retry ``attempt`` (0-indexed).

    ``min(base_delay * 2**attempt, max_delay)`` with uniform jitter of
    ``±jitter`` of that value, so the result never exceeds
    ``max_delay * (1 + jitter)``.
    """
    delay = min(base_delay * (2**attempt), max_delay)
    return max(0.0, delay + delay * uniform(-jitter, jitter))


class ContentAcquisitionService:
    """Acquires post content from the first provider that succeeds.

    Example:
        ```python
        service = ContentAcquisitionService(
            [SupadataProvider(key, settings.content.supadata)],
            settings.content,
        )
        content = await service.acquire("https://www.tiktok.com/@chef/video/123")
        ```
    """

    def __init__(
        self,
        providers: Sequence[ContentProvider],
        settings: ContentAcquisitionSettings | None = None,
        legacy_provider: LegacyProvider | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            providers: Providers in priority order.
            settings: Retry and fallback configuration.
            legacy_provider: Last-resort adapter, used only when
                ``enable_legacy_fallback`` is set.
        """
        self.providers = list(providers)
        self.settings = settings or ContentAcquisitionSettings()
        self.legacy_provider = legacy_provider

    @property
    def configured_providers(self) -> list[ContentProvider]:
        """Providers that have the credentials they need, in priority order."""
        return [p for p in self.providers if p.is_configured]

    @property
    def legacy_enabled(self) -> bool:
        return self.settings.enable_legacy_fallback and self.legacy_provider is not None

    def supports_url(self, url: str) -> bool:
        """Whether any configured provider (or the legacy fallback) can handle the URL."""
        if self.legacy_enabled:
            return True
        return any(p.supports(url) for p in self.configured_providers)

    def retry_delay(self, attempt: int) -> float:
        """Backoff delay before retry ``attempt`` using this service's settings."""
        return compute_retry_delay(
            attempt,
            self.settings.base_retry_delay,
            self.settings.max_retry_delay,
            self.settings.retry_jitter,
        )

    async def acquire(self, url: str) -> AcquiredContent:
        """Acquire content for a URL.

        Args:
            url: Post URL.

        Returns:
            Content from the first provider that succeeded.

        Raises:
            AggregateAcquisitionError: If every provider (and the legacy
                fallback, when enabled) failed or none supports the URL.
        """
        platform = detect_platform(url)
        candidates = [p for p in self.configured_providers if p.supports(url)]
        failures: list[ProviderFailure] = []

        logger.info(
            "Acquiring content",
            url=url,
            platform=str(platform),
            providers=[str(p.name) for p in candidates],
        )

        for provider in candidates:
            try:
                content = await self._acquire_with_retry(provider, url)
            except ContentAcquisitionError as e:
                failures.append(
                    ProviderFailure(str(provider.name), e.message, e.is_retryable)
                )
                logger.warning(
                    "Provider failed, trying next",
                    provider=str(provider.name),
                    retryable=e.is_retryable,
                    error=e.message,
                )
            else:
                logger.info(
                    "Content acquired",
                    provider=str(provider.name),
                    content_type=str(content.content_type),
                    has_caption=content.has_caption,
                    has_transcript=content.has_transcript,
                )
                return content

        if self.legacy_enabled:
            assert self.legacy_provider is not None
            logger.info("Falling back to legacy parser", url=url)
            try:
                content = await self.legacy_provider.acquire(url)
            except Exception as e:
                failures.append(
                    ProviderFailure(str(ProviderName.LEGACY), str(e), retryable=False)
                )
                logger.warning("Legacy parser failed", url=url, error=str(e))
            else:
                return content.model_copy(update={"provider": ProviderName.LEGACY})

        error = AggregateAcquisitionError(url, str(platform), failures)
        logger.error("All providers failed", url=url, failures=len(failures))
        raise error

    async def _acquire_with_retry(
        self,
        provider: ContentProvider,
        url: str,
    ) -> AcquiredContent:
        """Call one provider, retrying retryable failures with backoff.

        Raises:
            ContentAcquisitionError: The last failure once retries are spent,
                or the first non-retryable failure.
        """
        max_attempts = self.settings.max_retries + 1
        last_error: ContentAcquisitionError | None = None

        for attempt in range(max_attempts):
            try:
                return await provider.acquire(url)
            except ContentAcquisitionError as e:
                last_error = e
            except Exception as e:
                last_error = ContentAcquisitionError(
                    f"Unexpected error: {e}",
                    provider=str(provider.name),
                    url=url,
                    is_retryable=False,
                    cause=e,
                )

            if not last_error.is_retryable:
                raise last_error

            if attempt + 1 < max_attempts:
                delay = self.retry_delay(attempt)
                logger.warning(
                    "Retryable provider error",
                    provider=str(provider.name),
                    attempt=attempt + 1,
                    max_attempts=max_attempts,
                    delay=round(delay, 3),
                    error=last_error.message,
                )
                await asyncio.sleep(delay)

        assert last_error is not None
        raise last_error

    async def get_transcript(self, url: str) -> str | None:
        """Fetch only a transcript.

        Providers with a dedicated transcript capability are tried first,
        then the full acquisition path. Never raises: a missing transcript
        is an expected outcome.
        """
        for provider in self.configured_providers:
            if not (provider.has_transcript_support and provider.supports(url)):
                continue
            try:
                transcript = await provider.get_transcript(url)
            except ContentAcquisitionError as e:
                logger.debug(
                    "Transcript fetch failed",
                    provider=str(provider.name),
                    error=e.message,
                )
                continue
            if transcript:
                return transcript

        try:
            content = await self.acquire(url)
        except AggregateAcquisitionError:
            return None
        return content.transcript or None

    async def shutdown(self) -> None:
        """Release every provider's resources."""
        for provider in self.providers:
            await provider.shutdown()
