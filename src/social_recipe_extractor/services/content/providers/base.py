"""Content Provider interface.

The set of providers is closed: SupadataProvider, ApifyProvider and
LegacyProvider. The acquisition service walks them in priority order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

import httpx

from social_recipe_extractor.observability.logging import get_logger
from social_recipe_extractor.services.content.exceptions import (
    ContentAcquisitionError,
)
from social_recipe_extractor.services.content.platform import detect_platform


if TYPE_CHECKING:
    from social_recipe_extractor.schemas.content import (
        AcquiredContent,
        Platform,
        ProviderName,
    )


logger = get_logger(__name__)


class ContentProvider(ABC):
    """A single upstream source of post content."""

    name: ClassVar[ProviderName]
    supported_platforms: ClassVar[frozenset[Platform]] = frozenset()
    has_transcript_support: ClassVar[bool] = False

    @property
    def is_configured(self) -> bool:
        """Whether the provider has the credentials it needs."""
        return True

    def supports(self, url: str) -> bool:
        """Whether the provider can handle this URL. Pure, no I/O."""
        return detect_platform(url) in self.supported_platforms

    @abstractmethod
    async def acquire(self, url: str) -> AcquiredContent:
        """Acquire post content.

        Raises:
            ContentAcquisitionError: With ``is_retryable`` describing whether
                a retry might succeed.
        """
        ...

    async def get_transcript(self, url: str) -> str | None:
        """Fetch only the transcript. Providers without the capability return None."""
        return None

    async def initialize(self) -> None:
        """Acquire client resources."""

    async def shutdown(self) -> None:
        """Release client resources."""


class HTTPContentProvider(ContentProvider):
    """Base for providers backed by an HTTP API.

    Owns an httpx.AsyncClient and maps transport failures (timeouts,
    connection errors) to retryable acquisition errors. Status-code
    interpretation is left to each provider.
    """

    def __init__(self, base_url: str, timeout: float = 30.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client: httpx.AsyncClient | None = None

    def _default_headers(self) -> dict[str, str]:
        return {}

    async def initialize(self) -> None:
        """Initialize the HTTP client."""
        if self._http_client is not None:
            return

        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers=self._default_headers(),
            follow_redirects=True,
        )
        logger.debug("Content provider initialized", provider=str(self.name))

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def _error(
        self,
        message: str,
        url: str,
        *,
        retryable: bool,
        cause: BaseException | None = None,
    ) -> ContentAcquisitionError:
        return ContentAcquisitionError(
            message,
            provider=str(self.name),
            url=url,
            is_retryable=retryable,
            cause=cause,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        source_url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request to the provider API.

        Args:
            method: HTTP method.
            path: Path relative to the provider base URL.
            source_url: Post URL being acquired, for error reporting.
            **kwargs: Passed through to httpx.

        Returns:
            The response, whatever its status code.

        Raises:
            ContentAcquisitionError: Retryable, on timeout or network failure.
        """
        if self._http_client is None:
            await self.initialize()

        assert self._http_client is not None

        try:
            return await self._http_client.request(
                method, f"{self.base_url}{path}", **kwargs
            )
        except httpx.TimeoutException as e:
            msg = f"Request timed out after {self.timeout}s"
            raise self._error(msg, source_url, retryable=True, cause=e) from e
        except httpx.RequestError as e:
            msg = f"Network error: {e}"
            raise self._error(msg, source_url, retryable=True, cause=e) from e
