"""Adapter that exposes a legacy parsing function as a Content Provider."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from social_recipe_extractor.schemas.content import ProviderName
from social_recipe_extractor.services.content.providers.base import ContentProvider


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from social_recipe_extractor.schemas.content import AcquiredContent


class LegacyProvider(ContentProvider):
    """Last-resort provider wrapping a legacy ``url -> AcquiredContent`` coroutine.

    It accepts every URL; the acquisition service only reaches it after all
    API-backed providers have failed, and relabels the result with
    ``provider=legacy``.
    """

    name: ClassVar[ProviderName] = ProviderName.LEGACY

    def __init__(self, parser: Callable[[str], Awaitable[AcquiredContent]]) -> None:
        self._parser = parser

    def supports(self, url: str) -> bool:
        return True

    async def acquire(self, url: str) -> AcquiredContent:
        return await self._parser(url)
