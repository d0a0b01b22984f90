"""Apify provider: runs a platform scraping actor and reads its first result.

Acquisition is a remote job: start an actor run, poll the run status until
it reaches a terminal state, then fetch one item from the run's dataset.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any, ClassVar

from social_recipe_extractor.observability.logging import get_logger
from social_recipe_extractor.schemas.content import (
    AcquiredContent,
    ContentMetadata,
    ContentType,
    Platform,
    ProviderName,
)
from social_recipe_extractor.services.content.platform import (
    detect_content_type,
    detect_platform,
)
from social_recipe_extractor.services.content.providers.base import (
    HTTPContentProvider,
)


if TYPE_CHECKING:
    import httpx

    from social_recipe_extractor.core.config.settings import ApifySettings


logger = get_logger(__name__)

RUN_SUCCEEDED = "SUCCEEDED"
RUN_FAILED_STATES = frozenset({"FAILED", "ABORTED", "TIMED-OUT"})


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return int(value)


def _image_urls(images: Any) -> list[str]:
    urls: list[str] = []
    for image in images or []:
        if isinstance(image, str):
            urls.append(image)
        elif isinstance(image, dict) and isinstance(image.get("url"), str):
            urls.append(image["url"])
    return urls


def parse_tiktok_item(item: dict[str, Any], url: str) -> AcquiredContent:
    """Map a clockworks TikTok scraper item to AcquiredContent."""
    caption = item.get("text") or item.get("desc")
    images = _image_urls((item.get("imagePost") or {}).get("images"))
    covers = item.get("covers") or []
    video_meta = item.get("videoMeta") or {}
    author = item.get("authorMeta") or {}

    return AcquiredContent(
        url=url,
        platform=Platform.TIKTOK,
        content_type=ContentType.SLIDESHOW
        if images
        else detect_content_type(url, Platform.TIKTOK),
        provider=ProviderName.APIFY,
        caption=caption,
        description=caption,
        thumbnail_url=covers[0] if covers else None,
        video_url=item.get("videoUrl"),
        image_urls=images,
        metadata=ContentMetadata(
            duration=video_meta.get("duration"),
            creator=author.get("nickName") or author.get("name"),
            likes=_as_int(item.get("diggCount")),
            views=_as_int(item.get("playCount")),
        ),
    )


def parse_instagram_item(item: dict[str, Any], url: str) -> AcquiredContent:
    """Map an Instagram reel scraper item to AcquiredContent."""
    return AcquiredContent(
        url=url,
        platform=Platform.INSTAGRAM,
        content_type=detect_content_type(url, Platform.INSTAGRAM),
        provider=ProviderName.APIFY,
        caption=item.get("caption"),
        description=item.get("caption"),
        thumbnail_url=item.get("displayUrl"),
        video_url=item.get("videoUrl"),
        image_urls=_image_urls(item.get("images")),
        metadata=ContentMetadata(
            duration=item.get("videoDuration"),
            creator=item.get("ownerUsername"),
            likes=_as_int(item.get("likesCount")),
            views=_as_int(item.get("videoViewCount")),
        ),
    )


class ApifyProvider(HTTPContentProvider):
    """Content provider backed by Apify scraping actors (TikTok, Instagram)."""

    name: ClassVar[ProviderName] = ProviderName.APIFY
    supported_platforms: ClassVar[frozenset[Platform]] = frozenset(
        {Platform.TIKTOK, Platform.INSTAGRAM}
    )

    def __init__(self, token: str, settings: ApifySettings) -> None:
        super().__init__(settings.url, timeout=settings.timeout)
        self.token = token
        self.settings = settings

    @property
    def is_configured(self) -> bool:
        return bool(self.token) and self.settings.enabled

    @staticmethod
    def _actor_input(platform: Platform, url: str) -> dict[str, Any]:
        if platform is Platform.TIKTOK:
            return {
                "postURLs": [url],
                "resultsPerPage": 1,
                "shouldDownloadVideos": False,
                "shouldDownloadCovers": False,
            }
        return {"directUrls": [url], "resultsLimit": 1}

    async def acquire(self, url: str) -> AcquiredContent:
        """Run the platform actor and map its first dataset item.

        Raises:
            ContentAcquisitionError: Non-retryable for unsupported URLs,
                terminal run failures and empty results; retryable for rate
                limits, 5xx responses and exceeding the wait budget.
        """
        platform = detect_platform(url)
        if platform not in self.supported_platforms:
            msg = f"Unsupported platform: {platform}"
            raise self._error(msg, url, retryable=False)

        actor = (
            self.settings.tiktok_actor
            if platform is Platform.TIKTOK
            else self.settings.instagram_actor
        )
        run = await self._start_run(actor, self._actor_input(platform, url), url)
        dataset_id = await self._wait_for_run(run["id"], url)
        item = await self._fetch_first_item(dataset_id, url)

        if platform is Platform.TIKTOK:
            return parse_tiktok_item(item, url)
        return parse_instagram_item(item, url)

    def _auth_params(self, **extra: Any) -> dict[str, Any]:
        return {"token": self.token, **extra}

    def _data(self, response: httpx.Response, url: str) -> dict[str, Any]:
        try:
            data = response.json().get("data")
        except (ValueError, AttributeError) as e:
            msg = "Malformed Apify response"
            raise self._error(msg, url, retryable=False, cause=e) from e
        if not isinstance(data, dict):
            msg = "Apify response has no data object"
            raise self._error(msg, url, retryable=False)
        return data

    async def _start_run(
        self, actor: str, actor_input: dict[str, Any], url: str
    ) -> dict[str, Any]:
        response = await self._request(
            "POST",
            f"/acts/{actor}/runs",
            source_url=url,
            params=self._auth_params(),
            json=actor_input,
        )

        status = response.status_code
        if status == 429:
            msg = "Rate limited by Apify (429)"
            raise self._error(msg, url, retryable=True)
        if not response.is_success:
            msg = f"Failed to start actor {actor}: {status}"
            raise self._error(msg, url, retryable=status >= 500)

        run = self._data(response, url)
        if not run.get("id"):
            msg = "Apify did not return a run id"
            raise self._error(msg, url, retryable=False)

        logger.debug("Apify run started", actor=actor, run_id=run["id"])
        return run

    async def _wait_for_run(self, run_id: str, url: str) -> str:
        """Poll a run until it succeeds. Returns the default dataset id."""
        started = time.monotonic()

        while True:
            response = await self._request(
                "GET",
                f"/actor-runs/{run_id}",
                source_url=url,
                params=self._auth_params(),
            )
            if not response.is_success:
                msg = f"Failed to check run status: {response.status_code}"
                raise self._error(msg, url, retryable=True)

            run = self._data(response, url)
            status = run.get("status")
            if status == RUN_SUCCEEDED:
                return str(run.get("defaultDatasetId"))
            if status in RUN_FAILED_STATES:
                msg = f"Actor run {status}"
                raise self._error(msg, url, retryable=False)

            if time.monotonic() - started >= self.settings.max_wait_time:
                msg = f"Actor run timed out after {self.settings.max_wait_time}s"
                raise self._error(msg, url, retryable=True)

            await asyncio.sleep(self.settings.poll_interval)

    async def _fetch_first_item(self, dataset_id: str, url: str) -> dict[str, Any]:
        response = await self._request(
            "GET",
            f"/datasets/{dataset_id}/items",
            source_url=url,
            params=self._auth_params(format="json", limit=1),
        )
        if not response.is_success:
            msg = f"Failed to fetch results: {response.status_code}"
            raise self._error(msg, url, retryable=response.status_code >= 500)

        try:
            items = response.json()
        except ValueError as e:
            msg = "Malformed dataset response"
            raise self._error(msg, url, retryable=False, cause=e) from e

        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            msg = "No results returned from scraper"
            raise self._error(msg, url, retryable=False)
        return items[0]
