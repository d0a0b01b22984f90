"""Supadata provider: post metadata plus speech-to-text transcripts.

Two-step acquisition. Metadata (caption, title, stats, media) is fetched
unconditionally; the transcript is fetched only for video posts and never
fails the acquisition. Long transcripts are produced asynchronously: the
API answers 202 with a job id that is polled until it completes or the
poll budget runs out.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, ClassVar

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from social_recipe_extractor.observability.logging import get_logger
from social_recipe_extractor.schemas.content import (
    AcquiredContent,
    ContentMetadata,
    ContentType,
    Platform,
    ProviderName,
)
from social_recipe_extractor.services.content.exceptions import (
    ContentAcquisitionError,
)
from social_recipe_extractor.services.content.platform import (
    detect_content_type,
    detect_platform,
)
from social_recipe_extractor.services.content.providers.base import (
    HTTPContentProvider,
)


if TYPE_CHECKING:
    from social_recipe_extractor.core.config.settings import SupadataSettings


logger = get_logger(__name__)


class _SupadataModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SupadataAuthor(_SupadataModel):
    username: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")


class SupadataStats(_SupadataModel):
    views: int | None = None
    likes: int | None = None


class SupadataMediaItem(_SupadataModel):
    type: str | None = None
    url: str | None = None


class SupadataMedia(_SupadataModel):
    type: str | None = None
    duration: float | None = None
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")
    image_url: str | None = Field(default=None, alias="imageUrl")
    url: str | None = None
    items: list[SupadataMediaItem] = Field(default_factory=list)


class SupadataMetadata(_SupadataModel):
    """Response body of GET /metadata."""

    type: str | None = None
    title: str | None = None
    description: str | None = None
    author: SupadataAuthor = Field(default_factory=SupadataAuthor)
    stats: SupadataStats = Field(default_factory=SupadataStats)
    media: SupadataMedia = Field(default_factory=SupadataMedia)


def parse_transcript_content(content: Any) -> str | None:
    """Normalise transcript content to plain text.

    Content is either a string or a list of ``{"text", "offset"}``
    segments, which are ordered by offset and joined with newlines.
    """
    if isinstance(content, str):
        return content.strip() or None

    if isinstance(content, list):
        segments = [s for s in content if isinstance(s, dict) and s.get("text")]
        segments.sort(key=lambda s: s.get("offset") or 0)
        text = "\n".join(str(s["text"]).strip() for s in segments)
        return text or None

    return None


def _json_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body, treating anything else as empty."""
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def upgrade_youtube_thumbnail(url: str) -> str:
    """Swap YouTube's 120x90 default thumbnail for the 480x360 variant."""
    if "ytimg.com" in url and "/default.jpg" in url:
        return url.replace("/default.jpg", "/hqdefault.jpg")
    return url


class SupadataProvider(HTTPContentProvider):
    """Content provider backed by the Supadata metadata and transcript APIs."""

    name: ClassVar[ProviderName] = ProviderName.SUPADATA
    supported_platforms: ClassVar[frozenset[Platform]] = frozenset(
        {Platform.TIKTOK, Platform.INSTAGRAM, Platform.YOUTUBE, Platform.FACEBOOK}
    )
    has_transcript_support: ClassVar[bool] = True

    def __init__(self, api_key: str, settings: SupadataSettings) -> None:
        super().__init__(settings.url, timeout=settings.timeout)
        self.api_key = api_key
        self.settings = settings

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and self.settings.enabled

    def _default_headers(self) -> dict[str, str]:
        return {"x-api-key": self.api_key, "Accept": "application/json"}

    async def acquire(self, url: str) -> AcquiredContent:
        """Fetch metadata, then the transcript for video posts.

        Raises:
            ContentAcquisitionError: If the metadata request fails.
        """
        platform = detect_platform(url)
        metadata = await self._fetch_metadata(url)
        content_type = self._map_content_type(metadata.type, url, platform)

        transcript: str | None = None
        if metadata.type == "video" or metadata.media.type == "video":
            try:
                transcript = await self.get_transcript(url)
            except ContentAcquisitionError as e:
                logger.warning(
                    "Transcript unavailable",
                    provider=str(self.name),
                    url=url,
                    error=e.message,
                )

        image_urls = self._extract_image_urls(metadata)
        thumbnail = (
            metadata.media.thumbnail_url
            or metadata.media.image_url
            or (image_urls[0] if image_urls else None)
            or (metadata.media.url if metadata.type == "image" else None)
        )

        return AcquiredContent(
            url=url,
            platform=platform,
            content_type=content_type,
            provider=self.name,
            caption=metadata.description,
            title=metadata.title,
            description=metadata.description,
            transcript=transcript,
            thumbnail_url=upgrade_youtube_thumbnail(thumbnail) if thumbnail else None,
            video_url=metadata.media.url if metadata.media.type == "video" else None,
            image_urls=image_urls,
            metadata=ContentMetadata(
                views=metadata.stats.views,
                likes=metadata.stats.likes,
                duration=metadata.media.duration,
                creator=metadata.author.display_name or metadata.author.username,
            ),
        )

    async def _fetch_metadata(self, url: str) -> SupadataMetadata:
        response = await self._request(
            "GET", "/metadata", source_url=url, params={"url": url}
        )

        status = response.status_code
        if status == 429:
            msg = "Rate limited by Supadata (429)"
            raise self._error(msg, url, retryable=True)
        if status == 404:
            msg = "Content not found (404)"
            raise self._error(msg, url, retryable=False)
        if status == 403:
            msg = "Access forbidden (403), content may be private"
            raise self._error(msg, url, retryable=False)
        if not response.is_success:
            msg = f"Supadata metadata request failed with {status}"
            raise self._error(msg, url, retryable=status >= 500)

        try:
            return SupadataMetadata.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            msg = f"Malformed metadata response: {e}"
            raise self._error(msg, url, retryable=False, cause=e) from e

    async def get_transcript(self, url: str) -> str | None:
        """Fetch a transcript, polling the async job if one is started.

        Returns:
            Transcript text, or None when no transcript is obtainable.

        Raises:
            ContentAcquisitionError: Retryable, when rate limited.
        """
        response = await self._request(
            "GET",
            "/transcript",
            source_url=url,
            params={"url": url, "text": "true", "mode": "auto"},
        )

        status = response.status_code
        if status == 429:
            msg = "Rate limited fetching transcript (429)"
            raise self._error(msg, url, retryable=True)
        if status == 202:
            job_id = _json_body(response).get("jobId")
            if not job_id:
                return None
            return await self._poll_transcript_job(job_id, url)
        if status == 200:
            return parse_transcript_content(_json_body(response).get("content"))

        # 206 means no transcript exists; anything else is treated the same
        logger.debug("No transcript available", url=url, status_code=status)
        return None

    async def _poll_transcript_job(self, job_id: str, url: str) -> str | None:
        """Poll a transcript job until it finishes or the attempt budget is spent."""
        for attempt in range(self.settings.max_poll_attempts):
            await asyncio.sleep(self.settings.poll_interval)

            response = await self._request(
                "GET", f"/transcript/{job_id}", source_url=url
            )
            if response.status_code == 404:
                return None
            if not response.is_success:
                continue

            body = _json_body(response)
            status = body.get("status")
            if status == "completed":
                return parse_transcript_content(body.get("content"))
            if status == "failed":
                logger.warning(
                    "Transcript job failed", job_id=job_id, error=body.get("error")
                )
                return None

            logger.debug("Transcript job pending", job_id=job_id, attempt=attempt + 1)

        logger.warning(
            "Transcript job did not finish in time",
            job_id=job_id,
            max_poll_attempts=self.settings.max_poll_attempts,
        )
        return None

    @staticmethod
    def _map_content_type(
        metadata_type: str | None,
        url: str,
        platform: Platform,
    ) -> ContentType:
        detected = detect_content_type(url, platform)
        if metadata_type == "video":
            if detected in (ContentType.SHORT, ContentType.REEL):
                return detected
            return ContentType.VIDEO
        if metadata_type == "image":
            return ContentType.PHOTO
        if metadata_type == "carousel":
            return ContentType.SLIDESHOW
        return detected

    @staticmethod
    def _extract_image_urls(metadata: SupadataMetadata) -> list[str]:
        if metadata.type == "carousel":
            return [
                item.url
                for item in metadata.media.items
                if item.url and item.type in (None, "image")
            ]
        if metadata.type == "image":
            image = metadata.media.image_url or metadata.media.url
            return [image] if image else []
        return []
