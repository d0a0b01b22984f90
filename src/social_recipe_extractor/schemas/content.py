"""Acquired post content and its classification enums."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from social_recipe_extractor.schemas.base import FrozenDomainModel


class Platform(StrEnum):
    """Originating social network of a post."""

    TIKTOK = "tiktok"
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    FACEBOOK = "facebook"
    PINTEREST = "pinterest"
    COOKING_WEBSITE = "cooking_website"
    UNKNOWN = "unknown"


class ContentType(StrEnum):
    """Kind of media a post carries."""

    VIDEO = "video"
    PHOTO = "photo"
    SLIDESHOW = "slideshow"
    REEL = "reel"
    SHORT = "short"

    @property
    def is_video(self) -> bool:
        """Whether the post is moving-picture content."""
        return self in (ContentType.VIDEO, ContentType.REEL, ContentType.SHORT)


class ProviderName(StrEnum):
    """Upstream API that produced the content."""

    SUPADATA = "supadata"
    APIFY = "apify"
    LEGACY = "legacy"


class ContentMetadata(FrozenDomainModel):
    """Engagement metadata reported by a provider."""

    views: int | None = None
    likes: int | None = None
    duration: float | None = Field(default=None, description="Seconds")
    creator: str | None = None


class AcquiredContent(FrozenDomainModel):
    """Raw post content returned by a Content Provider.

    ``provider`` and ``platform`` are always populated, even when the
    upstream returned no caption, transcript or media.
    """

    url: str
    platform: Platform
    content_type: ContentType
    provider: ProviderName

    caption: str | None = None
    title: str | None = None
    description: str | None = None
    transcript: str | None = None
    thumbnail_url: str | None = None
    video_url: str | None = None
    image_urls: list[str] = Field(default_factory=list)
    audio_url: str | None = None
    metadata: ContentMetadata | None = None

    @property
    def has_caption(self) -> bool:
        return bool(self.caption and self.caption.strip())

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript and self.transcript.strip())
