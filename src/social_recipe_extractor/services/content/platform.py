"""Platform and content-type detection from post URLs."""

from __future__ import annotations

import re

from social_recipe_extractor.schemas.content import ContentType, Platform


PLATFORM_PATTERNS: dict[Platform, tuple[re.Pattern[str], ...]] = {
    Platform.TIKTOK: (
        re.compile(r"(?:www\.)?tiktok\.com/@[\w.-]+/(?:video|photo)/\d+", re.I),
        re.compile(r"(?:vm|vt)\.tiktok\.com/\w+", re.I),
    ),
    Platform.INSTAGRAM: (
        re.compile(r"(?:www\.)?instagram\.com/(?:p|reel|reels|tv)/[\w-]+", re.I),
        re.compile(r"(?:www\.)?instagram\.com/[\w.-]+/reel/[\w-]+", re.I),
    ),
    Platform.YOUTUBE: (
        re.compile(r"(?:www\.|m\.)?youtube\.com/watch\?v=[\w-]+", re.I),
        re.compile(r"(?:www\.|m\.)?youtube\.com/shorts/[\w-]+", re.I),
        re.compile(r"youtu\.be/[\w-]+", re.I),
    ),
    Platform.FACEBOOK: (
        re.compile(r"(?:www\.)?facebook\.com/[\w.-]+/videos/\d+", re.I),
        re.compile(r"(?:www\.)?facebook\.com/reel/\d+", re.I),
        re.compile(r"(?:www\.)?facebook\.com/watch/?\?v=[\w-]+", re.I),
        re.compile(r"fb\.watch/\w+", re.I),
    ),
    Platform.PINTEREST: (
        re.compile(r"(?:[\w-]+\.)?pinterest\.[a-z.]+/pin/\d+", re.I),
        re.compile(r"pin\.it/\w+", re.I),
    ),
}

_COOKING_SITE_HINTS = ("recipe", "cook", "food")


def detect_platform(url: str) -> Platform:
    """Classify a URL by originating platform.

    URLs that match no social platform but look food-related are treated as
    cooking websites; everything else is unknown.
    """
    for platform, patterns in PLATFORM_PATTERNS.items():
        if any(pattern.search(url) for pattern in patterns):
            return platform

    lowered = url.lower()
    if any(hint in lowered for hint in _COOKING_SITE_HINTS):
        return Platform.COOKING_WEBSITE
    return Platform.UNKNOWN


def detect_content_type(url: str, platform: Platform | None = None) -> ContentType:
    """Guess the content type of a post from its URL alone."""
    platform = platform or detect_platform(url)
    lowered = url.lower()

    if platform is Platform.YOUTUBE and "/shorts/" in lowered:
        return ContentType.SHORT
    if platform in (Platform.INSTAGRAM, Platform.FACEBOOK) and "/reel" in lowered:
        return ContentType.REEL
    if platform is Platform.TIKTOK and "/photo/" in lowered:
        return ContentType.SLIDESHOW
    if platform is Platform.PINTEREST:
        return ContentType.PHOTO
    return ContentType.VIDEO
