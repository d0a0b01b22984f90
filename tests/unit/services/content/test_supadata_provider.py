"""Unit tests for SupadataProvider.

Tests cover:
- Metadata mapping to AcquiredContent
- Status-code retryability
- Transcript fetching and async job polling
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from social_recipe_extractor.core.config.settings import SupadataSettings
from social_recipe_extractor.schemas.content import ContentType, Platform, ProviderName
from social_recipe_extractor.services.content.exceptions import ContentAcquisitionError
from social_recipe_extractor.services.content.providers.supadata import (
    SupadataProvider,
    parse_transcript_content,
    upgrade_youtube_thumbnail,
)
from tests.fixtures.content import (
    INSTAGRAM_REEL_URL,
    PINTEREST_URL,
    TIKTOK_VIDEO_URL,
    YOUTUBE_SHORT_URL,
)
from tests.fixtures.provider_responses import (
    SUPADATA_CAROUSEL_METADATA,
    SUPADATA_TRANSCRIPT_SEGMENTS,
    create_supadata_metadata,
)


pytestmark = pytest.mark.unit

BASE_URL = "https://api.supadata.ai/v1"
METADATA_URL = f"{BASE_URL}/metadata"
TRANSCRIPT_URL = f"{BASE_URL}/transcript"


@pytest.fixture
async def provider() -> AsyncIterator[SupadataProvider]:
    provider = SupadataProvider(
        "test-key", SupadataSettings(max_poll_attempts=3, poll_interval=0.5)
    )
    yield provider
    await provider.shutdown()


@pytest.fixture
def sleep_mock() -> Iterator[AsyncMock]:
    with patch(
        "social_recipe_extractor.services.content.providers.supadata.asyncio.sleep",
        new_callable=AsyncMock,
    ) as mock:
        yield mock


class TestSupadataConfiguration:
    """Tests for configuration and URL support."""

    def test_configured_with_key(self) -> None:
        assert SupadataProvider("key", SupadataSettings()).is_configured is True

    def test_not_configured_without_key(self) -> None:
        """Should be skipped when no API key is set."""
        assert SupadataProvider("", SupadataSettings()).is_configured is False

    def test_not_configured_when_disabled(self) -> None:
        assert SupadataProvider("key", SupadataSettings(enabled=False)).is_configured is False

    def test_supports_social_platforms(self) -> None:
        """Should support TikTok, Instagram and YouTube but not Pinterest."""
        provider = SupadataProvider("key", SupadataSettings())

        assert provider.supports(TIKTOK_VIDEO_URL) is True
        assert provider.supports(INSTAGRAM_REEL_URL) is True
        assert provider.supports(YOUTUBE_SHORT_URL) is True
        assert provider.supports(PINTEREST_URL) is False


class TestSupadataAcquire:
    """Tests for acquisition."""

    @respx.mock
    async def test_video_with_transcript(self, provider: SupadataProvider) -> None:
        """Should map metadata and attach the transcript for videos."""
        metadata_route = respx.get(METADATA_URL).mock(
            return_value=httpx.Response(200, json=create_supadata_metadata())
        )
        respx.get(TRANSCRIPT_URL).mock(
            return_value=httpx.Response(200, json={"content": SUPADATA_TRANSCRIPT_SEGMENTS})
        )

        content = await provider.acquire(TIKTOK_VIDEO_URL)

        assert content.provider == ProviderName.SUPADATA
        assert content.platform == Platform.TIKTOK
        assert content.content_type == ContentType.VIDEO
        assert content.title == "Garlic Butter Pasta"
        assert content.caption == "Garlic butter pasta! 200g spaghetti, 3 tbsp butter"
        assert content.transcript == "first boil the pasta\nthen add the garlic"
        assert content.video_url == "https://cdn.example.com/video.mp4"
        assert content.thumbnail_url == "https://cdn.example.com/thumb.jpg"
        assert content.metadata is not None
        assert content.metadata.creator == "Chef Jo"
        assert content.metadata.views == 12000
        assert content.metadata.duration == 45.0

        request = metadata_route.calls.last.request
        assert request.headers["x-api-key"] == "test-key"
        assert request.url.params["url"] == TIKTOK_VIDEO_URL

    @respx.mock
    async def test_short_keeps_short_type(self, provider: SupadataProvider) -> None:
        """Should keep 'short' when the URL says so."""
        respx.get(METADATA_URL).mock(
            return_value=httpx.Response(200, json=create_supadata_metadata(platform="youtube"))
        )
        respx.get(TRANSCRIPT_URL).mock(return_value=httpx.Response(206, json={}))

        content = await provider.acquire(YOUTUBE_SHORT_URL)

        assert content.content_type == ContentType.SHORT
        assert content.transcript is None

    async def test_carousel_skips_transcript(self, provider: SupadataProvider) -> None:
        """Should map carousels to slideshows with image URLs and no transcript call."""
        with respx.mock(assert_all_called=False) as router:
            router.get(METADATA_URL).mock(
                return_value=httpx.Response(200, json=SUPADATA_CAROUSEL_METADATA)
            )
            transcript_route = router.get(TRANSCRIPT_URL)

            content = await provider.acquire(INSTAGRAM_REEL_URL)

        assert content.content_type == ContentType.SLIDESHOW
        assert content.image_urls == [
            "https://cdn.example.com/1.jpg",
            "https://cdn.example.com/3.jpg",
        ]
        assert content.thumbnail_url == "https://cdn.example.com/1.jpg"
        assert content.video_url is None
        assert transcript_route.called is False

    @respx.mock
    async def test_transcript_failure_does_not_fail_acquisition(
        self, provider: SupadataProvider
    ) -> None:
        """Should return content without a transcript when the transcript call fails."""
        respx.get(METADATA_URL).mock(
            return_value=httpx.Response(200, json=create_supadata_metadata())
        )
        respx.get(TRANSCRIPT_URL).mock(return_value=httpx.Response(429))

        content = await provider.acquire(TIKTOK_VIDEO_URL)

        assert content.transcript is None
        assert content.caption

    @pytest.mark.parametrize(
        ("status", "retryable"),
        [(429, True), (404, False), (403, False), (500, True), (503, True), (400, False)],
    )
    @respx.mock
    async def test_metadata_status_retryability(
        self, provider: SupadataProvider, status: int, retryable: bool
    ) -> None:
        """Should classify metadata failures by status code."""
        respx.get(METADATA_URL).mock(return_value=httpx.Response(status))

        with pytest.raises(ContentAcquisitionError) as exc_info:
            await provider.acquire(TIKTOK_VIDEO_URL)

        assert exc_info.value.is_retryable is retryable
        assert exc_info.value.provider == "supadata"
        assert exc_info.value.url == TIKTOK_VIDEO_URL

    @respx.mock
    async def test_malformed_metadata(self, provider: SupadataProvider) -> None:
        """Should treat an unparseable body as non-retryable."""
        respx.get(METADATA_URL).mock(return_value=httpx.Response(200, text="<html>"))

        with pytest.raises(ContentAcquisitionError) as exc_info:
            await provider.acquire(TIKTOK_VIDEO_URL)

        assert exc_info.value.is_retryable is False

    @respx.mock
    async def test_network_error_is_retryable(self, provider: SupadataProvider) -> None:
        """Should map connection failures to retryable errors."""
        respx.get(METADATA_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(ContentAcquisitionError) as exc_info:
            await provider.acquire(TIKTOK_VIDEO_URL)

        assert exc_info.value.is_retryable is True

    @respx.mock
    async def test_timeout_is_retryable(self, provider: SupadataProvider) -> None:
        respx.get(METADATA_URL).mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(ContentAcquisitionError) as exc_info:
            await provider.acquire(TIKTOK_VIDEO_URL)

        assert exc_info.value.is_retryable is True
        assert "timed out" in exc_info.value.message


class TestSupadataTranscript:
    """Tests for transcript fetching."""

    @respx.mock
    async def test_plain_text_transcript(self, provider: SupadataProvider) -> None:
        respx.get(TRANSCRIPT_URL).mock(
            return_value=httpx.Response(200, json={"content": "  boil, drain, toss  "})
        )

        assert await provider.get_transcript(TIKTOK_VIDEO_URL) == "boil, drain, toss"

    @respx.mock
    async def test_polls_async_job(
        self, provider: SupadataProvider, sleep_mock: AsyncMock
    ) -> None:
        """Should poll a 202 job until it completes."""
        respx.get(TRANSCRIPT_URL).mock(
            return_value=httpx.Response(202, json={"jobId": "job-1"})
        )
        job_route = respx.get(f"{TRANSCRIPT_URL}/job-1").mock(
            side_effect=[
                httpx.Response(200, json={"status": "active"}),
                httpx.Response(200, json={"status": "completed", "content": "done"}),
            ]
        )

        transcript = await provider.get_transcript(TIKTOK_VIDEO_URL)

        assert transcript == "done"
        assert job_route.call_count == 2
        assert sleep_mock.await_count == 2
        sleep_mock.assert_awaited_with(0.5)

    @respx.mock
    async def test_poll_budget_exhausted(
        self, provider: SupadataProvider, sleep_mock: AsyncMock
    ) -> None:
        """Should give up quietly after max_poll_attempts."""
        respx.get(TRANSCRIPT_URL).mock(
            return_value=httpx.Response(202, json={"jobId": "job-2"})
        )
        job_route = respx.get(f"{TRANSCRIPT_URL}/job-2").mock(
            return_value=httpx.Response(200, json={"status": "queued"})
        )

        assert await provider.get_transcript(TIKTOK_VIDEO_URL) is None
        assert job_route.call_count == 3

    @respx.mock
    async def test_failed_job(self, provider: SupadataProvider, sleep_mock: AsyncMock) -> None:
        respx.get(TRANSCRIPT_URL).mock(
            return_value=httpx.Response(202, json={"jobId": "job-3"})
        )
        respx.get(f"{TRANSCRIPT_URL}/job-3").mock(
            return_value=httpx.Response(200, json={"status": "failed", "error": "no audio"})
        )

        assert await provider.get_transcript(TIKTOK_VIDEO_URL) is None

    @respx.mock
    async def test_rate_limit_raises(self, provider: SupadataProvider) -> None:
        """Should raise a retryable error when rate limited."""
        respx.get(TRANSCRIPT_URL).mock(return_value=httpx.Response(429))

        with pytest.raises(ContentAcquisitionError) as exc_info:
            await provider.get_transcript(TIKTOK_VIDEO_URL)

        assert exc_info.value.is_retryable is True


class TestParseTranscriptContent:
    def test_segments_ordered_by_offset(self) -> None:
        """Should order segments by offset and join them with newlines."""
        assert parse_transcript_content(SUPADATA_TRANSCRIPT_SEGMENTS) == (
            "first boil the pasta\nthen add the garlic"
        )

    @pytest.mark.parametrize("content", [None, "", "   ", [], [{"offset": 1}], 42])
    def test_empty(self, content: object) -> None:
        assert parse_transcript_content(content) is None


class TestUpgradeYoutubeThumbnail:
    def test_upgrades_default(self) -> None:
        url = "https://i.ytimg.com/vi/abc/default.jpg"

        assert upgrade_youtube_thumbnail(url) == "https://i.ytimg.com/vi/abc/hqdefault.jpg"

    def test_leaves_other_urls(self) -> None:
        url = "https://cdn.example.com/thumb.jpg"

        assert upgrade_youtube_thumbnail(url) == url
