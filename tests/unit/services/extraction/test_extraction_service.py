"""Unit tests for the ExtractionService orchestrator."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from social_recipe_extractor.core.config.settings import ExtractionSettings
from social_recipe_extractor.llm.exceptions import LLMUnavailableError
from social_recipe_extractor.schemas.content import ContentType, Platform, ProviderName
from social_recipe_extractor.schemas.recipe import RecipeSource
from social_recipe_extractor.services.content.exceptions import (
    AggregateAcquisitionError,
    ProviderFailure,
)
from social_recipe_extractor.services.extraction.confidence import ConfidenceScorer
from social_recipe_extractor.services.extraction.service import (
    ExtractionService,
    build_extraction_text,
)
from social_recipe_extractor.services.visual.exceptions import FrameExtractionError
from social_recipe_extractor.services.visual.models import (
    ConsolidatedVisualExtraction,
    VisualExtractionResult,
)
from tests.fixtures.content import TIKTOK_PHOTO_URL, TIKTOK_VIDEO_URL, create_content
from tests.fixtures.recipes import (
    create_recipe,
    create_visual_recipe,
    create_weak_confidence,
)


pytestmark = pytest.mark.unit


def _visual_result(*, usable: bool = True) -> VisualExtractionResult:
    return VisualExtractionResult(
        recipe=create_visual_recipe(),
        consolidated=ConsolidatedVisualExtraction(
            dish_name="Shrimp Pasta",
            ingredients=["spaghetti", "shrimp", "parsley"],
            cooking_steps=["boil the spaghetti until al dente", "sear the shrimp"],
            confidence=0.75 if usable else 0.2,
        ),
        frames_extracted=8,
        frames_analyzed=6 if usable else 1,
        video_duration=45.0,
        is_usable=usable,
    )


@pytest.fixture
def content_service() -> MagicMock:
    service = MagicMock()
    service.acquire = AsyncMock(return_value=create_content())
    service.shutdown = AsyncMock()
    return service


@pytest.fixture
def text_extractor() -> MagicMock:
    extractor = MagicMock()
    extractor.extract = AsyncMock(return_value=create_recipe())
    return extractor


@pytest.fixture
def visual_extractor() -> MagicMock:
    visual = MagicMock()
    visual.extract_from_video = AsyncMock(return_value=_visual_result())
    visual.extract_from_images = AsyncMock(return_value=_visual_result())
    return visual


@pytest.fixture
def service(
    content_service: MagicMock,
    text_extractor: MagicMock,
    visual_extractor: MagicMock,
) -> ExtractionService:
    return ExtractionService(
        content_service=content_service,
        text_extractor=text_extractor,
        scorer=ConfidenceScorer(),
        visual_extractor=visual_extractor,
    )


class TestBuildExtractionText:
    """Tests for assembling the text sent to the extractor."""

    def test_labels_in_order(self) -> None:
        """Should label title, caption, transcript and description in order."""
        content = create_content(
            title="Pasta",
            caption="My pasta",
            transcript="boil it",
            description="Family recipe",
        )

        assert build_extraction_text(content) == (
            "Title: Pasta\n\nCaption: My pasta\n\nTranscript: boil it\n\n"
            "Description: Family recipe"
        )

    def test_skips_description_equal_to_caption(self) -> None:
        """Should not repeat a description identical to the caption."""
        content = create_content(
            title=None, caption="Same text", description="Same text", transcript=None
        )

        assert build_extraction_text(content) == "Caption: Same text"

    def test_empty_content(self) -> None:
        """Should produce an empty string when there is no text at all."""
        content = create_content(
            title=None, caption=None, description=None, transcript=None
        )

        assert build_extraction_text(content) == ""


class TestExtractionServiceTextOnly:
    """Confident text extraction never touches the visual pipeline."""

    async def test_confident_caption(
        self,
        service: ExtractionService,
        text_extractor: MagicMock,
        visual_extractor: MagicMock,
    ) -> None:
        """Should return the caption recipe without visual fallback."""
        result = await service.extract(TIKTOK_VIDEO_URL)

        assert result.used_visual_fallback is False
        assert result.recipe.source == RecipeSource.CAPTION
        assert result.recipe == text_extractor.extract.return_value
        assert result.confidence.fallback_decision.should_fallback is False
        assert result.confidence.initial == result.confidence.final
        assert result.timing.visual_extraction_ms is None
        visual_extractor.extract_from_video.assert_not_awaited()

    async def test_result_metadata(self, service: ExtractionService) -> None:
        """Should report platform, provider and text presence."""
        result = await service.extract(TIKTOK_VIDEO_URL)

        assert result.url == TIKTOK_VIDEO_URL
        assert result.platform == Platform.TIKTOK
        assert result.content.provider == ProviderName.SUPADATA
        assert result.content.has_caption is True
        assert result.content.has_transcript is False
        assert result.timing.total_ms >= result.timing.content_acquisition_ms

    async def test_passes_labelled_text(
        self,
        service: ExtractionService,
        text_extractor: MagicMock,
    ) -> None:
        """Should pass the labelled text blob to the text extractor."""
        await service.extract(TIKTOK_VIDEO_URL)

        text = text_extractor.extract.call_args.args[0]
        assert text.startswith("Title: Garlic Butter Pasta\n\nCaption: ")


class TestExtractionServiceVisualFallback:
    """Weak text extraction on video content escalates to the visual pipeline."""

    @pytest.fixture(autouse=True)
    def _weak_text(self, text_extractor: MagicMock) -> None:
        text_extractor.extract.return_value = create_recipe(
            title="Pasta",
            ingredients=[],
            instructions=[],
            confidence=create_weak_confidence(title=0.5),
        )

    async def test_merges_usable_visual_result(
        self,
        service: ExtractionService,
        visual_extractor: MagicMock,
    ) -> None:
        """Should merge a usable visual recipe into the text recipe."""
        result = await service.extract(TIKTOK_VIDEO_URL)

        visual_extractor.extract_from_video.assert_awaited_once_with(
            "https://cdn.example.com/video.mp4"
        )
        assert result.used_visual_fallback is True
        assert result.recipe.source == RecipeSource.COMBINED
        assert result.recipe.title == "Shrimp Pasta"
        assert [i.name for i in result.recipe.ingredients] == [
            "spaghetti",
            "shrimp",
            "parsley",
        ]
        assert result.confidence.final.overall == 0.75
        assert result.confidence.initial.overall == 0.4
        assert result.timing.visual_extraction_ms is not None

    async def test_unusable_visual_result_keeps_text(
        self,
        service: ExtractionService,
        visual_extractor: MagicMock,
    ) -> None:
        """Should keep the text recipe when the visual result is unusable."""
        visual_extractor.extract_from_video.return_value = _visual_result(usable=False)

        result = await service.extract(TIKTOK_VIDEO_URL)

        assert result.used_visual_fallback is True
        assert result.recipe.source == RecipeSource.CAPTION
        assert result.recipe.title == "Pasta"

    async def test_visual_failure_is_not_fatal(
        self,
        service: ExtractionService,
        visual_extractor: MagicMock,
    ) -> None:
        """Should swallow visual pipeline errors and still record timing."""
        visual_extractor.extract_from_video.side_effect = FrameExtractionError(
            TIKTOK_VIDEO_URL, "no usable frames"
        )

        result = await service.extract(TIKTOK_VIDEO_URL)

        assert result.used_visual_fallback is False
        assert result.recipe.source == RecipeSource.CAPTION
        assert result.timing.visual_extraction_ms is not None

    async def test_uses_post_url_without_video_url(
        self,
        service: ExtractionService,
        content_service: MagicMock,
        visual_extractor: MagicMock,
    ) -> None:
        """Should hand the post URL to the downloader when no media URL is known."""
        content_service.acquire.return_value = create_content(video_url=None)

        await service.extract(TIKTOK_VIDEO_URL)

        visual_extractor.extract_from_video.assert_awaited_once_with(TIKTOK_VIDEO_URL)

    async def test_slideshow_uses_images(
        self,
        service: ExtractionService,
        content_service: MagicMock,
        visual_extractor: MagicMock,
    ) -> None:
        """Should analyse slideshow images directly."""
        images = ["https://cdn.example.com/1.jpg", "https://cdn.example.com/2.jpg"]
        content_service.acquire.return_value = create_content(
            url=TIKTOK_PHOTO_URL,
            content_type=ContentType.SLIDESHOW,
            video_url=None,
            image_urls=images,
        )

        result = await service.extract(TIKTOK_PHOTO_URL)

        visual_extractor.extract_from_images.assert_awaited_once_with(images)
        visual_extractor.extract_from_video.assert_not_awaited()
        assert result.used_visual_fallback is True

    async def test_photo_content_skips_visual(
        self,
        service: ExtractionService,
        content_service: MagicMock,
        visual_extractor: MagicMock,
    ) -> None:
        """Should not run the visual pipeline for single photos."""
        content_service.acquire.return_value = create_content(
            content_type=ContentType.PHOTO, image_urls=["https://cdn.example.com/1.jpg"]
        )

        result = await service.extract(TIKTOK_VIDEO_URL)

        assert result.used_visual_fallback is False
        assert result.confidence.fallback_decision.should_fallback is True
        visual_extractor.extract_from_images.assert_not_awaited()

    async def test_disabled_visual_fallback(
        self,
        content_service: MagicMock,
        text_extractor: MagicMock,
        visual_extractor: MagicMock,
    ) -> None:
        """Should respect enable_visual_fallback=False."""
        service = ExtractionService(
            content_service,
            text_extractor,
            ConfidenceScorer(),
            visual_extractor,
            ExtractionSettings(enable_visual_fallback=False),
        )

        result = await service.extract(TIKTOK_VIDEO_URL)

        assert result.used_visual_fallback is False
        visual_extractor.extract_from_video.assert_not_awaited()

    async def test_without_visual_extractor(
        self,
        content_service: MagicMock,
        text_extractor: MagicMock,
    ) -> None:
        """Should work when no visual extractor is wired in."""
        service = ExtractionService(content_service, text_extractor, ConfidenceScorer())

        result = await service.extract(TIKTOK_VIDEO_URL)

        assert result.used_visual_fallback is False
        assert result.recipe.source == RecipeSource.CAPTION


class TestExtractionServiceErrors:
    """Unrecoverable failures propagate to the caller."""

    async def test_acquisition_failure_propagates(
        self,
        service: ExtractionService,
        content_service: MagicMock,
        text_extractor: MagicMock,
    ) -> None:
        """Should raise the aggregate error when no provider succeeded."""
        content_service.acquire.side_effect = AggregateAcquisitionError(
            TIKTOK_VIDEO_URL,
            "tiktok",
            [
                ProviderFailure("supadata", "Rate limited by Supadata (429)", True),
                ProviderFailure("apify", "Actor run FAILED", False),
            ],
        )

        with pytest.raises(AggregateAcquisitionError) as exc_info:
            await service.extract(TIKTOK_VIDEO_URL)

        assert exc_info.value.providers == ["supadata", "apify"]
        text_extractor.extract.assert_not_awaited()

    async def test_text_transport_error_propagates(
        self,
        service: ExtractionService,
        text_extractor: MagicMock,
    ) -> None:
        """Should not swallow transport errors from the mandatory text call."""
        text_extractor.extract.side_effect = LLMUnavailableError("connection refused")

        with pytest.raises(LLMUnavailableError):
            await service.extract(TIKTOK_VIDEO_URL)

    async def test_shutdown_releases_resources(
        self,
        service: ExtractionService,
        content_service: MagicMock,
        text_extractor: MagicMock,
    ) -> None:
        """Should shut down providers and the LLM client."""
        text_extractor.llm_client = MagicMock()
        text_extractor.llm_client.shutdown = AsyncMock()

        await service.shutdown()

        content_service.shutdown.assert_awaited_once()
        text_extractor.llm_client.shutdown.assert_awaited_once()
