"""Extraction orchestrator.

Sequence for one URL:

1. Acquire content (failure is terminal).
2. Build a labelled text blob from title, caption, transcript and description.
3. Extract a recipe from the text.
4. Score its confidence.
5. If the score calls for it and the post is a video (or an image slideshow),
   run the visual pipeline and merge a usable visual recipe into the text one.

Visual pipeline failures never fail the call; the text recipe is returned.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from social_recipe_extractor.core.config.settings import ExtractionSettings
from social_recipe_extractor.observability.logging import get_logger, logging_context
from social_recipe_extractor.schemas.content import ContentType
from social_recipe_extractor.services.extraction.merge import merge_recipes
from social_recipe_extractor.services.extraction.models import (
    ConfidenceSummary,
    ContentSummary,
    ExtractionResult,
    ExtractionTiming,
)


if TYPE_CHECKING:
    from social_recipe_extractor.schemas.content import AcquiredContent
    from social_recipe_extractor.services.content.service import (
        ContentAcquisitionService,
    )
    from social_recipe_extractor.services.extraction.confidence import ConfidenceScorer
    from social_recipe_extractor.services.extraction.text_extractor import (
        RecipeTextExtractor,
    )
    from social_recipe_extractor.services.visual.extractor import VisualExtractor
    from social_recipe_extractor.services.visual.models import VisualExtractionResult


logger = get_logger(__name__)


def build_extraction_text(content: AcquiredContent) -> str:
    """Join the post's text fields with labels, title first.

    The description is skipped when it repeats the caption.
    """
    parts: list[str] = []
    if content.title:
        parts.append(f"Title: {content.title}")
    if content.caption:
        parts.append(f"Caption: {content.caption}")
    if content.transcript:
        parts.append(f"Transcript: {content.transcript}")
    if content.description and content.description.strip() != (content.caption or "").strip():
        parts.append(f"Description: {content.description}")
    return "\n\n".join(parts)


def _elapsed_ms(start: float) -> int:
    return round((time.perf_counter() - start) * 1000)


class ExtractionService:
    """Top-level entry point: URL in, recipe plus diagnostics out.

    Example:
        ```python
        service = create_extraction_service()
        result = await service.extract("https://www.tiktok.com/@chef/video/123")
        print(result.recipe.title, result.confidence.final.overall)
        ```
    """

    def __init__(
        self,
        content_service: ContentAcquisitionService,
        text_extractor: RecipeTextExtractor,
        scorer: ConfidenceScorer,
        visual_extractor: VisualExtractor | None = None,
        settings: ExtractionSettings | None = None,
    ) -> None:
        self.content_service = content_service
        self.text_extractor = text_extractor
        self.scorer = scorer
        self.visual_extractor = visual_extractor
        self.settings = settings or ExtractionSettings()

    async def extract(self, url: str) -> ExtractionResult:
        """Extract a recipe from a social-media post.

        Raises:
            AggregateAcquisitionError: If no provider could acquire the content.
            LLMError: Transport failures from the text extraction call.
        """
        with logging_context(url=url):
            return await self._extract(url)

    async def _extract(self, url: str) -> ExtractionResult:
        started = time.perf_counter()

        stage_start = time.perf_counter()
        content = await self.content_service.acquire(url)
        acquisition_ms = _elapsed_ms(stage_start)

        stage_start = time.perf_counter()
        initial = await self.text_extractor.extract(build_extraction_text(content))
        caption_ms = _elapsed_ms(stage_start)

        decision = self.scorer.evaluate(initial.confidence)
        logger.info(
            "Text extraction scored",
            score=round(decision.score, 3),
            should_fallback=decision.should_fallback,
            recommendation=self.scorer.get_recommendation(decision),
        )

        recipe = initial
        used_visual = False
        visual_ms: int | None = None

        if decision.should_fallback and self._can_run_visual(content):
            stage_start = time.perf_counter()
            visual = await self._run_visual(content)
            visual_ms = _elapsed_ms(stage_start)

            if visual is not None:
                used_visual = True
                if visual.is_usable:
                    recipe = merge_recipes(initial, visual.recipe)
                else:
                    logger.info(
                        "Visual result not usable, keeping text recipe",
                        frames_analyzed=visual.frames_analyzed,
                        confidence=visual.consolidated.confidence,
                    )

        result = ExtractionResult(
            recipe=recipe,
            url=url,
            platform=content.platform,
            used_visual_fallback=used_visual,
            content=ContentSummary(
                provider=content.provider,
                has_caption=content.has_caption,
                has_transcript=content.has_transcript,
            ),
            confidence=ConfidenceSummary(
                initial=initial.confidence,
                final=recipe.confidence,
                fallback_decision=decision,
            ),
            timing=ExtractionTiming(
                content_acquisition_ms=acquisition_ms,
                caption_extraction_ms=caption_ms,
                visual_extraction_ms=visual_ms,
                total_ms=_elapsed_ms(started),
            ),
        )
        logger.info(
            "Extraction complete",
            title=recipe.title,
            source=str(recipe.source),
            overall=recipe.confidence.overall,
            used_visual_fallback=used_visual,
            total_ms=result.timing.total_ms,
        )
        return result

    def _can_run_visual(self, content: AcquiredContent) -> bool:
        if not self.settings.enable_visual_fallback or self.visual_extractor is None:
            return False
        if content.content_type.is_video:
            return True
        return content.content_type == ContentType.SLIDESHOW and bool(content.image_urls)

    async def _run_visual(self, content: AcquiredContent) -> VisualExtractionResult | None:
        """Run the visual pipeline; None if any stage raised."""
        assert self.visual_extractor is not None
        try:
            if content.content_type.is_video:
                return await self.visual_extractor.extract_from_video(
                    content.video_url or content.url
                )
            return await self.visual_extractor.extract_from_images(content.image_urls)
        except Exception as e:
            logger.warning(
                "Visual extraction failed, keeping text recipe",
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def shutdown(self) -> None:
        """Release provider and LLM client resources."""
        await self.content_service.shutdown()
        await self.text_extractor.llm_client.shutdown()
