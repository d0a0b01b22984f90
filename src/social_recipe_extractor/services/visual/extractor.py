"""Visual recipe extraction: sample, analyse, consolidate, convert."""

from __future__ import annotations

from collections.abc import Sequence

from social_recipe_extractor.observability.logging import get_logger
from social_recipe_extractor.schemas.recipe import (
    ConfidenceScore,
    ExtractedRecipe,
    Ingredient,
    RecipeSource,
)
from social_recipe_extractor.services.visual.exceptions import VisualExtractionError
from social_recipe_extractor.services.visual.frame_analyzer import FrameAnalyzer
from social_recipe_extractor.services.visual.frame_consolidator import (
    GENERIC_DISH_NAMES,
    FrameConsolidator,
)
from social_recipe_extractor.services.visual.frame_extractor import FrameExtractor
from social_recipe_extractor.services.visual.models import (
    ConsolidatedVisualExtraction,
    FrameAnalysisBatch,
    VisualExtractionResult,
)


logger = get_logger(__name__)

MIN_USABLE_FRAMES = 2
MIN_USABLE_CONFIDENCE = 0.3
NAMED_TITLE_CONFIDENCE = 0.8
GENERIC_TITLE_CONFIDENCE = 0.3
MIN_OUTLINE_ITEMS = 2


def to_extracted_recipe(
    consolidated: ConsolidatedVisualExtraction,
    frame_count: int,
) -> ExtractedRecipe:
    """Convert a consolidated outline into an ExtractedRecipe (source 'visual').

    Visual extraction never sees quantities, so ``has_quantities`` is False.
    ``has_steps`` needs at least two steps.
    """
    ingredient_count = len(consolidated.ingredients)
    step_count = len(consolidated.cooking_steps)
    is_generic = consolidated.dish_name in GENERIC_DISH_NAMES
    has_ingredients = ingredient_count >= MIN_OUTLINE_ITEMS
    has_steps = step_count >= MIN_OUTLINE_ITEMS

    confidence = ConfidenceScore(
        overall=consolidated.confidence,
        title=GENERIC_TITLE_CONFIDENCE if is_generic else NAMED_TITLE_CONFIDENCE,
        ingredients=min(ingredient_count / 5, 1.0),
        instructions=min(step_count / 4, 1.0),
        has_quantities=False,
        has_steps=has_steps,
        is_complete_recipe=has_ingredients and has_steps,
        reasoning=(
            f"Visual extraction from {frame_count} frames. "
            f"{ingredient_count} ingredients and {step_count} steps identified."
        ),
    )
    return ExtractedRecipe(
        title=consolidated.dish_name,
        description=consolidated.narrative or None,
        ingredients=[Ingredient(raw=name, name=name) for name in consolidated.ingredients],
        instructions=list(consolidated.cooking_steps),
        confidence=confidence,
        source=RecipeSource.VISUAL,
    )


def is_usable(consolidated: ConsolidatedVisualExtraction, frames_analyzed: int) -> bool:
    """Whether a visual result carries enough to be merged into a recipe."""
    return (
        frames_analyzed >= MIN_USABLE_FRAMES
        and bool(consolidated.ingredients or consolidated.cooking_steps)
        and consolidated.confidence >= MIN_USABLE_CONFIDENCE
    )


class VisualExtractor:
    """Runs the three-stage visual pipeline.

    Example:
        ```python
        visual = VisualExtractor(FrameExtractor(), FrameAnalyzer(client), FrameConsolidator(client))
        result = await visual.extract_from_video(content.video_url)
        if result.is_usable:
            ...
        ```
    """

    def __init__(
        self,
        frame_extractor: FrameExtractor,
        analyzer: FrameAnalyzer,
        consolidator: FrameConsolidator,
    ) -> None:
        self.frame_extractor = frame_extractor
        self.analyzer = analyzer
        self.consolidator = consolidator

    async def extract_from_video(self, video_url: str) -> VisualExtractionResult:
        """Extract a recipe from a video.

        Raises:
            FrameExtractionError: If no frames could be sampled.
        """
        logger.info("Starting visual extraction", video_url=video_url)
        sampled = await self.frame_extractor.extract_frames(video_url)
        batch = await self.analyzer.analyze_frames(sampled.frames)
        return await self._finish(
            batch,
            frames_extracted=len(sampled.frames),
            video_duration=sampled.video_duration,
        )

    async def extract_from_images(self, image_urls: Sequence[str]) -> VisualExtractionResult:
        """Extract a recipe from hosted images (slideshows, photo posts).

        Raises:
            VisualExtractionError: If no image URLs were given.
        """
        if not image_urls:
            msg = "No images to analyse"
            raise VisualExtractionError(msg)

        logger.info("Starting image extraction", images=len(image_urls))
        batch = await self.analyzer.analyze_image_urls(image_urls)
        return await self._finish(batch, frames_extracted=len(image_urls))

    async def _finish(
        self,
        batch: FrameAnalysisBatch,
        *,
        frames_extracted: int,
        video_duration: float | None = None,
    ) -> VisualExtractionResult:
        consolidated = await self.consolidator.consolidate(batch.analyses)
        usable = is_usable(consolidated, batch.success_count)

        logger.info(
            "Visual extraction complete",
            dish=consolidated.dish_name,
            frames_extracted=frames_extracted,
            frames_analyzed=batch.success_count,
            confidence=consolidated.confidence,
            usable=usable,
        )
        return VisualExtractionResult(
            recipe=to_extracted_recipe(consolidated, batch.success_count),
            consolidated=consolidated,
            frames_extracted=frames_extracted,
            frames_analyzed=batch.success_count,
            video_duration=video_duration,
            is_usable=usable,
        )
