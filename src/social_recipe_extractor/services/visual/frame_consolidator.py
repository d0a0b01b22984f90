"""Stage C: merge per-frame analyses into one recipe outline.

A deterministic pass deduplicates ingredients, equipment and actions. When
there is enough material, an LLM call then turns the frames into a
coherent outline; if that call fails the deterministic result is used.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from social_recipe_extractor.core.config.settings import FrameConsolidationSettings
from social_recipe_extractor.llm.exceptions import LLMError
from social_recipe_extractor.llm.prompts.frame_consolidation import (
    ConsolidationOutput,
    FrameConsolidationPrompt,
)
from social_recipe_extractor.observability.logging import get_logger
from social_recipe_extractor.services.visual.models import (
    ConsolidatedVisualExtraction,
    FrameAnalysis,
)
from social_recipe_extractor.utils.text import strip_leading_article, word_overlap


if TYPE_CHECKING:
    from social_recipe_extractor.llm.client.protocol import LLMClientProtocol


logger = get_logger(__name__)

ACTION_SIMILARITY_THRESHOLD = 0.6
SPARSE_CONFIDENCE = 0.4
FALLBACK_CONFIDENCE = 0.5
GENERIC_DISH_NAMES = frozenset({"Unknown", "Unknown Dish", "Cooking Recipe"})
NO_COOKING_MARKER = "no cooking"
REFERENCE_FRAME_COUNT = 8


def is_valid_analysis(analysis: FrameAnalysis) -> bool:
    """A frame counts if it saw ingredients or actions, or describes cooking."""
    if analysis.ingredients or analysis.actions:
        return True
    observations = analysis.observations.strip().lower()
    return bool(observations) and NO_COOKING_MARKER not in observations


def infer_dish_name(ingredients: Sequence[str]) -> str:
    """Best-effort dish name from ingredient keywords."""
    text = " ".join(ingredients).lower()

    if "pasta" in text or "noodle" in text:
        if "shrimp" in text:
            return "Shrimp Pasta"
        if "chicken" in text:
            return "Chicken Pasta"
        return "Pasta Dish"
    if "rice" in text:
        if "fried" in text or "egg" in text or "soy" in text:
            return "Fried Rice"
        return "Rice Dish"
    if "steak" in text or "beef" in text:
        return "Beef Dish"
    return "Cooking Recipe"


def format_frame_data(analyses: Sequence[FrameAnalysis]) -> str:
    """Render analyses as labelled blocks for the consolidation prompt."""
    blocks = [
        f"--- FRAME {position} ({analysis.stage}) ---\n"
        f"Ingredients: {', '.join(analysis.ingredients) or 'none visible'}\n"
        f"Actions: {', '.join(analysis.actions) or 'none observed'}\n"
        f"Equipment: {', '.join(analysis.equipment) or 'none visible'}\n"
        f"Food State: {analysis.food_state}\n"
        f"Observations: {analysis.observations}"
        for position, analysis in enumerate(analyses, start=1)
    ]
    return "\n\n".join(blocks)


class FrameConsolidator:
    """Turns frame analyses into a ConsolidatedVisualExtraction."""

    def __init__(
        self,
        llm_client: LLMClientProtocol,
        settings: FrameConsolidationSettings | None = None,
    ) -> None:
        self.llm_client = llm_client
        self.settings = settings or FrameConsolidationSettings()
        self.prompt = FrameConsolidationPrompt(
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
        )

    async def consolidate(
        self, analyses: Sequence[FrameAnalysis]
    ) -> ConsolidatedVisualExtraction:
        """Consolidate analyses.

        Returns:
            - ``dish_name='Unknown'`` at confidence 0 when no frame shows cooking
            - the deterministic result at 0.4 when it has fewer than two
              ingredients and fewer than two steps
            - the LLM result with a computed confidence
            - the deterministic result at 0.5 when the LLM call fails
        """
        valid = [analysis for analysis in analyses if is_valid_analysis(analysis)]
        if not valid:
            return ConsolidatedVisualExtraction(
                dish_name="Unknown",
                narrative="No cooking content detected in video frames",
                confidence=0.0,
            )

        simple = self.simple_consolidate(valid)
        if len(simple.ingredients) < 2 and len(simple.cooking_steps) < 2:
            return simple.model_copy(update={"confidence": SPARSE_CONFIDENCE})

        try:
            output = await self.llm_client.generate_structured(
                prompt=self.prompt.format(frame_data=format_frame_data(valid)),
                schema=ConsolidationOutput,
                model=self.settings.model,
                options=self.prompt.get_options(),
            )
        except LLMError as e:
            logger.warning("AI consolidation failed, using simple result", error=str(e))
            return simple.model_copy(update={"confidence": FALLBACK_CONFIDENCE})

        result = ConsolidatedVisualExtraction(
            dish_name=output.dish_name.strip() or simple.dish_name,
            ingredients=output.ingredients,
            cooking_steps=output.cooking_steps,
            equipment=output.equipment,
            text_overlays=output.text_overlays,
            narrative=output.narrative or simple.narrative,
        )
        return result.model_copy(
            update={"confidence": self.score(result, len(valid))}
        )

    @staticmethod
    def simple_consolidate(
        analyses: Sequence[FrameAnalysis],
    ) -> ConsolidatedVisualExtraction:
        """Deterministic consolidation with no model call (confidence left at 0)."""
        ingredients: list[str] = []
        equipment: list[str] = []
        steps: list[str] = []
        text_overlays: list[str] = []

        for analysis in analyses:
            for raw in analysis.ingredients:
                name = strip_leading_article(raw)
                if name and name not in ingredients:
                    ingredients.append(name)
            for raw in analysis.equipment:
                tool = raw.strip().lower()
                if tool and tool not in equipment:
                    equipment.append(tool)
            for action in analysis.actions:
                step = action.strip()
                if not step:
                    continue
                if steps and word_overlap(steps[-1], step) > ACTION_SIMILARITY_THRESHOLD:
                    continue
                steps.append(step)
            if analysis.has_text_overlay and analysis.observations:
                text_overlays.append(analysis.observations)

        dish_name = infer_dish_name(ingredients)
        narrative = (
            f"{dish_name}\n\n"
            f"Ingredients observed: {', '.join(ingredients)}\n\n"
            f"Steps: {'. '.join(steps)}"
        )
        return ConsolidatedVisualExtraction(
            dish_name=dish_name,
            ingredients=ingredients,
            cooking_steps=steps,
            equipment=equipment,
            text_overlays=text_overlays,
            narrative=narrative,
        )

    @staticmethod
    def score(result: ConsolidatedVisualExtraction, frame_count: int) -> float:
        """Confidence for an LLM consolidation, in [0.5, 1.0]."""
        confidence = 0.5
        if len(result.ingredients) >= 3:
            confidence += 0.15
        if len(result.ingredients) >= 5:
            confidence += 0.1
        if len(result.cooking_steps) >= 3:
            confidence += 0.1
        if result.dish_name not in GENERIC_DISH_NAMES:
            confidence += 0.1
        confidence += min(frame_count / REFERENCE_FRAME_COUNT, 1.0) * 0.1
        return min(confidence, 1.0)
