"""Text-to-recipe extraction using a structured-output LLM call."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from social_recipe_extractor.core.config.settings import TextExtractionSettings
from social_recipe_extractor.llm.exceptions import LLMRefusalError, LLMValidationError
from social_recipe_extractor.llm.prompts.recipe_extraction import (
    RecipeExtractionOutput,
    RecipeExtractionPrompt,
)
from social_recipe_extractor.observability.logging import get_logger
from social_recipe_extractor.schemas.recipe import ExtractedRecipe, RecipeSource


if TYPE_CHECKING:
    from social_recipe_extractor.llm.client.protocol import LLMClientProtocol


logger = get_logger(__name__)

_MINUTES = re.compile(r"(\d+(?:\.\d+)?)\s*m(?:in|inute)?s?\b", re.I)
_HOURS = re.compile(r"(\d+(?:\.\d+)?)\s*h(?:(?:ou)?rs?)?", re.I)
_NUMBER = re.compile(r"\d+(?:\.\d+)?")

CONFIDENCE_THRESHOLD = 0.7


def parse_minutes(value: str | None) -> float | None:
    """Parse a duration such as "15 min", "1 hour", "1h 30m" or "20" into minutes.

    Returns None when nothing numeric can be found.
    """
    if not value:
        return None

    hours = _HOURS.search(value)
    minutes = _MINUTES.search(value)
    if hours or minutes:
        total = 0.0
        if hours:
            total += float(hours.group(1)) * 60
        if minutes:
            total += float(minutes.group(1))
        return total

    number = _NUMBER.search(value)
    return float(number.group()) if number else None


def compute_total_time(prep_time: str | None, cook_time: str | None) -> str | None:
    """Sum prep and cook time; None only when neither parses."""
    prep = parse_minutes(prep_time)
    cook = parse_minutes(cook_time)
    if prep is None and cook is None:
        return None
    total = (prep or 0.0) + (cook or 0.0)
    return f"{round(total)} min"


def is_confident(recipe: ExtractedRecipe, threshold: float = CONFIDENCE_THRESHOLD) -> bool:
    """Quick check used by callers that only need a yes/no answer."""
    return (
        recipe.confidence.overall >= threshold
        and recipe.confidence.is_complete_recipe
    )


class RecipeTextExtractor:
    """Turns free text (caption, transcript, description) into a recipe.

    Refusals and missing structured output become an empty, zero-confidence
    recipe. Transport errors (rate limit, network, timeout) propagate.
    """

    def __init__(
        self,
        llm_client: LLMClientProtocol,
        settings: TextExtractionSettings | None = None,
    ) -> None:
        self.llm_client = llm_client
        self.settings = settings or TextExtractionSettings()
        self.prompt = RecipeExtractionPrompt(
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
        )

    async def extract(self, text: str) -> ExtractedRecipe:
        """Extract a recipe from text.

        Args:
            text: Labelled post text.

        Returns:
            ExtractedRecipe with ``source='caption'``.

        Raises:
            LLMError: Transport-level failures other than refusal/validation.
        """
        try:
            output = await self.llm_client.generate_structured(
                prompt=self.prompt.format(text=text),
                schema=RecipeExtractionOutput,
                model=self.settings.model,
                system=self.prompt.system_prompt,
                options=self.prompt.get_options(),
            )
        except LLMRefusalError as e:
            logger.warning("Recipe extraction refused", refusal=e.refusal)
            return ExtractedRecipe.empty(
                RecipeSource.CAPTION, f"API refusal: {e.refusal}"
            )
        except LLMValidationError as e:
            logger.warning("Recipe extraction returned no usable output", error=str(e))
            return ExtractedRecipe.empty(
                RecipeSource.CAPTION, "No parsed content in response"
            )

        recipe = self._to_recipe(output)
        logger.info(
            "Text extraction complete",
            title=recipe.title,
            ingredients=len(recipe.ingredients),
            instructions=len(recipe.instructions),
            overall=recipe.confidence.overall,
        )
        return recipe

    @staticmethod
    def _to_recipe(output: RecipeExtractionOutput) -> ExtractedRecipe:
        return ExtractedRecipe(
            title=output.title.strip(),
            description=output.description,
            ingredients=output.ingredients,
            instructions=[step.strip() for step in output.instructions if step.strip()],
            servings=output.servings,
            prep_time=output.prep_time,
            cook_time=output.cook_time,
            total_time=compute_total_time(output.prep_time, output.cook_time),
            confidence=output.confidence,
            source=RecipeSource.CAPTION,
        )
