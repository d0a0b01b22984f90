"""Recipe extraction prompt for turning post text into a structured recipe.

The input is free text assembled from a post (title, caption, transcript,
description). The model returns the recipe plus a self-assessed
confidence report.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, Field, field_validator

from social_recipe_extractor.schemas.base import DomainModel
from social_recipe_extractor.schemas.recipe import ConfidenceScore, Ingredient

from .base import BasePrompt


class RecipeExtractionOutput(DomainModel):
    """Output schema for text-based recipe extraction."""

    title: str = Field(default="", description="Dish name")
    description: str | None = Field(default=None, description="Short description")
    ingredients: list[Ingredient] = Field(
        default_factory=list,
        description="Deduplicated ingredients, most specific mention only",
    )
    instructions: list[str] = Field(
        default_factory=list,
        description="Cooking steps in logical order",
    )
    servings: str | None = Field(default=None, description="Yield, e.g. '4'")
    prep_time: str | None = Field(default=None, description="e.g. '10 min'")
    cook_time: str | None = Field(default=None, description="e.g. '25 min'")
    confidence: ConfidenceScore = Field(
        default_factory=ConfidenceScore,
        description="Honest self-assessment of extraction quality",
    )

    @field_validator("servings", "prep_time", "cook_time", mode="before")
    @classmethod
    def _coerce_to_text(cls, value: object) -> object:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("title", mode="before")
    @classmethod
    def _title_or_blank(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("ingredients", "instructions", mode="before")
    @classmethod
    def _drop_nulls(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, list):
            return [item for item in value if item is not None]
        return value


class RecipeExtractionPrompt(BasePrompt[RecipeExtractionOutput]):
    """Prompt for extracting a recipe from captions and transcripts."""

    output_schema: ClassVar[type[BaseModel]] = RecipeExtractionOutput

    system_prompt: ClassVar[
        str | None
    ] = """You extract structured recipes from social media video captions and transcripts.

TITLE
- Use the dish name mentioned in the content; pick the main dish if several appear.
- If no name is given, derive a plain one from the ingredients (e.g. "Garlic Pasta").

INGREDIENTS
- List every ingredient that is mentioned, with quantity, unit, name and preparation when stated.
- Leave quantity and unit null when they are not stated.
- NEVER list an ingredient twice. When the same ingredient is mentioned more than once
  (e.g. "chicken" in the title and "2 lb boneless chicken thighs" in the body), keep only
  the single most specific mention.

INSTRUCTIONS
- Write the cooking steps in logical order, one complete action per step.
- Keep times, temperatures and techniques that are mentioned.

CONFIDENCE
Rate the extraction honestly.
- overall:
  0.9-1.0 complete recipe with ingredients, quantities and clear steps
  0.7-0.9 good extraction, a few quantities or minor steps missing
  0.5-0.7 partial recipe with notable gaps
  0.3-0.5 minimal content, a few ingredients or vague directions
  0.0-0.3 essentially no recipe content
- title, ingredients, instructions: the same scale per section.
- hasQuantities: true if most ingredients carry quantities.
- hasSteps: true if there is at least one usable instruction.
- isCompleteRecipe: true only if someone could actually cook the dish from your output.
- reasoning: one or two sentences explaining the scores.

RULES
1. Extract only recipe content that is actually present. "Recipe in bio" is not a recipe.
2. Never invent ingredients, quantities or steps that are not in the source.
3. If the text mentions food but contains no recipe, return empty lists with low confidence.
4. Prefer low confidence over fabricated content."""

    temperature: ClassVar[float] = 0.1
    max_tokens: ClassVar[int | None] = 2000

    def format(self, **kwargs: Any) -> str:
        """Format the prompt with the post text.

        Args:
            **kwargs: Must contain 'text'.

        Returns:
            Formatted prompt string.

        Raises:
            ValueError: If 'text' is missing.
        """
        if "text" not in kwargs:
            msg = "Missing required argument: text"
            raise ValueError(msg)

        text = str(kwargs["text"] or "").strip()
        return f"Extract recipe from the following content:\n\n{text or '[Empty content]'}"
