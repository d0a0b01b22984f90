"""Prompt that merges per-frame observations into one recipe outline."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from .base import BasePrompt


class ConsolidationOutput(BaseModel):
    """Output schema for AI frame consolidation."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    dish_name: str = Field(default="Unknown Dish", alias="dishName")
    ingredients: list[str] = Field(default_factory=list)
    cooking_steps: list[str] = Field(default_factory=list, alias="cookingSteps")
    equipment: list[str] = Field(default_factory=list)
    text_overlays: list[str] = Field(default_factory=list, alias="textOverlays")
    narrative: str = ""


class FrameConsolidationPrompt(BasePrompt[ConsolidationOutput]):
    """Prompt for consolidating frame analyses into a single dish."""

    output_schema: ClassVar[type[BaseModel]] = ConsolidationOutput
    temperature: ClassVar[float] = 0.3
    max_tokens: ClassVar[int | None] = 800

    def format(self, **kwargs: Any) -> str:
        """Format the prompt with the labelled frame analyses.

        Args:
            **kwargs: Must contain 'frame_data', the concatenated
                "--- FRAME n (stage) ---" blocks.

        Raises:
            ValueError: If 'frame_data' is missing.
        """
        if "frame_data" not in kwargs:
            msg = "Missing required argument: frame_data"
            raise ValueError(msg)

        return f"""You are combining observations from several frames of one cooking video into a single recipe outline.

Goals:
1. Identify the SPECIFIC dish being made ("Garlic Butter Shrimp Pasta", not "Pasta").
2. List each ingredient only once across all frames, with quantities if they were observed.
3. Turn the observed actions into cooking steps in a logical order.
4. Drop redundant observations.

Frame analyses:
{kwargs["frame_data"]}

Respond in JSON with the keys dishName, ingredients, cookingSteps, equipment,
textOverlays (text seen in the frames) and narrative (a 2-3 sentence summary)."""
