"""Vision prompt for describing a single cooking-video frame.

The vision boundary returns free text, so the schema here is used to
validate the JSON object the caller extracts from that text.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from .base import BasePrompt


STAGE_DESCRIPTIONS = {
    "intro": "the beginning (often a preview of the finished dish or a title card)",
    "cooking": "the main cooking process (ingredient prep or cooking action)",
    "outro": "the end (final plating, recipe summary or finished dish)",
}


class FrameObservation(BaseModel):
    """What the model reports seeing in one frame."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ingredients: list[str] = Field(default_factory=list)
    actions: list[str] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)
    food_state: str = Field(default="unknown", alias="foodState")
    has_text_overlay: bool = Field(default=False, alias="hasTextOverlay")
    observations: str = ""


class FrameAnalysisPrompt(BasePrompt[FrameObservation]):
    """Stage-aware prompt scoped strictly to the frame being shown."""

    output_schema: ClassVar[type[BaseModel]] = FrameObservation
    temperature: ClassVar[float] = 0.2
    max_tokens: ClassVar[int | None] = 400

    def format(self, **kwargs: Any) -> str:
        """Format the prompt for one frame.

        Args:
            **kwargs: Must contain 'stage' (intro, cooking or outro).

        Raises:
            ValueError: If 'stage' is missing or unknown.
        """
        stage = kwargs.get("stage")
        if stage not in STAGE_DESCRIPTIONS:
            msg = f"Missing or unknown stage: {stage!r}"
            raise ValueError(msg)

        return f"""You are looking at a single frame from a cooking video. This frame is from {STAGE_DESCRIPTIONS[stage]}.

Describe ONLY what is visible in this frame. Do not guess about other frames.

Respond in JSON:
{{
  "ingredients": ["ingredient 1", "ingredient 2"],
  "actions": ["action being performed"],
  "equipment": ["visible tools or equipment"],
  "foodState": "raw|cooking|cooked|plated",
  "hasTextOverlay": true,
  "observations": "One or two sentences about what is visible"
}}

Guidelines:
- Be specific about ingredients ("chicken breast", not "meat").
- Include quantities only if they are clearly visible.
- Note any on-screen text, labels or measurements.
- If there is no cooking content, return empty lists and say so in observations.

Respond ONLY with valid JSON."""
