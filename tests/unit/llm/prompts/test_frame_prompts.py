"""Unit tests for the frame analysis and consolidation prompts."""

from __future__ import annotations

import pytest

from social_recipe_extractor.llm.prompts.frame_analysis import (
    FrameAnalysisPrompt,
    FrameObservation,
)
from social_recipe_extractor.llm.prompts.frame_consolidation import (
    ConsolidationOutput,
    FrameConsolidationPrompt,
)


pytestmark = pytest.mark.unit


class TestFrameAnalysisPrompt:
    """Tests for FrameAnalysisPrompt."""

    @pytest.mark.parametrize(
        ("stage", "phrase"),
        [
            ("intro", "the beginning"),
            ("cooking", "the main cooking process"),
            ("outro", "the end"),
        ],
    )
    def test_stage_context(self, stage: str, phrase: str) -> None:
        """Should describe where in the video the frame comes from."""
        formatted = FrameAnalysisPrompt().format(stage=stage)

        assert phrase in formatted
        assert '"foodState"' in formatted

    @pytest.mark.parametrize("kwargs", [{}, {"stage": "plating"}])
    def test_rejects_unknown_stage(self, kwargs: dict[str, str]) -> None:
        with pytest.raises(ValueError, match="stage"):
            FrameAnalysisPrompt().format(**kwargs)

    def test_default_options(self) -> None:
        assert FrameAnalysisPrompt().get_options() == {"temperature": 0.2, "max_tokens": 400}


class TestFrameObservation:
    def test_camel_case_keys(self) -> None:
        observation = FrameObservation.model_validate(
            {"ingredients": ["egg"], "foodState": "raw", "hasTextOverlay": True, "extra": 1}
        )

        assert observation.food_state == "raw"
        assert observation.has_text_overlay is True

    def test_defaults(self) -> None:
        observation = FrameObservation()

        assert observation.food_state == "unknown"
        assert observation.observations == ""


class TestFrameConsolidationPrompt:
    def test_embeds_frame_data(self) -> None:
        formatted = FrameConsolidationPrompt().format(frame_data="--- FRAME 1 (intro) ---")

        assert "--- FRAME 1 (intro) ---" in formatted
        assert "dishName" in formatted

    def test_requires_frame_data(self) -> None:
        with pytest.raises(ValueError, match="frame_data"):
            FrameConsolidationPrompt().format()

    def test_output_aliases(self) -> None:
        output = ConsolidationOutput.model_validate(
            {"dishName": "Tacos", "cookingSteps": ["Warm tortillas"], "textOverlays": ["Taco night"]}
        )

        assert output.dish_name == "Tacos"
        assert output.cooking_steps == ["Warm tortillas"]
        assert output.text_overlays == ["Taco night"]

    def test_output_default_dish_name(self) -> None:
        assert ConsolidationOutput().dish_name == "Unknown Dish"
