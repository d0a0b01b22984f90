"""LLM prompt templates."""

from social_recipe_extractor.llm.prompts.base import BasePrompt
from social_recipe_extractor.llm.prompts.frame_analysis import (
    FrameAnalysisPrompt,
    FrameObservation,
)
from social_recipe_extractor.llm.prompts.frame_consolidation import (
    ConsolidationOutput,
    FrameConsolidationPrompt,
)
from social_recipe_extractor.llm.prompts.recipe_extraction import (
    RecipeExtractionOutput,
    RecipeExtractionPrompt,
)


__all__ = [
    "BasePrompt",
    "ConsolidationOutput",
    "FrameAnalysisPrompt",
    "FrameConsolidationPrompt",
    "FrameObservation",
    "RecipeExtractionOutput",
    "RecipeExtractionPrompt",
]
