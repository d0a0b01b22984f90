"""Recipe extraction: text extraction, confidence scoring, merging and orchestration."""

from social_recipe_extractor.services.extraction.confidence import ConfidenceScorer
from social_recipe_extractor.services.extraction.merge import merge_recipes
from social_recipe_extractor.services.extraction.models import (
    ConfidenceSummary,
    ContentSummary,
    ExtractionResult,
    ExtractionTiming,
    FallbackDecision,
)
from social_recipe_extractor.services.extraction.service import (
    ExtractionService,
    build_extraction_text,
)
from social_recipe_extractor.services.extraction.text_extractor import (
    RecipeTextExtractor,
    compute_total_time,
    is_confident,
)


__all__ = [
    "ConfidenceScorer",
    "ConfidenceSummary",
    "ContentSummary",
    "ExtractionResult",
    "ExtractionService",
    "ExtractionTiming",
    "FallbackDecision",
    "RecipeTextExtractor",
    "build_extraction_text",
    "compute_total_time",
    "is_confident",
    "merge_recipes",
]
