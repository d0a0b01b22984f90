"""Visual recipe extraction from video frames and post images."""

from social_recipe_extractor.services.visual.exceptions import (
    FrameExtractionError,
    VisualExtractionError,
)
from social_recipe_extractor.services.visual.extractor import (
    VisualExtractor,
    is_usable,
    to_extracted_recipe,
)
from social_recipe_extractor.services.visual.frame_analyzer import FrameAnalyzer
from social_recipe_extractor.services.visual.frame_consolidator import FrameConsolidator
from social_recipe_extractor.services.visual.frame_extractor import (
    FrameExtractor,
    generate_timestamps,
)
from social_recipe_extractor.services.visual.models import (
    ConsolidatedVisualExtraction,
    CookingStage,
    ExtractedFrame,
    FrameAnalysis,
    FrameAnalysisBatch,
    FrameExtractionResult,
    VisualExtractionResult,
)


__all__ = [
    "ConsolidatedVisualExtraction",
    "CookingStage",
    "ExtractedFrame",
    "FrameAnalysis",
    "FrameAnalysisBatch",
    "FrameAnalyzer",
    "FrameConsolidator",
    "FrameExtractionError",
    "FrameExtractionResult",
    "FrameExtractor",
    "VisualExtractionError",
    "VisualExtractionResult",
    "VisualExtractor",
    "generate_timestamps",
    "is_usable",
    "to_extracted_recipe",
]
