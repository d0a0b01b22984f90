"""Orchestrator result models."""

from __future__ import annotations

from pydantic import Field

from social_recipe_extractor.schemas.base import DomainModel, FrozenDomainModel
from social_recipe_extractor.schemas.content import Platform, ProviderName
from social_recipe_extractor.schemas.recipe import ConfidenceScore, ExtractedRecipe


class FallbackDecision(FrozenDomainModel):
    """Output of the confidence scorer. Computed and consumed within one call."""

    should_fallback: bool
    reason: str
    missing_fields: list[str] = Field(
        default_factory=list,
        description="Fields below threshold, without duplicates",
    )
    score: float = Field(ge=0.0, le=1.0, description="Weighted quality score")


class ContentSummary(DomainModel):
    """Which provider acquired the content and what text it carried."""

    provider: ProviderName
    has_caption: bool
    has_transcript: bool


class ConfidenceSummary(DomainModel):
    """Confidence before and after the optional visual fallback."""

    initial: ConfidenceScore
    final: ConfidenceScore
    fallback_decision: FallbackDecision


class ExtractionTiming(DomainModel):
    """Per-stage wall-clock timings in milliseconds."""

    content_acquisition_ms: int = 0
    caption_extraction_ms: int = 0
    visual_extraction_ms: int | None = None
    total_ms: int = 0


class ExtractionResult(DomainModel):
    """Final recipe plus diagnostics for one extraction call."""

    recipe: ExtractedRecipe
    url: str
    platform: Platform
    used_visual_fallback: bool = False
    content: ContentSummary
    confidence: ConfidenceSummary
    timing: ExtractionTiming
