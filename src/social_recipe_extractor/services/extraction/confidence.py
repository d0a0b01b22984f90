"""Confidence scoring and the fallback decision.

Pure and deterministic: given a ConfidenceScore and the configured
thresholds, compute a weighted quality score and decide whether the more
expensive visual extraction is worth running.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from social_recipe_extractor.core.config.settings import ConfidenceSettings
from social_recipe_extractor.services.extraction.models import FallbackDecision


if TYPE_CHECKING:
    from social_recipe_extractor.schemas.recipe import ConfidenceScore


OVERALL_WEIGHT = 0.4
INGREDIENTS_WEIGHT = 0.3
INSTRUCTIONS_WEIGHT = 0.3
MISSING_FLAG_PENALTY = 0.1


class ConfidenceScorer:
    """Decides whether a text extraction is good enough to stop at."""

    def __init__(self, settings: ConfidenceSettings | None = None) -> None:
        self.settings = settings or ConfidenceSettings()

    def compute_quality_score(self, confidence: ConfidenceScore) -> float:
        """Weighted composite of the confidence report, clamped to [0, 1]."""
        score = (
            OVERALL_WEIGHT * confidence.overall
            + INGREDIENTS_WEIGHT * confidence.ingredients
            + INSTRUCTIONS_WEIGHT * confidence.instructions
        )
        if self.settings.require_quantities and not confidence.has_quantities:
            score -= MISSING_FLAG_PENALTY
        if self.settings.require_steps and not confidence.has_steps:
            score -= MISSING_FLAG_PENALTY
        return min(max(score, 0.0), 1.0)

    def get_missing_fields(self, confidence: ConfidenceScore) -> list[str]:
        """Fields whose confidence is strictly below threshold.

        Title confidence is informational and never checked.
        """
        missing: list[str] = []
        if confidence.overall < self.settings.overall_threshold:
            missing.append("overall")
        if confidence.ingredients < self.settings.ingredient_threshold:
            missing.append("ingredients")
        if confidence.instructions < self.settings.instruction_threshold:
            missing.append("instructions")
        if self.settings.require_quantities and not confidence.has_quantities:
            missing.append("quantities")
        if self.settings.require_steps and not confidence.has_steps:
            missing.append("steps")
        return missing

    def is_complete(self, confidence: ConfidenceScore) -> bool:
        return (
            confidence.is_complete_recipe
            and confidence.overall >= self.settings.overall_threshold
            and not self.get_missing_fields(confidence)
        )

    def evaluate(self, confidence: ConfidenceScore) -> FallbackDecision:
        """Decide whether to escalate to visual extraction.

        ``is_complete`` already accounts for missing fields; the separate
        missing-fields check is kept so the two rules stay independent if
        either changes.
        """
        missing = self.get_missing_fields(confidence)
        score = self.compute_quality_score(confidence)
        should_fallback = not self.is_complete(confidence) or len(missing) > 0

        if not should_fallback:
            reason = "Extraction meets all confidence thresholds"
        elif not confidence.is_complete_recipe:
            reason = "Recipe is not complete enough to follow"
        elif missing:
            reason = f"Weak confidence in: {', '.join(missing)}"
        else:
            reason = f"Quality score {score:.2f} below threshold"

        return FallbackDecision(
            should_fallback=should_fallback,
            reason=reason,
            missing_fields=missing,
            score=score,
        )

    def get_recommendation(self, decision: FallbackDecision) -> str:
        """Human-readable summary of a decision."""
        quality = round(decision.score * 100)

        if not decision.should_fallback:
            return (
                f"Extraction successful (quality: {quality}%). "
                "No additional extraction needed."
            )
        if not decision.missing_fields:
            return (
                f"Extraction incomplete (quality: {quality}%). "
                "Recommend visual extraction for verification."
            )
        return (
            f"Extraction has gaps in {', '.join(decision.missing_fields)} "
            f"(quality: {quality}%). Recommend visual extraction to supplement."
        )
