"""Data passed between the frame sampling, analysis and consolidation stages."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from social_recipe_extractor.schemas.base import DomainModel, FrozenDomainModel
from social_recipe_extractor.schemas.recipe import ExtractedRecipe


class CookingStage(StrEnum):
    """Coarse position of a frame within a cooking video."""

    INTRO = "intro"
    COOKING = "cooking"
    OUTRO = "outro"


class ExtractedFrame(FrozenDomainModel):
    """One sampled video frame as PNG bytes."""

    index: int = Field(ge=0)
    timestamp: float = Field(ge=0.0, description="Seconds from the start")
    data: bytes = Field(repr=False)


class FrameExtractionResult(DomainModel):
    """Frames sampled from one video, in timestamp order."""

    frames: list[ExtractedFrame] = Field(default_factory=list)
    video_duration: float = 0.0
    requested_timestamps: list[float] = Field(default_factory=list)


class FrameAnalysis(FrozenDomainModel):
    """Vision model observations for one frame."""

    frame_index: int = Field(ge=0)
    stage: CookingStage
    ingredients: list[str] = Field(default_factory=list)
    actions: list[str] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)
    food_state: str = "unknown"
    has_text_overlay: bool = False
    observations: str = ""


class FrameAnalysisBatch(DomainModel):
    """Successful analyses sorted by frame index, plus the frames that failed."""

    analyses: list[FrameAnalysis] = Field(default_factory=list)
    failed_indices: list[int] = Field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.analyses)


class ConsolidatedVisualExtraction(DomainModel):
    """A single recipe outline built from all frame analyses."""

    dish_name: str = "Unknown"
    ingredients: list[str] = Field(default_factory=list)
    cooking_steps: list[str] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)
    text_overlays: list[str] = Field(default_factory=list)
    narrative: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class VisualExtractionResult(DomainModel):
    """Outcome of a full visual extraction run."""

    recipe: ExtractedRecipe
    consolidated: ConsolidatedVisualExtraction
    frames_extracted: int = 0
    frames_analyzed: int = 0
    video_duration: float | None = None
    is_usable: bool = False
