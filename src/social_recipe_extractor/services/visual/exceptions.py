"""Visual extraction exceptions."""

from __future__ import annotations

from social_recipe_extractor.core.exceptions import SocialRecipeError


class VisualExtractionError(SocialRecipeError):
    """Base exception for the visual pipeline."""


class FrameExtractionError(VisualExtractionError):
    """Raised when frames cannot be sampled from a video.

    Attributes:
        video_url: Video that was being sampled.
        cause: Short description of what went wrong.
        is_retryable: Whether the failure looks transient (network, timeout).
    """

    def __init__(
        self,
        video_url: str,
        cause: str,
        *,
        is_retryable: bool = False,
    ) -> None:
        super().__init__(f"Frame extraction failed for {video_url}: {cause}")
        self.video_url = video_url
        self.cause = cause
        self.is_retryable = is_retryable
