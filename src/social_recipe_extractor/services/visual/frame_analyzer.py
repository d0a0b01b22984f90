"""Stage B: describe each sampled frame with a vision model.

Frames are analysed in batches of ``max_concurrent`` with a pause between
batches. A frame that still fails after its retries is recorded in
``failed_indices``; it never aborts the rest of the run.

Pacing is per analyzer: there is no rate limiter shared across concurrent
extractions, so staying under the vision API's rate limit under load is only
probabilistic and rests on the retry backoff.
"""

from __future__ import annotations

import asyncio
import base64
import re
from collections.abc import Sequence
from typing import TYPE_CHECKING

import orjson
from pydantic import ValidationError

from social_recipe_extractor.core.config.settings import FrameAnalysisSettings
from social_recipe_extractor.llm.exceptions import LLMError, LLMRateLimitError
from social_recipe_extractor.llm.prompts.frame_analysis import (
    FrameAnalysisPrompt,
    FrameObservation,
)
from social_recipe_extractor.observability.logging import get_logger
from social_recipe_extractor.services.visual.models import (
    CookingStage,
    ExtractedFrame,
    FrameAnalysis,
    FrameAnalysisBatch,
)


if TYPE_CHECKING:
    from social_recipe_extractor.llm.client.protocol import LLMClientProtocol


logger = get_logger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

INTRO_FRACTION = 0.15
OUTRO_FRACTION = 0.8


def stage_for(index: int, total: int) -> CookingStage:
    """Stage of frame ``index`` out of ``total`` by its relative position."""
    position = index / total if total > 0 else 0.0
    if position < INTRO_FRACTION:
        return CookingStage.INTRO
    if position > OUTRO_FRACTION:
        return CookingStage.OUTRO
    return CookingStage.COOKING


def is_rate_limit_error(error: BaseException) -> bool:
    if isinstance(error, LLMRateLimitError):
        return True
    text = str(error).lower()
    return "429" in text or "rate" in text


def frame_data_uri(frame: ExtractedFrame) -> str:
    """Inline a PNG frame as a ``data:`` URI for the vision API."""
    return f"data:image/png;base64,{base64.b64encode(frame.data).decode('ascii')}"


def parse_frame_response(content: str, frame_index: int, stage: CookingStage) -> FrameAnalysis:
    """Build a FrameAnalysis from a free-text vision response.

    The first-to-last brace span is parsed as JSON. If that fails, the
    analysis has empty lists and the raw text as its observations.
    """
    observation: FrameObservation | None = None
    match = _JSON_OBJECT.search(content)
    if match:
        try:
            observation = FrameObservation.model_validate(orjson.loads(match.group()))
        except (orjson.JSONDecodeError, ValidationError) as e:
            logger.debug("Unparseable frame response", frame_index=frame_index, error=str(e))

    if observation is None:
        observation = FrameObservation(observations=content.strip())

    return FrameAnalysis(
        frame_index=frame_index,
        stage=stage,
        ingredients=observation.ingredients,
        actions=observation.actions,
        equipment=observation.equipment,
        food_state=observation.food_state,
        has_text_overlay=observation.has_text_overlay,
        observations=observation.observations,
    )


class FrameAnalyzer:
    """Runs the per-frame vision prompt with bounded concurrency."""

    def __init__(
        self,
        llm_client: LLMClientProtocol,
        settings: FrameAnalysisSettings | None = None,
    ) -> None:
        self.llm_client = llm_client
        self.settings = settings or FrameAnalysisSettings()
        self.prompt = FrameAnalysisPrompt(
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
        )

    async def analyze_frames(self, frames: Sequence[ExtractedFrame]) -> FrameAnalysisBatch:
        """Analyse sampled video frames."""
        return await self._analyze_all([frame_data_uri(frame) for frame in frames])

    async def analyze_image_urls(self, image_urls: Sequence[str]) -> FrameAnalysisBatch:
        """Analyse already-hosted images (photo posts, slideshows)."""
        return await self._analyze_all(list(image_urls))

    async def _analyze_all(self, images: list[str]) -> FrameAnalysisBatch:
        total = len(images)
        batch_size = self.settings.max_concurrent
        analyses: list[FrameAnalysis] = []
        failed: list[int] = []

        for start in range(0, total, batch_size):
            indices = range(start, min(start + batch_size, total))
            results = await asyncio.gather(
                *(self._analyze_with_retry(i, images[i], total) for i in indices),
                return_exceptions=True,
            )
            for index, result in zip(indices, results, strict=True):
                if isinstance(result, BaseException):
                    logger.warning(
                        "Frame analysis failed",
                        frame_index=index,
                        error=str(result),
                    )
                    failed.append(index)
                else:
                    analyses.append(result)

            if start + batch_size < total and self.settings.batch_delay > 0:
                await asyncio.sleep(self.settings.batch_delay)

        analyses.sort(key=lambda analysis: analysis.frame_index)
        logger.info(
            "Frame analysis complete",
            total=total,
            succeeded=len(analyses),
            failed=len(failed),
        )
        return FrameAnalysisBatch(analyses=analyses, failed_indices=failed)

    async def _analyze_with_retry(
        self,
        index: int,
        image_url: str,
        total: int,
    ) -> FrameAnalysis:
        """Analyse one image, backing off exponentially on rate limits.

        Raises:
            LLMError: The last failure once ``retry_attempts`` are spent.
        """
        stage = stage_for(index, total)
        attempts = self.settings.retry_attempts

        for attempt in range(attempts):
            try:
                content = await self.llm_client.describe_image(
                    self.prompt.format(stage=str(stage)),
                    image_url,
                    model=self.settings.model,
                    options=self.prompt.get_options(),
                )
            except LLMError as e:
                if attempt + 1 >= attempts:
                    raise
                if is_rate_limit_error(e):
                    delay = self.settings.retry_delay * (2**attempt)
                else:
                    delay = self.settings.retry_delay
                logger.debug(
                    "Retrying frame analysis",
                    frame_index=index,
                    attempt=attempt + 1,
                    delay=delay,
                    error=str(e),
                )
                await asyncio.sleep(delay)
            else:
                return parse_frame_response(content, index, stage)

        msg = "retry_attempts must be at least 1"
        raise ValueError(msg)
