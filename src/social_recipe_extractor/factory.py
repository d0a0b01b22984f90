"""Wiring of the extraction service from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from social_recipe_extractor.core.config import Settings, get_settings
from social_recipe_extractor.llm.client.openai import OpenAIClient
from social_recipe_extractor.observability.logging import get_logger
from social_recipe_extractor.services.content.providers.apify import ApifyProvider
from social_recipe_extractor.services.content.providers.legacy import LegacyProvider
from social_recipe_extractor.services.content.providers.supadata import (
    SupadataProvider,
)
from social_recipe_extractor.services.content.service import ContentAcquisitionService
from social_recipe_extractor.services.extraction.confidence import ConfidenceScorer
from social_recipe_extractor.services.extraction.service import ExtractionService
from social_recipe_extractor.services.extraction.text_extractor import (
    RecipeTextExtractor,
)
from social_recipe_extractor.services.visual.extractor import VisualExtractor
from social_recipe_extractor.services.visual.frame_analyzer import FrameAnalyzer
from social_recipe_extractor.services.visual.frame_consolidator import FrameConsolidator
from social_recipe_extractor.services.visual.frame_extractor import FrameExtractor


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from social_recipe_extractor.llm.client.protocol import LLMClientProtocol
    from social_recipe_extractor.schemas.content import AcquiredContent


logger = get_logger(__name__)


def create_llm_client(settings: Settings) -> OpenAIClient:
    """OpenAI client configured from ``settings.llm.openai``."""
    openai = settings.llm.openai
    return OpenAIClient(
        api_key=settings.OPENAI_API_KEY,
        model=openai.text_model,
        vision_model=openai.vision_model,
        base_url=openai.url,
        timeout=openai.timeout,
        max_retries=openai.max_retries,
        requests_per_minute=openai.requests_per_minute,
    )


def create_content_service(
    settings: Settings,
    legacy_parser: Callable[[str], Awaitable[AcquiredContent]] | None = None,
) -> ContentAcquisitionService:
    """Acquisition service with providers in priority order: Supadata, then Apify."""
    content = settings.content
    providers = [
        SupadataProvider(settings.SUPADATA_API_KEY, content.supadata),
        ApifyProvider(settings.APIFY_TOKEN, content.apify),
    ]
    legacy = LegacyProvider(legacy_parser) if legacy_parser is not None else None
    service = ContentAcquisitionService(providers, content, legacy_provider=legacy)

    if not service.configured_providers and not service.legacy_enabled:
        logger.warning("No content provider is configured")
    return service


def create_visual_extractor(
    settings: Settings,
    llm_client: LLMClientProtocol,
) -> VisualExtractor:
    visual = settings.visual
    return VisualExtractor(
        FrameExtractor(visual.frames),
        FrameAnalyzer(llm_client, visual.analyzer),
        FrameConsolidator(llm_client, visual.consolidator),
    )


def create_extraction_service(
    settings: Settings | None = None,
    *,
    llm_client: LLMClientProtocol | None = None,
    legacy_parser: Callable[[str], Awaitable[AcquiredContent]] | None = None,
) -> ExtractionService:
    """Build a fully wired ExtractionService.

    Args:
        settings: Settings to use (defaults to ``get_settings()``).
        llm_client: LLM client override, e.g. a test double.
        legacy_parser: Optional ``url -> AcquiredContent`` coroutine used as
            the last-resort provider when ``content.enable_legacy_fallback``
            is set.

    Returns:
        ExtractionService sharing one LLM client between text and visual
        extraction.
    """
    settings = settings or get_settings()
    client = llm_client or create_llm_client(settings)
    extraction = settings.extraction

    return ExtractionService(
        content_service=create_content_service(settings, legacy_parser),
        text_extractor=RecipeTextExtractor(client, extraction.text),
        scorer=ConfidenceScorer(extraction.confidence),
        visual_extractor=create_visual_extractor(settings, client),
        settings=extraction,
    )
