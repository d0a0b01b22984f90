"""Application configuration using Pydantic Settings with YAML support.

Configuration is layered, resolved once, and handed to each component at
construction time:
- YAML files organized by domain (config/base/)
- Environment-specific overrides (config/environments/{APP_ENV}/)
- Environment variables for secrets and ad-hoc overrides
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_source import MultiYamlConfigSettingsSource


if TYPE_CHECKING:
    from pydantic_settings import PydanticBaseSettingsSource


# =============================================================================
# Nested Configuration Models (from YAML)
# =============================================================================


class AppSettings(BaseModel):
    """Application identity settings."""

    name: str = "Social Recipe Extractor"
    version: str = "0.1.0"
    debug: bool = False


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "json"
    file: str | None = None


class OpenAISettings(BaseModel):
    """OpenAI-compatible chat completions service configuration."""

    url: str = "https://api.openai.com/v1"
    text_model: str = "gpt-4o-mini"
    vision_model: str = "gpt-4o-mini"
    timeout: float = 30.0
    max_retries: int = 2
    requests_per_minute: float = 500.0


class LLMSettings(BaseModel):
    """LLM configuration settings."""

    openai: OpenAISettings = OpenAISettings()


class SupadataSettings(BaseModel):
    """Supadata metadata + transcript API configuration."""

    enabled: bool = True
    url: str = "https://api.supadata.ai/v1"
    timeout: float = 30.0
    max_poll_attempts: int = 60
    poll_interval: float = 1.0


class ApifySettings(BaseModel):
    """Apify scraping actor API configuration."""

    enabled: bool = True
    url: str = "https://api.apify.com/v2"
    timeout: float = 30.0
    max_wait_time: float = 60.0
    poll_interval: float = 2.0
    tiktok_actor: str = "clockworks~tiktok-scraper"
    instagram_actor: str = "apify~instagram-reel-scraper"


class ContentAcquisitionSettings(BaseModel):
    """Provider failover and retry configuration."""

    max_retries: int = Field(default=3, ge=0)
    base_retry_delay: float = Field(default=1.0, ge=0.0)  # seconds
    max_retry_delay: float = Field(default=10.0, ge=0.0)  # seconds
    retry_jitter: float = Field(default=0.2, ge=0.0, le=1.0)
    enable_legacy_fallback: bool = False
    supadata: SupadataSettings = SupadataSettings()
    apify: ApifySettings = ApifySettings()


class ConfidenceSettings(BaseModel):
    """Thresholds used by the confidence scorer."""

    overall_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    ingredient_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    instruction_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    require_quantities: bool = False
    require_steps: bool = True


class TextExtractionSettings(BaseModel):
    """Text-to-recipe extractor configuration."""

    model: str | None = None  # None = client default
    temperature: float = 0.1
    max_tokens: int = 2000


class ExtractionSettings(BaseModel):
    """Orchestrator configuration."""

    enable_visual_fallback: bool = True
    confidence: ConfidenceSettings = ConfidenceSettings()
    text: TextExtractionSettings = TextExtractionSettings()


class FrameSamplingSettings(BaseModel):
    """Frame sampling (stage A) configuration."""

    max_frames: int = Field(default=8, ge=1)
    min_frame_size: int = 1000  # bytes
    download_timeout: float = 300.0
    probe_timeout: float = 30.0
    frame_timeout: float = 30.0
    default_duration: float = 60.0
    temp_dir: str | None = None
    yt_dlp_path: str = "yt-dlp"
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"


class FrameAnalysisSettings(BaseModel):
    """Per-frame vision analysis (stage B) configuration."""

    model: str | None = None
    max_concurrent: int = Field(default=3, ge=1)
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay: float = 2.0
    batch_delay: float = 1.0
    max_tokens: int = 400
    temperature: float = 0.2


class FrameConsolidationSettings(BaseModel):
    """Consolidation (stage C) configuration."""

    model: str | None = None
    max_tokens: int = 800
    temperature: float = 0.3


class VisualSettings(BaseModel):
    """Visual extraction pipeline configuration."""

    frames: FrameSamplingSettings = FrameSamplingSettings()
    analyzer: FrameAnalysisSettings = FrameAnalysisSettings()
    consolidator: FrameConsolidationSettings = FrameConsolidationSettings()


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """Application settings with YAML + environment variable support.

    Configuration is loaded from multiple sources with the following priority
    (highest to lowest):
    1. Environment variables
    2. .env file (secrets only)
    3. Environment-specific YAML files (config/environments/{APP_ENV}/)
    4. Base YAML files (config/base/)
    5. Default values in code

    Environment variables can override any setting using the nested delimiter '__'.
    For example: CONTENT__MAX_RETRIES=5 overrides content.max_retries.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    APP_ENV: str = "development"

    app: AppSettings = AppSettings()
    logging: LoggingSettings = LoggingSettings()
    llm: LLMSettings = LLMSettings()
    content: ContentAcquisitionSettings = ContentAcquisitionSettings()
    extraction: ExtractionSettings = ExtractionSettings()
    visual: VisualSettings = VisualSettings()

    # Secrets (from .env only - never in YAML)
    OPENAI_API_KEY: str = ""
    SUPADATA_API_KEY: str = ""
    APIFY_TOKEN: str = ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings loading order.

        Priority (highest to lowest): init kwargs, environment, .env,
        YAML (base + environment), file secrets.
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            MultiYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.APP_ENV == "development"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.APP_ENV == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance (cached after first call).
    """
    return Settings()
