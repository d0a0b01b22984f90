"""Content acquisition: providers and the failover service."""

from social_recipe_extractor.services.content.exceptions import (
    AggregateAcquisitionError,
    ContentAcquisitionError,
    ProviderFailure,
)
from social_recipe_extractor.services.content.platform import (
    detect_content_type,
    detect_platform,
)
from social_recipe_extractor.services.content.service import (
    ContentAcquisitionService,
    compute_retry_delay,
)


__all__ = [
    "AggregateAcquisitionError",
    "ContentAcquisitionError",
    "ContentAcquisitionService",
    "ProviderFailure",
    "compute_retry_delay",
    "detect_content_type",
    "detect_platform",
]
