"""Content providers, in default priority order: Supadata, Apify, legacy."""

from social_recipe_extractor.services.content.providers.apify import ApifyProvider
from social_recipe_extractor.services.content.providers.base import (
    ContentProvider,
    HTTPContentProvider,
)
from social_recipe_extractor.services.content.providers.legacy import LegacyProvider
from social_recipe_extractor.services.content.providers.supadata import (
    SupadataProvider,
)


__all__ = [
    "ApifyProvider",
    "ContentProvider",
    "HTTPContentProvider",
    "LegacyProvider",
    "SupadataProvider",
]
