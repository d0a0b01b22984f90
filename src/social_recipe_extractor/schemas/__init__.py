"""Domain schemas shared across services."""

from social_recipe_extractor.schemas.content import (
    AcquiredContent,
    ContentMetadata,
    ContentType,
    Platform,
    ProviderName,
)
from social_recipe_extractor.schemas.recipe import (
    ConfidenceScore,
    ExtractedRecipe,
    Ingredient,
    RecipeSource,
)


__all__ = [
    "AcquiredContent",
    "ConfidenceScore",
    "ContentMetadata",
    "ContentType",
    "ExtractedRecipe",
    "Ingredient",
    "Platform",
    "ProviderName",
    "RecipeSource",
]
