"""Merging a text-based recipe with a visual one.

The merge is deterministic and order-sensitive: the primary (text) recipe
always takes precedence, and the secondary (visual) recipe only fills gaps.
"""

from __future__ import annotations

from social_recipe_extractor.schemas.recipe import (
    ConfidenceScore,
    ExtractedRecipe,
    Ingredient,
    RecipeSource,
    utc_timestamp,
)
from social_recipe_extractor.utils.text import word_overlap


TITLE_CONFIDENCE_THRESHOLD = 0.6
INSTRUCTION_SIMILARITY_THRESHOLD = 0.7
PLACEHOLDER_TITLE = "Unknown"
FALLBACK_TITLE = "Unknown Recipe"


def merge_title(primary: ExtractedRecipe, secondary: ExtractedRecipe) -> str:
    """Primary wins outright at title confidence >= 0.6; secondary must beat it."""
    if (
        primary.title
        and primary.title != PLACEHOLDER_TITLE
        and primary.confidence.title >= TITLE_CONFIDENCE_THRESHOLD
    ):
        return primary.title

    if (
        secondary.title
        and secondary.title != PLACEHOLDER_TITLE
        and secondary.confidence.title > primary.confidence.title
    ):
        return secondary.title

    return primary.title or secondary.title or FALLBACK_TITLE


def merge_ingredients(
    primary: list[Ingredient],
    secondary: list[Ingredient],
) -> list[Ingredient]:
    """Primary ingredients in order, then unseen secondary ones, keyed by normalized name."""
    seen: set[str] = set()
    merged: list[Ingredient] = []

    for ingredient in [*primary, *secondary]:
        key = ingredient.normalized_key
        if key not in seen:
            seen.add(key)
            merged.append(ingredient)

    return merged


def merge_instructions(primary: list[str], secondary: list[str]) -> list[str]:
    """Primary steps (exact duplicates dropped), then secondary steps that are new.

    A secondary step is new when it is neither an exact (case-insensitive)
    duplicate nor more than 70% word-overlapping with a kept step.
    """
    seen: list[str] = []
    merged: list[str] = []

    for instruction in primary:
        key = instruction.strip().lower()
        if key and key not in seen:
            seen.append(key)
            merged.append(instruction)

    for instruction in secondary:
        key = instruction.strip().lower()
        if not key or key in seen:
            continue
        if any(
            word_overlap(existing, key) > INSTRUCTION_SIMILARITY_THRESHOLD
            for existing in seen
        ):
            continue
        seen.append(key)
        merged.append(instruction)

    return merged


def merge_confidence(primary: ConfidenceScore, secondary: ConfidenceScore) -> ConfidenceScore:
    """Per-field maximum, flags OR-ed, with a fresh reasoning string."""
    return ConfidenceScore(
        overall=max(primary.overall, secondary.overall),
        title=max(primary.title, secondary.title),
        ingredients=max(primary.ingredients, secondary.ingredients),
        instructions=max(primary.instructions, secondary.instructions),
        has_quantities=primary.has_quantities or secondary.has_quantities,
        has_steps=primary.has_steps or secondary.has_steps,
        is_complete_recipe=primary.is_complete_recipe or secondary.is_complete_recipe,
        reasoning=(
            f"Merged from caption ({primary.overall * 100:.0f}%) "
            f"and visual ({secondary.overall * 100:.0f}%) extraction"
        ),
    )


def merge_recipes(primary: ExtractedRecipe, secondary: ExtractedRecipe) -> ExtractedRecipe:
    """Combine a text recipe (primary) with a visual recipe (secondary).

    Returns:
        A new recipe with ``source='combined'`` and a fresh timestamp.
    """
    return ExtractedRecipe(
        title=merge_title(primary, secondary),
        description=primary.description or secondary.description,
        ingredients=merge_ingredients(primary.ingredients, secondary.ingredients),
        instructions=merge_instructions(primary.instructions, secondary.instructions),
        servings=primary.servings or secondary.servings,
        prep_time=primary.prep_time or secondary.prep_time,
        cook_time=primary.cook_time or secondary.cook_time,
        total_time=primary.total_time or secondary.total_time,
        confidence=merge_confidence(primary.confidence, secondary.confidence),
        source=RecipeSource.COMBINED,
        extraction_timestamp=utc_timestamp(),
    )
