"""Unit tests for merging text and visual recipes."""

from __future__ import annotations

import pytest

from social_recipe_extractor.schemas.recipe import RecipeSource
from social_recipe_extractor.services.extraction.merge import (
    merge_confidence,
    merge_ingredients,
    merge_instructions,
    merge_recipes,
    merge_title,
)
from tests.fixtures.recipes import (
    create_confidence,
    create_ingredient,
    create_recipe,
    create_visual_recipe,
    create_weak_confidence,
)


pytestmark = pytest.mark.unit


class TestMergeTitle:
    """Tests for title selection."""

    def test_keeps_confident_primary(self) -> None:
        """Should keep the primary title at title confidence >= 0.6."""
        primary = create_recipe(title="Pasta", confidence=create_confidence(title=0.6))
        secondary = create_visual_recipe(
            title="Shrimp Pasta", confidence=create_confidence(title=0.9)
        )

        assert merge_title(primary, secondary) == "Pasta"

    def test_secondary_wins_when_more_confident(self) -> None:
        """Should take the secondary title when it beats a weak primary."""
        primary = create_recipe(title="Pasta", confidence=create_confidence(title=0.5))
        secondary = create_visual_recipe(
            title="Shrimp Pasta", confidence=create_confidence(title=0.8)
        )

        assert merge_title(primary, secondary) == "Shrimp Pasta"

    def test_placeholder_primary_is_replaced(self) -> None:
        """Should never keep the literal 'Unknown' when secondary is better."""
        primary = create_recipe(title="Unknown", confidence=create_confidence(title=0.9))
        secondary = create_visual_recipe(
            title="Shrimp Pasta", confidence=create_confidence(title=0.95)
        )

        assert merge_title(primary, secondary) == "Shrimp Pasta"

    def test_equal_confidence_keeps_primary(self) -> None:
        """Should require the secondary to strictly exceed the primary."""
        primary = create_recipe(title="Pasta", confidence=create_confidence(title=0.5))
        secondary = create_visual_recipe(
            title="Shrimp Pasta", confidence=create_confidence(title=0.5)
        )

        assert merge_title(primary, secondary) == "Pasta"

    def test_empty_titles_fall_back(self) -> None:
        """Should use 'Unknown Recipe' when neither side has a title."""
        primary = create_recipe(title="", confidence=create_confidence(title=0.0))
        secondary = create_visual_recipe(title="", confidence=create_confidence(title=0.0))

        assert merge_title(primary, secondary) == "Unknown Recipe"

    def test_empty_primary_uses_secondary(self) -> None:
        """Should fall through to the secondary title when primary is empty."""
        primary = create_recipe(title="", confidence=create_confidence(title=0.9))
        secondary = create_visual_recipe(
            title="Beef Dish", confidence=create_confidence(title=0.3)
        )

        assert merge_title(primary, secondary) == "Beef Dish"


class TestMergeIngredients:
    """Tests for ingredient deduplication."""

    def test_primary_first_then_new_secondary(self) -> None:
        """Should keep primary order and append unseen secondary ingredients."""
        primary = [create_ingredient("2 eggs", "Eggs"), create_ingredient("salt")]
        secondary = [create_ingredient("eggs"), create_ingredient("chives")]

        merged = merge_ingredients(primary, secondary)

        assert [i.raw for i in merged] == ["2 eggs", "salt", "chives"]

    def test_normalizes_whitespace_and_case(self) -> None:
        """Should treat '  Olive   Oil ' and 'olive oil' as the same ingredient."""
        merged = merge_ingredients(
            [create_ingredient("  Olive   Oil ")], [create_ingredient("olive oil")]
        )

        assert len(merged) == 1

    def test_uses_raw_when_name_missing(self) -> None:
        """Should key on raw text when the name is empty."""
        merged = merge_ingredients(
            [create_ingredient("Pinch of salt", name="")],
            [create_ingredient("pinch of salt", name="")],
        )

        assert len(merged) == 1


class TestMergeInstructions:
    """Tests for instruction deduplication."""

    def test_exact_duplicates_dropped(self) -> None:
        """Should drop case/whitespace-insensitive duplicates."""
        merged = merge_instructions(
            ["Boil water", "boil water "], ["BOIL WATER", "Serve hot"]
        )

        assert merged == ["Boil water", "Serve hot"]

    def test_similar_secondary_dropped(self) -> None:
        """Should drop secondary steps with more than 70% word overlap."""
        primary = ["boil the spaghetti until al dente"]
        secondary = ["boil the spaghetti until soft al dente", "plate and garnish"]

        merged = merge_instructions(primary, secondary)

        assert merged == [
            "boil the spaghetti until al dente",
            "plate and garnish",
        ]

    def test_dissimilar_secondary_kept(self) -> None:
        """Should keep secondary steps below the similarity threshold."""
        merged = merge_instructions(["Boil the pasta"], ["Fry the garlic in butter"])

        assert merged == ["Boil the pasta", "Fry the garlic in butter"]


class TestMergeConfidence:
    """Tests for confidence merging."""

    def test_takes_field_maximum(self) -> None:
        """Should take the maximum of every numeric field."""
        primary = create_weak_confidence(overall=0.4, title=0.9, ingredients=0.2)
        secondary = create_confidence(
            overall=0.7, title=0.3, ingredients=0.6, instructions=0.1
        )

        merged = merge_confidence(primary, secondary)

        assert merged.overall == 0.7
        assert merged.title == 0.9
        assert merged.ingredients == 0.6
        assert merged.instructions == 0.2

    def test_flags_are_or_ed(self) -> None:
        """Should OR the boolean flags."""
        primary = create_weak_confidence(has_quantities=True)
        secondary = create_confidence(
            has_quantities=False, has_steps=True, is_complete_recipe=True
        )

        merged = merge_confidence(primary, secondary)

        assert merged.has_quantities is True
        assert merged.has_steps is True
        assert merged.is_complete_recipe is True

    def test_reasoning_cites_both(self) -> None:
        """Should cite both source confidences."""
        merged = merge_confidence(
            create_weak_confidence(overall=0.4), create_confidence(overall=0.75)
        )

        assert merged.reasoning == "Merged from caption (40%) and visual (75%) extraction"

    @pytest.mark.parametrize(
        ("first", "second"),
        [(0.0, 1.0), (0.3, 0.3), (0.9, 0.1), (0.55, 0.56)],
    )
    def test_never_below_inputs(self, first: float, second: float) -> None:
        """Should produce fields >= both inputs."""
        a = create_confidence(
            overall=first, title=second, ingredients=first, instructions=second
        )
        b = create_confidence(
            overall=second, title=first, ingredients=second, instructions=first
        )

        merged = merge_confidence(a, b)

        for field in ("overall", "title", "ingredients", "instructions"):
            assert getattr(merged, field) >= getattr(a, field)
            assert getattr(merged, field) >= getattr(b, field)


class TestMergeRecipes:
    """Tests for full recipe merging."""

    def test_source_is_combined(self) -> None:
        """Should mark the merged recipe as combined."""
        merged = merge_recipes(create_recipe(), create_visual_recipe())

        assert merged.source == RecipeSource.COMBINED

    def test_self_merge_is_idempotent(self) -> None:
        """Should not duplicate anything when a recipe is merged with itself."""
        recipe = create_recipe()

        merged = merge_recipes(recipe, recipe)

        assert len(merged.ingredients) == len(recipe.ingredients)
        assert len(merged.instructions) == len(recipe.instructions)

    def test_fills_gaps_from_secondary(self) -> None:
        """Should take optional fields from the secondary when primary lacks them."""
        primary = create_recipe(
            description=None, servings=None, prep_time=None, cook_time=None, total_time=None
        )
        secondary = create_visual_recipe(servings="4", cook_time="10 min")

        merged = merge_recipes(primary, secondary)

        assert merged.description == secondary.description
        assert merged.servings == "4"
        assert merged.cook_time == "10 min"
        assert merged.prep_time is None

    def test_appends_visual_ingredients(self) -> None:
        """Should append only the ingredients the text recipe lacked."""
        merged = merge_recipes(create_recipe(), create_visual_recipe())

        names = [i.name for i in merged.ingredients]
        assert names == ["spaghetti", "butter", "garlic", "shrimp", "parsley"]

    def test_regenerates_timestamp(self) -> None:
        """Should stamp the merged recipe at merge time."""
        primary = create_recipe(extraction_timestamp="2020-01-01T00:00:00+00:00")

        merged = merge_recipes(primary, create_visual_recipe())

        assert merged.extraction_timestamp != primary.extraction_timestamp
