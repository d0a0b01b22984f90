"""Recipe extraction output schemas.

ExtractedRecipe is the canonical output unit of every extraction strategy.
ConfidenceScore is the model's self-assessment; it is frozen so merges
always build a new score rather than editing an existing one.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator, model_validator

from social_recipe_extractor.schemas.base import DomainModel, FrozenDomainModel
from social_recipe_extractor.utils.text import normalize_text


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(UTC).isoformat()


_FRACTION = re.compile(r"^(?:(\d+)\s+)?(\d+)\s*/\s*(\d+)$")
_VULGAR_FRACTIONS = {
    "\u00bc": 0.25,
    "\u00bd": 0.5,
    "\u00be": 0.75,
    "\u2153": 1 / 3,
    "\u2154": 2 / 3,
}


def parse_quantity(value: object) -> float | None:
    """Read a model-reported quantity: numbers, "1/2", "1 1/2" or "\u00bd".

    Anything else (ranges, words, booleans) becomes None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text in _VULGAR_FRACTIONS:
        return _VULGAR_FRACTIONS[text]
    if text[:-1].isdigit() and text[-1:] in _VULGAR_FRACTIONS:
        return int(text[:-1]) + _VULGAR_FRACTIONS[text[-1]]
    try:
        return float(text)
    except ValueError:
        pass

    match = _FRACTION.match(text)
    if match is None or int(match.group(3)) == 0:
        return None
    whole, numerator, denominator = match.groups()
    return int(whole or 0) + int(numerator) / int(denominator)


class RecipeSource(StrEnum):
    """Strategy that produced an ExtractedRecipe."""

    CAPTION = "caption"
    TRANSCRIPT = "transcript"
    VISUAL = "visual"
    COMBINED = "combined"


class Ingredient(DomainModel):
    """A single ingredient line."""

    raw: str = Field(description="Original ingredient text")
    quantity: float | None = Field(default=None, description="Numeric quantity")
    unit: str | None = Field(default=None, description="Unit of measurement")
    name: str = Field(default="", description="Ingredient name")
    preparation: str | None = Field(
        default=None, description="Preparation, e.g. 'diced'"
    )
    notes: str | None = Field(default=None, description="Additional notes")

    @model_validator(mode="before")
    @classmethod
    def _fill_raw(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"raw": data, "name": data}
        if isinstance(data, dict) and data.get("raw") is None:
            return {**data, "raw": data.get("name") or ""}
        return data

    @field_validator("quantity", mode="before")
    @classmethod
    def _parse_quantity(cls, value: object) -> float | None:
        return parse_quantity(value)

    @field_validator("name", mode="before")
    @classmethod
    def _name_or_blank(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("unit", "preparation", "notes", mode="before")
    @classmethod
    def _coerce_to_text(cls, value: object) -> object:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def normalized_key(self) -> str:
        """Deduplication key: normalized name, or raw text if name is empty."""
        return normalize_text(self.name if self.name.strip() else self.raw)


class ConfidenceScore(FrozenDomainModel):
    """Self-reported extraction quality."""

    overall: float = Field(default=0.0, ge=0.0, le=1.0)
    title: float = Field(default=0.0, ge=0.0, le=1.0)
    ingredients: float = Field(default=0.0, ge=0.0, le=1.0)
    instructions: float = Field(default=0.0, ge=0.0, le=1.0)
    has_quantities: bool = False
    has_steps: bool = False
    is_complete_recipe: bool = False
    reasoning: str = ""

    @field_validator("overall", "title", "ingredients", "instructions", mode="before")
    @classmethod
    def _clamp_unit_interval(cls, value: object) -> object:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return min(max(float(value), 0.0), 1.0)
        return value

    @classmethod
    def empty(cls, reasoning: str) -> ConfidenceScore:
        """Zero confidence with an explanation."""
        return cls(reasoning=reasoning)


class ExtractedRecipe(DomainModel):
    """A structured recipe produced by one strategy or by merging two."""

    title: str = ""
    description: str | None = None
    ingredients: list[Ingredient] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    servings: str | None = None
    prep_time: str | None = None
    cook_time: str | None = None
    total_time: str | None = None
    confidence: ConfidenceScore = Field(default_factory=ConfidenceScore)
    source: RecipeSource = RecipeSource.CAPTION
    extraction_timestamp: str = Field(default_factory=utc_timestamp)

    @classmethod
    def empty(cls, source: RecipeSource, reasoning: str) -> ExtractedRecipe:
        """Recipe with no content and zero confidence."""
        return cls(source=source, confidence=ConfidenceScore.empty(reasoning))
