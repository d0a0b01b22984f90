"""Base schema configuration for domain models.

Domain models serialize to camelCase (``isCompleteRecipe``,
``extractionTimestamp``) while Python code uses snake_case attributes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DomainModel(BaseModel):
    """Base class for mutable domain models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,  # Accept both snake_case and camelCase
        validate_default=True,
        serialize_by_alias=True,
        extra="ignore",
    )


class FrozenDomainModel(DomainModel):
    """Base class for immutable domain models.

    Instances cannot be modified after construction; derive new values with
    ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)
