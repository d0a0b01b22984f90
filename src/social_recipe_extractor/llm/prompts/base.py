"""Base class for LLM prompts.

Provides a standardized interface for defining prompts with:
- Typed input variables
- Structured output schemas
- Model options, overridable per instance from configuration
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class BasePrompt(ABC, Generic[T]):
    """Base class for all LLM prompts.

    Example:
        ```python
        class DishNamePrompt(BasePrompt[DishName]):
            output_schema = DishName
            system_prompt = "You name dishes."

            def format(self, **kwargs: Any) -> str:
                return f"Name this dish:\\n\\n{kwargs['text']}"
        ```
    """

    output_schema: ClassVar[type[BaseModel]]
    """Pydantic model for structured output validation."""

    system_prompt: ClassVar[str | None] = None
    """Optional system prompt to set context for the LLM."""

    temperature: ClassVar[float] = 0.1
    """Default temperature for generation."""

    max_tokens: ClassVar[int | None] = None
    """Default maximum tokens to generate (None = model default)."""

    def __init__(
        self,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> None:
        self._temperature = self.temperature if temperature is None else temperature
        self._max_tokens = self.max_tokens if max_tokens is None else max_tokens

    @abstractmethod
    def format(self, **kwargs: Any) -> str:
        """Format the prompt template with input variables.

        Raises:
            ValueError: If required variables are missing.
        """
        ...

    @property
    def name(self) -> str:
        """Prompt identifier for logging."""
        return self.__class__.__name__

    def get_options(self) -> dict[str, Any]:
        """Get model options for this prompt.

        Returns:
            Dict of options to pass to the LLM client.
        """
        options: dict[str, Any] = {"temperature": self._temperature}
        if self._max_tokens is not None:
            options["max_tokens"] = self._max_tokens
        return options
