"""Generative-AI boundary.

Provides an OpenAI-compatible client for structured text extraction and
single-image vision prompts, plus the prompt templates used by the
extraction pipeline.
"""

from social_recipe_extractor.llm.client.openai import OpenAIClient
from social_recipe_extractor.llm.client.protocol import LLMClientProtocol
from social_recipe_extractor.llm.exceptions import (
    LLMConfigurationError,
    LLMError,
    LLMRateLimitError,
    LLMRefusalError,
    LLMResponseError,
    LLMTimeoutError,
    LLMUnavailableError,
    LLMValidationError,
)
from social_recipe_extractor.llm.models import LLMCompletionResult
from social_recipe_extractor.llm.prompts.base import BasePrompt


__all__ = [
    "BasePrompt",
    "LLMClientProtocol",
    "LLMCompletionResult",
    "LLMConfigurationError",
    "LLMError",
    "LLMRateLimitError",
    "LLMRefusalError",
    "LLMResponseError",
    "LLMTimeoutError",
    "LLMUnavailableError",
    "LLMValidationError",
    "OpenAIClient",
]
