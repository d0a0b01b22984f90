"""LLM client implementations."""

from social_recipe_extractor.llm.client.openai import OpenAIClient
from social_recipe_extractor.llm.client.protocol import LLMClientProtocol


__all__ = [
    "LLMClientProtocol",
    "OpenAIClient",
]
