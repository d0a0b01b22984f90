"""Shared test fixtures for the social recipe extractor tests."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any
from unittest.mock import AsyncMock

import pytest

from social_recipe_extractor.core.config import get_settings
from social_recipe_extractor.llm.client.protocol import LLMClientProtocol


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    """Settings are cached process-wide; reset them around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_llm_client() -> Any:
    """LLM client double with every protocol method as an AsyncMock."""
    client = AsyncMock(spec=LLMClientProtocol)
    client.generate_structured = AsyncMock()
    client.describe_image = AsyncMock()
    client.generate = AsyncMock()
    return client
