"""Observability: structured logging."""

from social_recipe_extractor.observability.logging import (
    bind_context,
    clear_context,
    get_logger,
    logging_context,
    setup_logging,
)


__all__ = [
    "bind_context",
    "clear_context",
    "get_logger",
    "logging_context",
    "setup_logging",
]
