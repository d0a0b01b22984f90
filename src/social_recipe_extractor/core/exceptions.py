"""Root exception type for the extraction core.

Every error raised deliberately by this package derives from
SocialRecipeError so callers can catch the whole family at once.
"""

from __future__ import annotations


class SocialRecipeError(Exception):
    """Base exception for all social recipe extraction errors."""
