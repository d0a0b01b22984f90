"""Text normalisation and similarity helpers shared by merge and consolidation."""

from __future__ import annotations

import re


_LEADING_ARTICLE = re.compile(r"^(a|an|the|some)\s+")


def normalize_text(value: str) -> str:
    """Lowercase, collapse internal whitespace and trim."""
    return " ".join(value.lower().split())


def strip_leading_article(value: str) -> str:
    """Normalise text and drop one leading article ("a", "an", "the", "some")."""
    return _LEADING_ARTICLE.sub("", normalize_text(value))


def word_overlap(first: str, second: str) -> float:
    """Word-overlap ratio between two strings.

    Shared lowercase words divided by the word count of the longer string.
    Returns 0.0 when either side has no words.
    """
    words_a = set(first.lower().split())
    words_b = set(second.lower().split())
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / max(len(words_a), len(words_b))
