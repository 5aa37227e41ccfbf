"""
Text utilities for catalog search.

Products are searched by prefix against a stored keyword array, so typing
"sho" matches "Shoe" without a full-text engine. This module builds that
array.
"""

from typing import Iterable, Optional

# Keywords longer than this are never stored
MAX_KEYWORD_LENGTH = 50


def word_prefixes(word: str, max_length: Optional[int] = None) -> list[str]:
    """
    All non-empty prefixes of a word, shortest first.

    Args:
        word: Single word (no whitespace)
        max_length: Longest prefix to emit (capped at MAX_KEYWORD_LENGTH)

    Returns:
        e.g. "shoe" -> ["s", "sh", "sho", "shoe"]
    """
    limit = MAX_KEYWORD_LENGTH if max_length is None else min(max_length, MAX_KEYWORD_LENGTH)
    return [word[:i] for i in range(1, min(len(word), limit) + 1)]


def index_keywords(
    candidates: Iterable[Optional[str]],
    max_prefix_length: Optional[int] = None,
) -> list[str]:
    """
    Build a prefix keyword index from candidate strings.

    None candidates are skipped. Each candidate is lower-cased and split on
    whitespace; every prefix of every word is emitted once.

    Args:
        candidates: Strings to index (None allowed)
        max_prefix_length: Tighter prefix cap for field-level indexing

    Returns:
        Sorted, deduplicated keywords (1-50 characters each)
    """
    keywords: set[str] = set()

    for candidate in candidates:
        if candidate is None:
            continue
        for word in str(candidate).lower().split():
            keywords.update(word_prefixes(word, max_prefix_length))

    return sorted(keywords)


def clean_cell(value: object) -> str:
    """
    Normalize a raw spreadsheet cell to a stripped string.

    None and NaN become "".
    """
    if value is None:
        return ""
    # NaN is the only value not equal to itself
    if isinstance(value, float) and value != value:
        return ""
    return str(value).strip()
