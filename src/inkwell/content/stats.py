"""Word count and reading time, computed on the source body."""

from __future__ import annotations

import math

DEFAULT_WORDS_PER_MINUTE = 200


def word_count(body: str) -> int:
    """Count whitespace-separated tokens."""
    return len(body.split())


def reading_time_minutes(body: str, words_per_minute: int = DEFAULT_WORDS_PER_MINUTE) -> int:
    """Estimated reading time, never less than one minute.

    Raises:
        ValueError: If words_per_minute is not positive
    """
    if words_per_minute <= 0:
        raise ValueError(f"words_per_minute must be positive, got {words_per_minute}")
    return max(1, math.ceil(word_count(body) / words_per_minute))
