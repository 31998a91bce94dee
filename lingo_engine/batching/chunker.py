"""
Payload chunking for batched localization.

Splits a flat payload into an ordered sequence of sub-payloads bounded by
item count and a word-count heuristic. Concatenating the chunks in order
always reconstructs the original payload.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from lingo_engine.errors import ValidationError

logger = logging.getLogger(__name__)


def count_words(value: Any) -> int:
    """
    Count whitespace-separated words in a value.

    Strings are split on whitespace runs; lists, tuples and mappings are
    counted recursively. Any other value contributes zero.

    Example:
        >>> count_words({"a": "hello world", "b": ["foo", "bar baz"]})
        5
    """
    if isinstance(value, str):
        return len(value.split())
    if isinstance(value, Mapping):
        return sum(count_words(item) for item in value.values())
    if isinstance(value, (list, tuple)):
        return sum(count_words(item) for item in value)
    return 0


class PayloadChunker:
    """
    Split payloads into size-bounded chunks.

    A chunk is closed as soon as its word count exceeds
    ``ideal_word_size``, it holds ``max_items`` entries, or the last
    payload entry has been added. An oversized single entry therefore
    still travels in a chunk of its own.
    """

    def __init__(self, max_items: int, ideal_word_size: int) -> None:
        """
        Initialize chunker.

        Args:
            max_items: Maximum number of entries per chunk
            ideal_word_size: Word count above which a chunk is closed
        """
        if max_items < 1:
            raise ValidationError(f"max_items must be positive, got {max_items}")
        if ideal_word_size < 1:
            raise ValidationError(f"ideal_word_size must be positive, got {ideal_word_size}")

        self._max_items = max_items
        self._ideal_word_size = ideal_word_size

    def chunk(self, payload: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """
        Split a payload into chunks.

        Args:
            payload: Flat key -> value mapping, in dispatch order

        Returns:
            Ordered list of chunks; empty for an empty payload
        """
        chunks: List[Dict[str, Any]] = []
        current: Dict[str, Any] = {}

        entries = list(payload.items())
        last_index = len(entries) - 1

        for i, (key, value) in enumerate(entries):
            current[key] = value

            if (
                count_words(current) > self._ideal_word_size
                or len(current) >= self._max_items
                or i == last_index
            ):
                chunks.append(current)
                current = {}

        logger.debug(f"Split {len(entries)} entries into {len(chunks)} chunks")
        return chunks


def chunk_payload(
    payload: Mapping[str, Any],
    max_items: int,
    ideal_word_size: int,
) -> List[Dict[str, Any]]:
    """Split a payload into chunks; see PayloadChunker."""
    return PayloadChunker(max_items, ideal_word_size).chunk(payload)
