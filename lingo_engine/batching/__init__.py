"""
Batching package.

Provides:
    - PayloadChunker, chunk_payload, count_words: Size-bounded chunking
    - BatchOrchestrator: Sequential chunk dispatch with progress
"""

from lingo_engine.batching.chunker import PayloadChunker, chunk_payload, count_words
from lingo_engine.batching.orchestrator import BatchOrchestrator

__all__ = [
    "PayloadChunker",
    "chunk_payload",
    "count_words",
    "BatchOrchestrator",
]
