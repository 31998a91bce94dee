"""
User interface modules package.

Provides:
    - Console display utilities
    - ChunkProgress: progress bar driven by the engine's progress callback
"""

from lingo_engine.ui.display import (
    ChunkProgress,
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "print_info",
    "print_success",
    "print_warning",
    "print_error",
    "ChunkProgress",
]
