"""
Utility modules package.

Provides:
    - CancellationToken: Cooperative cancellation with child tokens
"""

from lingo_engine.utils.cancellation import CancellationToken, raise_if_cancelled

__all__ = [
    "CancellationToken",
    "raise_if_cancelled",
]
