"""
Cooperative cancellation tokens.

A token is checked at well-defined points (before chunk dispatch, before
HTML parsing, around each provider call). Child tokens observe their
parent's cancellation; cancelling a child never affects the parent.
"""

from __future__ import annotations

import threading
from typing import List, Optional

from lingo_engine.errors import LOCALIZATION_ABORTED, CancellationError


class CancellationToken:
    """
    Thread-safe cancellation signal with parent-to-child propagation.

    Example:
        token = CancellationToken()
        child = token.create_child()
        token.cancel()
        assert child.is_cancelled
    """

    def __init__(self, parent: Optional["CancellationToken"] = None) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._children: List[CancellationToken] = []

        if parent is not None:
            parent._register(self)

    def _register(self, child: "CancellationToken") -> None:
        with self._lock:
            self._children.append(child)
            cancelled = self._event.is_set()
        if cancelled:
            child.cancel()

    def create_child(self) -> "CancellationToken":
        """Create a token that is cancelled whenever this one is."""
        return CancellationToken(parent=self)

    def cancel(self) -> None:
        """Cancel this token and every token derived from it."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            children = list(self._children)

        for child in children:
            child.cancel()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, message: str = LOCALIZATION_ABORTED) -> None:
        """Raise CancellationError if the token has been cancelled."""
        if self._event.is_set():
            raise CancellationError(message)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or the timeout expires."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled})"


def raise_if_cancelled(
    token: Optional[CancellationToken],
    message: str = LOCALIZATION_ABORTED,
) -> None:
    """Check an optional token."""
    if token is not None:
        token.raise_if_cancelled(message)
