"""
Error taxonomy for the localization engine.

All errors raised by the engine derive from LocalizationError so callers
can catch a single base class. Unresolvable DOM paths during HTML
re-application are not errors; they are skipped.
"""

from __future__ import annotations

from typing import Optional

LOCALIZATION_ABORTED = "Localization was aborted"
RECOGNITION_ABORTED = "Locale recognition was aborted"


class LocalizationError(Exception):
    """Base class for all engine errors."""
    pass


class CancellationError(LocalizationError):
    """Raised when a call is cancelled through its cancellation token."""

    def __init__(self, message: str = LOCALIZATION_ABORTED) -> None:
        super().__init__(message)


class ValidationError(LocalizationError, ValueError):
    """Raised for malformed configuration, parameters or payloads."""
    pass


class ProviderRequestError(LocalizationError):
    """
    Raised when the provider returns a non-success or malformed response.

    Attributes:
        status_code: HTTP status of the response, if one was received
        body: Raw response body, if available
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
