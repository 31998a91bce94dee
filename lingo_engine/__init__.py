"""
Lingo Engine - batch localization against a remote translation provider.

This package provides:
    - Size-bounded chunking and sequential batch dispatch with progress
    - Cooperative cancellation across single and fan-out calls
    - Localization of objects, text, chat transcripts and HTML documents
    - A lossless HTML codec addressing content by positional paths
"""

__version__ = "1.0.0"

from lingo_engine.config import EngineConfig
from lingo_engine.engine import LocalizationEngine
from lingo_engine.errors import (
    CancellationError,
    LocalizationError,
    ProviderRequestError,
    ValidationError,
)
from lingo_engine.models import BatchLocalizationParams, ChatMessage, LocalizationParams
from lingo_engine.utils.cancellation import CancellationToken

__all__ = [
    "__version__",
    # Engine
    "LocalizationEngine",
    "EngineConfig",
    # Models
    "LocalizationParams",
    "BatchLocalizationParams",
    "ChatMessage",
    # Cancellation
    "CancellationToken",
    # Errors
    "LocalizationError",
    "CancellationError",
    "ValidationError",
    "ProviderRequestError",
]
