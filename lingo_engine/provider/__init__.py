"""
Provider client package.

Provides:
    - ProviderClient: HTTP client for the localization provider
"""

from lingo_engine.provider.client import ProviderClient

__all__ = [
    "ProviderClient",
]
