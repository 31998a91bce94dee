"""
HTML codec package.

Provides:
    - DomPath: Positional node addressing
    - DocumentSnapshot: Immutable arena of filtered document nodes
    - DocumentExtractor: Extraction and re-application of localizable content
"""

from lingo_engine.html.dom_path import DomPath
from lingo_engine.html.extractor import DocumentExtractor, extract_localizable_content
from lingo_engine.html.snapshot import DocumentSnapshot, SnapshotNode

__all__ = [
    "DomPath",
    "DocumentSnapshot",
    "SnapshotNode",
    "DocumentExtractor",
    "extract_localizable_content",
]
