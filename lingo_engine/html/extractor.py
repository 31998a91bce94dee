"""
Extraction and re-application of localizable HTML content.

Flattens a document's visible text and localizable attributes into a
DomPath-keyed payload, and writes translated values back into the same
positions of the same document.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from bs4 import BeautifulSoup
from bs4.element import PageElement

from lingo_engine.html.dom_path import ROOT_TAGS, DomPath
from lingo_engine.html.snapshot import DocumentSnapshot, SnapshotNode

logger = logging.getLogger(__name__)

# Attributes whose values are user-facing text, by tag name
LOCALIZABLE_ATTRIBUTES: Dict[str, tuple] = {
    "meta": ("content",),
    "img": ("alt",),
    "input": ("placeholder",),
    "a": ("title",),
}

# Subtrees that never contain localizable content
UNLOCALIZABLE_TAGS = frozenset({"script", "style"})

DEFAULT_PARSER = "lxml"


def _split_whitespace(text: str) -> tuple:
    """Return the (leading, trailing) whitespace of a string."""
    stripped = text.strip()
    if not stripped:
        return text, ""
    start = text.index(stripped)
    return text[:start], text[start + len(stripped):]


class DocumentExtractor:
    """
    Localizable-content codec for one HTML document.

    The document is parsed once, snapshotted, and the snapshot is used for
    both extract() and apply(). Keys produced by extract() are DomPath
    strings; apply() silently skips keys it cannot resolve.
    """

    def __init__(self, html: str, parser: str = DEFAULT_PARSER) -> None:
        """
        Parse a document.

        Args:
            html: Full HTML document text
            parser: BeautifulSoup tree builder name
        """
        self._soup = BeautifulSoup(html, parser)
        self._snapshot = DocumentSnapshot.build(self._soup)
        # Text nodes already replaced by apply(), by snapshot index
        self._replaced: Dict[int, PageElement] = {}

    @property
    def snapshot(self) -> DocumentSnapshot:
        return self._snapshot

    def extract(self) -> Dict[str, str]:
        """
        Collect localizable text and attribute values.

        Returns:
            DomPath string -> value, head subtree first, in document order
        """
        content: Dict[str, str] = {}

        for root_tag in ROOT_TAGS:
            root = self._snapshot.root(root_tag)
            if root is None:
                continue
            for child in self._snapshot.children(root):
                self._collect(child, content)

        logger.debug(f"Extracted {len(content)} localizable entries")
        return content

    def _collect(self, top: SnapshotNode, content: Dict[str, str]) -> None:
        stack = [top]
        while stack:
            node = stack.pop()

            if not node.is_element:
                text = str(node.source).strip()
                if text:
                    content[self._snapshot.path_of(node).encode()] = text
                continue

            if node.name in UNLOCALIZABLE_TAGS:
                continue

            for attribute in LOCALIZABLE_ATTRIBUTES.get(node.name, ()):
                value = node.source.get(attribute)
                if isinstance(value, list):
                    value = " ".join(value)
                if value:
                    content[self._snapshot.path_of(node, attribute).encode()] = value

            stack.extend(self._snapshot.children(node)[::-1])

    def apply(self, translations: Mapping[str, Any]) -> int:
        """
        Write translated values back into the document.

        Text nodes keep their surrounding whitespace. Keys that are not
        valid paths, or that do not resolve against this document, are
        skipped.

        Args:
            translations: DomPath string -> translated value

        Returns:
            Number of entries applied
        """
        applied = 0
        for key, value in translations.items():
            if value is None:
                continue
            try:
                path = DomPath.parse(key)
            except ValueError:
                logger.debug(f"Skipping malformed path {key!r}")
                continue

            node = self._snapshot.resolve(path)
            if node is None or not self._write(node, path.attribute, str(value)):
                logger.debug(f"Skipping unresolvable path {key!r}")
                continue
            applied += 1

        return applied

    def _write(self, node: SnapshotNode, attribute: Optional[str], value: str) -> bool:
        if attribute:
            if not node.is_element:
                return False
            node.source[attribute] = value
            return True

        if node.is_element:
            node.source.string = value
            return True

        current = self._replaced.get(node.index, node.source)
        leading, trailing = _split_whitespace(str(current))
        # Keep the string subclass so script/style text is not re-escaped
        replacement = type(current)(f"{leading}{value}{trailing}")
        current.replace_with(replacement)
        self._replaced[node.index] = replacement
        return True

    def set_lang(self, locale: str) -> None:
        """Set the root element's lang attribute."""
        html = self._soup.find("html")
        if html is not None:
            html["lang"] = locale

    def serialize(self) -> str:
        return str(self._soup)


def extract_localizable_content(html: str, parser: str = DEFAULT_PARSER) -> Dict[str, str]:
    """Convenience wrapper returning the localizable entries of a document."""
    return DocumentExtractor(html, parser).extract()
