"""
Immutable snapshot of a parsed document's localizable structure.

The snapshot is an arena of node records with parent and child indices,
built once right after parsing. Only filtered children are recorded:
elements, and text nodes with non-whitespace content. Comments, doctype
declarations, CDATA and whitespace-only text never receive an index.

The same snapshot is used to compute paths during extraction and to
resolve them during re-application. Structural mutation of the document
between those two phases is unsupported.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from lingo_engine.html.dom_path import ROOT_TAGS, DomPath

ELEMENT = "element"
TEXT = "text"


def is_indexed(node: PageElement) -> bool:
    """Whether a node takes part in child indexing."""
    if isinstance(node, Tag):
        return True
    if isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
        return bool(node.strip())
    return False


def filtered_children(tag: Tag) -> List[PageElement]:
    return [child for child in tag.children if is_indexed(child)]


@dataclass(frozen=True)
class SnapshotNode:
    """One element or text node of the snapshot."""

    index: int
    kind: str
    name: Optional[str]  # tag name for elements, None for text
    parent: Optional[int]
    position: int  # index among the parent's filtered children
    children: Tuple[int, ...]
    source: PageElement = field(compare=False, repr=False)

    @property
    def is_element(self) -> bool:
        return self.kind == ELEMENT


class DocumentSnapshot:
    """Arena of filtered nodes under the document's <head> and <body>."""

    def __init__(self, nodes: Tuple[SnapshotNode, ...], roots: Dict[str, int]) -> None:
        self._nodes = nodes
        self._roots = roots

    @classmethod
    def build(cls, soup: BeautifulSoup) -> "DocumentSnapshot":
        """
        Index the head and body subtrees of a parsed document.

        Args:
            soup: Parsed document

        Returns:
            DocumentSnapshot; subtrees missing from the document are absent
        """
        records: List[list] = []
        children: Dict[int, List[int]] = {}
        roots: Dict[str, int] = {}

        html = soup.find("html")
        for root_tag in ROOT_TAGS:
            root = html.find(root_tag, recursive=False) if html is not None else None
            if root is None:
                continue

            stack = [(root, None, 0)]
            while stack:
                source, parent, position = stack.pop()
                index = len(records)
                kind = ELEMENT if isinstance(source, Tag) else TEXT
                name = source.name if kind == ELEMENT else None
                records.append([index, kind, name, parent, position, source])
                children[index] = []

                if parent is None:
                    roots[root_tag] = index
                else:
                    children[parent].append(index)

                if kind == ELEMENT:
                    indexed = filtered_children(source)
                    for child_position in range(len(indexed) - 1, -1, -1):
                        stack.append((indexed[child_position], index, child_position))

        nodes = tuple(
            SnapshotNode(
                index=index,
                kind=kind,
                name=name,
                parent=parent,
                position=position,
                children=tuple(children[index]),
                source=source,
            )
            for index, kind, name, parent, position, source in records
        )
        return cls(nodes, roots)

    def __len__(self) -> int:
        return len(self._nodes)

    def node(self, index: int) -> SnapshotNode:
        return self._nodes[index]

    def root(self, tag: str) -> Optional[SnapshotNode]:
        """The <head> or <body> node, if the document has one."""
        index = self._roots.get(tag)
        return self._nodes[index] if index is not None else None

    def children(self, node: SnapshotNode) -> List[SnapshotNode]:
        return [self._nodes[i] for i in node.children]

    def iter_subtree(self, node: SnapshotNode) -> Iterator[SnapshotNode]:
        """Pre-order walk of a node and its descendants."""
        stack = [node]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(self._nodes[i] for i in reversed(current.children))

    def path_of(self, node: SnapshotNode, attribute: Optional[str] = None) -> DomPath:
        """
        Compute the path of a node by walking up to its subtree root.

        Args:
            node: Node below <head> or <body>
            attribute: Optional attribute name to address

        Returns:
            DomPath of the node or attribute
        """
        indices: List[int] = []
        current = node
        while current.parent is not None:
            indices.append(current.position)
            current = self._nodes[current.parent]

        return DomPath(root=current.name, indices=tuple(reversed(indices)), attribute=attribute)

    def resolve(self, path: DomPath) -> Optional[SnapshotNode]:
        """
        Follow a path down from its root.

        Returns:
            The addressed node, or None if the path does not exist
        """
        current = self.root(path.root)
        for position in path.indices:
            if current is None or position >= len(current.children):
                return None
            current = self._nodes[current.children[position]]
        return current
