"""
Positional addressing of document nodes.

A DomPath names a node by the tag of the top-level subtree it lives in
("head" or "body") followed by its index among the filtered children at
each level below, optionally suffixed with an attribute name:

    body/0/2          third filtered child of the first child of <body>
    head/1#content    the "content" attribute of the second child of <head>

Paths are only meaningful against the exact document structure they were
computed from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

ROOT_TAGS = ("head", "body")


@dataclass(frozen=True)
class DomPath:
    """Parsed form of a positional node path."""

    root: str
    indices: Tuple[int, ...]
    attribute: Optional[str] = None

    def encode(self) -> str:
        """Render the path as a string key."""
        base = "/".join([self.root, *(str(i) for i in self.indices)])
        return f"{base}#{self.attribute}" if self.attribute else base

    def __str__(self) -> str:
        return self.encode()

    def with_attribute(self, attribute: Optional[str]) -> "DomPath":
        return DomPath(self.root, self.indices, attribute)

    @classmethod
    def parse(cls, value: str) -> "DomPath":
        """
        Parse a string key into a DomPath.

        Raises:
            ValueError: If the key is not a well-formed path
        """
        if not isinstance(value, str):
            raise ValueError(f"DomPath must be a string, got {value!r}")

        node_path, _, attribute = value.partition("#")
        root, *segments = node_path.split("/")

        if root not in ROOT_TAGS:
            raise ValueError(f"Unknown root tag in path {value!r}")

        indices = []
        for segment in segments:
            if not segment.isdecimal():
                raise ValueError(f"Invalid index {segment!r} in path {value!r}")
            indices.append(int(segment))

        return cls(root=root, indices=tuple(indices), attribute=attribute or None)
