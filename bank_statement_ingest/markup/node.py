"""
Intermediate tree shared by the SGML and XML front ends.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass
class RawNode:
    """One element of an OFX document.

    Attributes:
        tag: Upper-case tag name.
        value: Trimmed text for leaf elements, ``None`` for aggregates.
        children: Child elements in document order.
    """
    tag: str
    value: str | None = None
    children: list[RawNode] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return self.value is not None

    def iter(self, tag: str) -> Iterator[RawNode]:
        """Yield every node named *tag* in this subtree, in pre-order.

        Includes this node itself when it matches. Uses an explicit stack
        so deeply nested documents do not hit the recursion limit.
        """
        stack = [self]
        while stack:
            node = stack.pop()
            if node.tag == tag:
                yield node
            stack.extend(reversed(node.children))

    def find(self, tag: str) -> RawNode | None:
        """Return the first direct child named *tag*, or ``None``."""
        for child in self.children:
            if child.tag == tag:
                return child
        return None

    def find_all(self, tag: str) -> list[RawNode]:
        """Return all direct children named *tag*."""
        return [child for child in self.children if child.tag == tag]
