"""General tree whose nodes keep their children in a linked list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from cubecore.linkedlist import LinkedList


@dataclass(eq=False)
class TreeNode:
    value: Any
    children: LinkedList = field(default_factory=LinkedList, repr=False)


class GenericTree:
    """A rooted tree; new children are placed in front of their siblings."""

    def __init__(self) -> None:
        self.root: Optional[TreeNode] = None

    def insert(self, subroot: Optional[TreeNode], value: Any) -> TreeNode:
        """Add ``value`` under ``subroot``; the first insert becomes the root."""
        node = TreeNode(value)
        if self.root is None:
            self.root = node
            return node
        if subroot is None:
            raise ValueError("a parent node is required once the tree has a root")
        subroot.children.insert_front(node)
        return node

    def find_parent(self, node: TreeNode) -> Optional[tuple[TreeNode, int]]:
        """Return (parent, index among its children), or None for the root
        and for nodes not in the tree."""
        if self.root is None or node is self.root:
            return None
        return self._find_parent(node, self.root)

    def _find_parent(
        self, node: TreeNode, subroot: TreeNode
    ) -> Optional[tuple[TreeNode, int]]:
        index = subroot.children.index_of(node)
        if index is not None:
            return subroot, index
        for child in subroot.children:
            found = self._find_parent(node, child)
            if found is not None:
                return found
        return None

    def remove(self, node: TreeNode) -> bool:
        """Detach ``node`` and its subtree; False if it has no parent."""
        found = self.find_parent(node)
        if found is None:
            return False
        parent, index = found
        parent.children.remove_at(index)
        return True

    def _descendants(self, subroot: Optional[TreeNode]) -> Iterator[Any]:
        if subroot is None:
            return
        for child in subroot.children:
            yield child.value
            yield from self._descendants(child)

    def _preorder(self, subroot: Optional[TreeNode]) -> Iterator[Any]:
        if subroot is None:
            return
        yield subroot.value
        for child in subroot.children:
            yield from self._preorder(child)

    def to_list(self) -> LinkedList:
        """Values of all nodes below the root, in pre-order."""
        return LinkedList(self._descendants(self.root))

    def to_array(self) -> list[Any]:
        """Values of all nodes including the root, in pre-order."""
        return list(self._preorder(self.root))