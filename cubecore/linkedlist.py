"""Doubly linked list holding arbitrary values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional


@dataclass(eq=False)
class Node:
    """A list cell; ``prev`` and ``next`` link it to its neighbours."""

    val: Any
    prev: Optional["Node"] = field(default=None, repr=False)
    next: Optional["Node"] = field(default=None, repr=False)


class LinkedList:
    """Doubly linked list with O(1) insertion and removal at both ends.

    ``push``/``pop`` work at the back (a stack); ``unqueue`` inserts at
    the front and ``dequeue`` takes from the back (a FIFO queue).
    """

    def __init__(self, values: Iterable[Any] = ()) -> None:
        self.head: Optional[Node] = None
        self.tail: Optional[Node] = None
        self._size = 0
        for value in values:
            self.insert_back(value)

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Any]:
        for node in self.nodes():
            yield node.val

    def __repr__(self) -> str:
        return f"LinkedList({list(self)!r})"

    def nodes(self) -> Iterator[Node]:
        """Yield the nodes from head to tail."""
        node = self.head
        while node is not None:
            following = node.next
            yield node
            node = following

    def _unlink(self, node: Node) -> None:
        if node.prev is not None:
            node.prev.next = node.next
        else:
            self.head = node.next
        if node.next is not None:
            node.next.prev = node.prev
        else:
            self.tail = node.prev
        node.prev = None
        node.next = None
        self._size -= 1

    def insert_front(self, val: Any) -> Node:
        """Insert ``val`` before the head and return its node."""
        node = Node(val, next=self.head)
        if self.head is not None:
            self.head.prev = node
        else:
            self.tail = node
        self.head = node
        self._size += 1
        return node

    def insert_back(self, val: Any) -> Node:
        """Insert ``val`` after the tail and return its node."""
        node = Node(val, prev=self.tail)
        if self.tail is not None:
            self.tail.next = node
        else:
            self.head = node
        self.tail = node
        self._size += 1
        return node

    def remove_front(self) -> Any:
        """Remove the head and return its value, or None if empty."""
        if self.head is None:
            return None
        node = self.head
        self._unlink(node)
        return node.val

    def remove_back(self) -> Any:
        """Remove the tail and return its value, or None if empty."""
        if self.tail is None:
            return None
        node = self.tail
        self._unlink(node)
        return node.val

    def remove_node(self, node: Node) -> Any:
        """Unlink ``node`` from this list and return its value."""
        self._unlink(node)
        return node.val

    def push(self, val: Any) -> Node:
        return self.insert_back(val)

    def pop(self) -> Optional[Node]:
        """Detach and return the tail node, or None if empty."""
        if self.tail is None:
            return None
        node = self.tail
        self._unlink(node)
        return node

    def unqueue(self, val: Any) -> Node:
        return self.insert_front(val)

    def dequeue(self) -> Optional[Node]:
        return self.pop()

    def peek_front(self) -> Any:
        return None if self.head is None else self.head.val

    def peek_back(self) -> Any:
        return None if self.tail is None else self.tail.val

    def index_of(self, val: Any) -> Optional[int]:
        """Position of the first element that *is* ``val``, or None."""
        for index, item in enumerate(self):
            if item is val:
                return index
        return None

    def node_at(self, index: int) -> Node:
        """Return the node at ``index``; raise IndexError when out of range."""
        if not 0 <= index < self._size:
            raise IndexError(f"list index {index} out of range")
        for position, node in enumerate(self.nodes()):
            if position == index:
                return node
        raise IndexError(f"list index {index} out of range")

    def remove_at(self, index: int) -> Any:
        """Remove the element at ``index`` and return its value."""
        return self.remove_node(self.node_at(index))