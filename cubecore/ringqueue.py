"""Growable circular FIFO queue of byte buffers."""

from __future__ import annotations

from typing import Iterator, Optional

QUEUE_INITIAL_CAPACITY = 4


class RingQueue:
    """Circular buffer that grows by one slot when full and shrinks by
    one slot when it drops to a quarter of its capacity, never below
    ``QUEUE_INITIAL_CAPACITY``. Each element is a private copy of the
    bytes that were enqueued."""

    def __init__(self) -> None:
        self.capacity = QUEUE_INITIAL_CAPACITY
        self._buffer: list[Optional[bytes]] = [None] * self.capacity
        self._front = 0
        self._rear = -1
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[bytes]:
        for offset in range(self._count):
            item = self._buffer[(self._front + offset) % self.capacity]
            assert item is not None
            yield item

    def is_empty(self) -> bool:
        return self._count == 0

    def is_full(self) -> bool:
        return self._count == self.capacity

    def _resize(self, capacity: int) -> None:
        if capacity < self._count:
            raise ValueError(
                f"capacity {capacity} cannot hold {self._count} queued elements"
            )
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        items: list[Optional[bytes]] = list(self)
        self._buffer = items + [None] * (capacity - len(items))
        self._front = 0
        self._rear = len(items) - 1
        self.capacity = capacity

    def expand(self, difference: int) -> None:
        """Grow the capacity by ``difference`` slots."""
        self._resize(self.capacity + difference)

    def shrink(self, difference: int) -> None:
        """Reduce the capacity by ``difference``, not below the initial size."""
        self._resize(max(self.capacity - difference, QUEUE_INITIAL_CAPACITY))

    def enqueue(self, data: bytes) -> None:
        """Append a copy of ``data`` at the rear."""
        if self.is_full():
            self.expand(1)
        self._rear = (self._rear + 1) % self.capacity
        self._buffer[self._rear] = bytes(data)
        self._count += 1

    def dequeue(self) -> bytes:
        """Remove and return the front element; IndexError if empty."""
        if self.is_empty():
            raise IndexError("dequeue from an empty queue")
        item = self._buffer[self._front]
        self._buffer[self._front] = None
        self._front = (self._front + 1) % self.capacity
        self._count -= 1
        if self._count > 0 and self._count == self.capacity // 4:
            self.shrink(1)
        assert item is not None
        return item

    def clear(self) -> int:
        """Drop every element and return how many were removed."""
        removed = 0
        while not self.is_empty():
            self.dequeue()
            removed += 1
        return removed