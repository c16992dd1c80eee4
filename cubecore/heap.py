"""Physical frame bitmap and a best-fit kernel heap with boundary tags."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Optional

BLOCK_SIZE = 4096
BLOCKS_PER_BUCKET = 8
PAGE_SIZE = 4096

KHEAP_START = 0xC0400000
KHEAP_MAX_ADDRESS = 0xCFFFFFFF
HEAP_MIN_SIZE = 4 * 1024 * 1024

# Block header: used (u8), kernel (u8), padding, size (u32), next, prev.
_HEADER = struct.Struct("<BBxxIII")
HEADER_SIZE = _HEADER.size
_TRAILER = struct.Struct("<I")
OVERHEAD = HEADER_SIZE + _TRAILER.size

_MIN_SPLIT = 8 + OVERHEAD


class HeapExhausted(MemoryError):
    """Raised when no memory is left to satisfy a request."""


@dataclass
class FrameBitmap:
    """One bit per physical block; a set bit marks the block as in use."""

    block_count: int
    bits: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        if self.block_count < 0:
            raise ValueError("block count must not be negative")
        needed = -(-self.block_count // BLOCKS_PER_BUCKET)
        if len(self.bits) < needed:
            self.bits = bytearray(self.bits) + bytearray(needed - len(self.bits))

    @classmethod
    def from_memory(cls, mem_low: int, mem_high: int) -> "FrameBitmap":
        """A cleared bitmap covering ``mem_low + mem_high`` bytes."""
        return cls((mem_low + mem_high) // BLOCK_SIZE)

    def _check(self, block: int) -> None:
        if not 0 <= block < self.block_count:
            raise IndexError(f"block {block} out of range")

    def is_set(self, block: int) -> bool:
        self._check(block)
        return bool((self.bits[block // BLOCKS_PER_BUCKET] >> (block % BLOCKS_PER_BUCKET)) & 1)

    def find_block(self) -> int:
        """Index of the first free block; HeapExhausted if there is none."""
        for block in range(self.block_count):
            if not self.is_set(block):
                return block
        raise HeapExhausted("No free block found. Out of memory.")

    def allocate(self) -> int:
        """Mark the first free block as used and return its index."""
        block = self.find_block()
        self.bits[block // BLOCKS_PER_BUCKET] |= 1 << (block % BLOCKS_PER_BUCKET)
        return block

    def free(self, block: int) -> None:
        self._check(block)
        self.bits[block // BLOCKS_PER_BUCKET] &= ~(1 << (block % BLOCKS_PER_BUCKET)) & 0xFF


def _real(size: int) -> int:
    return size & ~1


class Heap:
    """A heap of boundary-tagged blocks placed in a simulated address range.

    Every block carries a header with its payload size (bit 0 set while
    free) and a trailing copy of that size, so neighbours can be found in
    both directions. Free blocks are chosen best-fit and merged with free
    neighbours when released.
    """

    def __init__(
        self,
        start: int = KHEAP_START,
        end: Optional[int] = None,
        max_address: int = KHEAP_MAX_ADDRESS,
        min_size: int = HEAP_MIN_SIZE,
    ) -> None:
        end = start if end is None else end
        if not start <= end <= max_address + 1:
            raise ValueError("heap bounds must satisfy start <= end <= max")
        self.start = start
        self.end = end
        self.max_address = max_address
        self.min_size = min_size
        self.curr = start
        self._memory = bytearray(end - start)
        self._head: Optional[int] = None
        self._tail: Optional[int] = None
        self._freelist: list[int] = []
        self._allocated: set[int] = set()

    # -- raw memory -------------------------------------------------------

    def _offset(self, address: int, length: int) -> int:
        if address < self.start or address + length > self.end:
            raise IndexError(f"address range 0x{address:x}+{length} outside the heap")
        return address - self.start

    def read(self, ptr: int, size: int) -> bytes:
        """Copy ``size`` bytes starting at address ``ptr``."""
        offset = self._offset(ptr, size)
        return bytes(self._memory[offset:offset + size])

    def write(self, ptr: int, data: bytes) -> None:
        """Store ``data`` at address ``ptr``."""
        offset = self._offset(ptr, len(data))
        self._memory[offset:offset + len(data)] = data

    # -- block bookkeeping -------------------------------------------------

    def _size(self, block: int) -> int:
        return _HEADER.unpack_from(self._memory, self._offset(block, HEADER_SIZE))[2]

    def _write_block(self, block: int, payload: int, free: bool) -> None:
        value = payload | 1 if free else payload & ~1
        _HEADER.pack_into(
            self._memory, self._offset(block, HEADER_SIZE), 0 if free else 1, 1, value, 0, 0
        )
        trailer = block + HEADER_SIZE + _real(payload)
        _TRAILER.pack_into(self._memory, self._offset(trailer, _TRAILER.size), value)

    def _is_free(self, block: Optional[int]) -> bool:
        return block is not None and bool(self._size(block) & 1)

    def _prev_block(self, block: int) -> Optional[int]:
        if block == self._head:
            return None
        (prev_size,) = _TRAILER.unpack_from(self._memory, self._offset(block - 4, 4))
        return block - OVERHEAD - _real(prev_size)

    def _next_block(self, block: int) -> Optional[int]:
        if block == self._tail:
            return None
        return block + OVERHEAD + _real(self._size(block))

    def _add_free(self, block: int) -> None:
        self._freelist.insert(0, block)

    def _remove_free(self, block: int) -> None:
        if block in self._freelist:
            self._freelist.remove(block)

    def _best_fit(self, size: int) -> Optional[int]:
        best: Optional[int] = None
        best_size = 0
        for block in self._freelist:
            block_size = self._size(block)
            if _real(block_size) >= _real(size) and block_size & 1:
                if best is None or block_size < best_size:
                    best, best_size = block, block_size
        return best

    def _block_of(self, ptr: int) -> int:
        if ptr not in self._allocated:
            raise ValueError(f"0x{ptr:x} is not an allocated block")
        return ptr - HEADER_SIZE

    @property
    def used(self) -> int:
        """Bytes taken by allocated blocks, headers and trailers included."""
        return sum(_real(self._size(ptr - HEADER_SIZE)) + OVERHEAD for ptr in self._allocated)

    def block_size(self, ptr: int) -> int:
        """Usable payload size of the allocated block at ``ptr``."""
        return _real(self._size(self._block_of(ptr)))

    # -- break management --------------------------------------------------

    def sbrk(self, size: int) -> int:
        """Move the top of the heap by ``size`` bytes and return the old top."""
        old = self.curr
        if size == 0:
            return old
        if size > 0:
            boundary = self.curr + size
            if boundary > self.end:
                if boundary > self.max_address:
                    raise HeapExhausted("Heap is running out of space")
                runner = self.end
                while runner < boundary:
                    runner += PAGE_SIZE
                runner = min(runner, self.max_address + 1)
                self._memory.extend(bytes(runner - self.end))
                self.end = runner
            self.curr = boundary
            return old

        boundary = max(self.curr + size, self.start + self.min_size)
        boundary = min(boundary, self.curr)
        runner = self.end - PAGE_SIZE
        while runner > boundary:
            runner -= PAGE_SIZE
        new_end = max(runner + PAGE_SIZE, boundary)
        if new_end < self.end:
            del self._memory[new_end - self.start:]
            self.end = new_end
        self.curr = boundary
        return old

    # -- allocation ---------------------------------------------------------

    def malloc(self, size: int) -> Optional[int]:
        """Allocate ``size`` bytes and return the payload address; None for 0."""
        if size < 0:
            raise ValueError("size must not be negative")
        if size == 0:
            return None
        rounded = ((size + 15) // 16) * 16
        block_size = rounded + OVERHEAD

        best = self._best_fit(rounded)
        if best is None:
            block = self.sbrk(block_size)
            if self._head is None:
                self._head = block
            self._tail = block
            self._write_block(block, block_size - OVERHEAD, free=False)
            self._allocated.add(block + HEADER_SIZE)
            return block + HEADER_SIZE

        chunk = _real(self._size(best)) + OVERHEAD
        rest = chunk - block_size
        split = rest >= _MIN_SPLIT
        taken = block_size if split else chunk
        following = self._next_block(best)
        was_tail = best == self._tail

        self._write_block(best, taken - OVERHEAD, free=False)
        if split:
            piece = best + taken
            if not was_tail and self._is_free(following):
                assert following is not None
                self._remove_free(following)
                payload = rest - OVERHEAD + _real(self._size(following)) + OVERHEAD
                self._write_block(piece, payload, free=True)
                if following == self._tail:
                    self._tail = piece
            else:
                self._write_block(piece, rest - OVERHEAD, free=True)
                if was_tail:
                    self._tail = piece
            self._add_free(piece)
        self._remove_free(best)
        self._allocated.add(best + HEADER_SIZE)
        return best + HEADER_SIZE

    def calloc(self, num: int, size: int) -> Optional[int]:
        """Allocate ``num * size`` zeroed bytes."""
        total = num * size
        ptr = self.malloc(total)
        if ptr is not None:
            self.write(ptr, bytes(total))
        return ptr

    def free(self, ptr: int) -> None:
        """Release the block at ``ptr``, merging it with free neighbours."""
        curr = self._block_of(ptr)
        prev = self._prev_block(curr)
        nxt = self._next_block(curr)
        curr_size = _real(self._size(curr))

        if self._is_free(prev) and self._is_free(nxt):
            assert prev is not None and nxt is not None
            payload = (
                _real(self._size(prev)) + 2 * OVERHEAD + curr_size + _real(self._size(nxt))
            )
            self._write_block(prev, payload, free=True)
            if self._tail == nxt:
                self._tail = prev
            self._remove_free(nxt)
        elif self._is_free(prev):
            assert prev is not None
            self._write_block(prev, _real(self._size(prev)) + OVERHEAD + curr_size, free=True)
            if self._tail == curr:
                self._tail = prev
        elif self._is_free(nxt):
            assert nxt is not None
            self._write_block(curr, curr_size + OVERHEAD + _real(self._size(nxt)), free=True)
            if self._tail == nxt:
                self._tail = curr
            self._remove_free(nxt)
            self._add_free(curr)
        else:
            self._write_block(curr, curr_size, free=True)
            self._add_free(curr)
        self._allocated.discard(ptr)

    def realloc(self, ptr: Optional[int], size: int) -> Optional[int]:
        """Resize the block at ``ptr``, moving it if needed; data is kept."""
        if ptr is None:
            return self.malloc(size)
        if size == 0:
            self.free(ptr)
            return None

        block = self._block_of(ptr)
        rounded = ((size + 15) // 16) * 16
        block_size = rounded + OVERHEAD
        current = _real(self._size(block))
        nxt = self._next_block(block)
        prev = self._prev_block(block)

        if current == size:
            return ptr

        if current < size:
            if self._is_free(nxt):
                assert nxt is not None
                merged = current + OVERHEAD + _real(self._size(nxt))
                if merged >= rounded:
                    self._remove_free(nxt)
                    self._write_block(block, merged, free=False)
                    if self._tail == nxt:
                        self._tail = block
                    return ptr
            if self._is_free(prev):
                assert prev is not None
                merged = current + OVERHEAD + _real(self._size(prev))
                if merged >= rounded:
                    data = self.read(ptr, current)
                    self._remove_free(prev)
                    self._write_block(prev, merged, free=False)
                    if self._tail == block:
                        self._tail = prev
                    self.write(prev + HEADER_SIZE, data)
                    self._allocated.discard(ptr)
                    self._allocated.add(prev + HEADER_SIZE)
                    return prev + HEADER_SIZE
            new_ptr = self.malloc(size)
            assert new_ptr is not None
            self.write(new_ptr, self.read(ptr, current))
            self.free(ptr)
            return new_ptr

        rest = current + OVERHEAD - block_size
        if rest < _MIN_SPLIT:
            return ptr
        was_tail = block == self._tail
        self._write_block(block, block_size - OVERHEAD, free=False)
        piece = block + block_size
        if self._is_free(nxt):
            assert nxt is not None
            self._write_block(piece, rest + _real(self._size(nxt)), free=True)
            self._remove_free(nxt)
            if self._tail == nxt:
                self._tail = piece
        else:
            self._write_block(piece, rest - OVERHEAD, free=True)
            if was_tail:
                self._tail = piece
        self._add_free(piece)
        return ptr