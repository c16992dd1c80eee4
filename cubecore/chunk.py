"""Index arithmetic helpers: chunk lookup, sign and 2D field indexing."""

from __future__ import annotations

from typing import NamedTuple


class ChunkPosition(NamedTuple):
    chunk: int
    chunk_idx: int


def find_child(chunk_size: int, idx: int) -> ChunkPosition:
    """Locate the chunk holding ``idx`` and the offset inside it.

    Division truncates toward zero, so negative indices give a
    non-positive offset.
    """
    if chunk_size == 0:
        raise ZeroDivisionError("chunk size must not be zero")
    quotient = abs(idx) // abs(chunk_size)
    if (idx < 0) != (chunk_size < 0):
        quotient = -quotient
    return ChunkPosition(quotient, idx - quotient * chunk_size)


def sign(x: float) -> int:
    """Return -1, 0 or 1 according to the sign of ``x``."""
    if x < 0:
        return -1
    if x > 0:
        return 1
    return 0


def field_index(x: int, y: int, width: int) -> int:
    """Linear index of cell (x, y) in a row-major field of ``width`` columns."""
    return y * width + x