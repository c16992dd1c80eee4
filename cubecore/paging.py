"""Two-level x86 page tables mapping virtual pages to physical frames."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from cubecore.heap import FrameBitmap

PAGE_SIZE = 4096
ENTRIES_PER_TABLE = 1024
LOAD_MEMORY_ADDRESS = 0xC0000000

PROT_NONE = 0x0
PROT_EXEC = 0x1
PROT_WRITE = 0x2
PROT_READ = 0x4
PROT_USER = 0x8

PAGING_ERR_PRESENT = 0x1
PAGING_ERR_RW = 0x2
PAGING_ERR_USER = 0x4
PAGING_ERR_RESERVED = 0x8
PAGING_ERR_INST = 0x10

_U32 = 0xFFFFFFFF
_PAGE_MASK = 0xFFFFF000
_FRAME_LIMIT = 1 << 20


def pagedir_index(vaddr: int) -> int:
    """Index of the page directory entry covering ``vaddr``."""
    return (vaddr & _U32) >> 22


def pagetbl_index(vaddr: int) -> int:
    """Index of the page table entry covering ``vaddr``."""
    return ((vaddr & _U32) >> 12) & 0x3FF


def pageframe_index(vaddr: int) -> int:
    """Offset of ``vaddr`` inside its page."""
    return vaddr & 0xFFF


def page_align(addr: int) -> int:
    """Start of the page after the one containing ``addr``.

    An address already on a page boundary is still moved up one page.
    """
    return ((addr & _PAGE_MASK) + PAGE_SIZE) & _U32


def is_aligned(addr: int) -> bool:
    """True when ``addr`` lies on a page boundary."""
    return addr & 0xFFF == 0


@dataclass
class PageTableEntry:
    """One page mapping; ``frame`` is the physical frame number."""

    present: bool = False
    rw: bool = False
    user: bool = False
    accessed: bool = False
    dirty: bool = False
    frame: int = 0

    def clear(self) -> None:
        self.present = self.rw = self.user = False
        self.accessed = self.dirty = False
        self.frame = 0


def _page_range(start_va: int, size: int) -> range:
    start = page_align(start_va)
    length = page_align(size + PAGE_SIZE - 1)
    return range(start, start + length, PAGE_SIZE)


class PageDirectory:
    """A page directory whose tables are created on first use.

    Physical frames come from ``frames``; a requested frame number of 0
    means "take the first free frame from the bitmap".
    """

    def __init__(self, frames: Optional[FrameBitmap] = None) -> None:
        self.frames = frames if frames is not None else FrameBitmap(ENTRIES_PER_TABLE)
        self.tables: dict[int, list[PageTableEntry]] = {}

    def _entry(self, virtual_addr: int) -> Optional[PageTableEntry]:
        table = self.tables.get(pagedir_index(virtual_addr))
        if table is None:
            return None
        return table[pagetbl_index(virtual_addr)]

    def _release_frame(self, frame: int) -> None:
        if 0 <= frame < self.frames.block_count:
            self.frames.free(frame)

    def allocate(
        self,
        virtual_addr: int,
        frame: int = 0,
        is_kernel: bool = True,
        is_writable: bool = True,
    ) -> PageTableEntry:
        """Map the page holding ``virtual_addr`` and return its entry.

        A page that is already present keeps its frame. New mappings are
        always writable and user-accessible; ``is_kernel`` and
        ``is_writable`` do not restrict them.
        """
        if not 0 <= frame < _FRAME_LIMIT:
            raise ValueError(f"frame number {frame} does not fit in 20 bits")
        table = self.tables.setdefault(
            pagedir_index(virtual_addr),
            [PageTableEntry() for _ in range(ENTRIES_PER_TABLE)],
        )
        entry = table[pagetbl_index(virtual_addr)]
        if not entry.present:
            entry.frame = frame if frame else self.frames.allocate()
            entry.present = True
            entry.rw = True
            entry.user = True
        return entry

    def allocate_region(
        self,
        start_va: int,
        end_va: int,
        iden_map: bool = False,
        is_kernel: bool = True,
        is_writable: bool = True,
    ) -> None:
        """Map every page from ``start_va`` through ``end_va`` inclusive.

        With ``iden_map`` each page maps to the frame of the same address.
        """
        start = start_va & _PAGE_MASK
        end = end_va & _PAGE_MASK
        for addr in range(start, end + 1, PAGE_SIZE):
            frame = addr // PAGE_SIZE if iden_map else 0
            self.allocate(addr, frame, is_kernel, is_writable)

    def free(self, virtual_addr: int, free_frame: bool = True) -> None:
        """Remove the mapping of ``virtual_addr``; optionally release its frame."""
        entry = self._entry(virtual_addr)
        if entry is None or not entry.present:
            raise LookupError(f"no page mapped at 0x{virtual_addr:x}")
        if free_frame and entry.frame:
            self._release_frame(entry.frame)
        entry.present = False
        entry.frame = 0

    def free_region(self, start_va: int, end_va: int) -> None:
        """Unmap and release every mapped page from ``start_va`` through ``end_va``."""
        start = start_va & _PAGE_MASK
        end = end_va & _PAGE_MASK
        for addr in range(start, end + 1, PAGE_SIZE):
            entry = self._entry(addr)
            if entry is not None and entry.present:
                self.free(addr, True)

    def translate(self, virtual_addr: int) -> int:
        """Physical address for ``virtual_addr``; LookupError if unmapped."""
        entry = self._entry(virtual_addr)
        if entry is None or not entry.present:
            raise LookupError(f"no page mapped at 0x{virtual_addr:x}")
        return (entry.frame << 12) + pageframe_index(virtual_addr)

    def unmap(self, addr_virt: int, free_frame: bool = True) -> None:
        """Clear the entry for ``addr_virt`` entirely; missing tables are ignored."""
        entry = self._entry(addr_virt)
        if entry is None:
            return
        if free_frame and entry.present:
            self._release_frame(entry.frame)
        entry.clear()

    def mmap(self, start_va: int, size: int, prot: int = PROT_READ | PROT_WRITE) -> int:
        """Map fresh frames for ``size`` bytes and return the first mapped address.

        Mapping starts at ``page_align(start_va)``.
        """
        pages = _page_range(start_va, size)
        for addr in pages:
            frame = self.frames.allocate()
            self.allocate(
                addr,
                frame,
                is_kernel=not prot & PROT_USER,
                is_writable=bool(prot & PROT_WRITE),
            )
        return pages.start

    def munmap(self, start_va: int, size: int) -> None:
        """Undo ``mmap`` for the same arguments, releasing the frames."""
        for addr in _page_range(start_va, size):
            entry = self._entry(addr)
            if entry is not None and entry.present:
                self.free(addr, True)

    def mprotect(self, start_va: int, size: int, prot: int) -> None:
        """Set write and user access of the mapped pages in the range."""
        for addr in _page_range(start_va, size):
            entry = self._entry(addr)
            if entry is None or not entry.present:
                continue
            entry.rw = bool(prot & PROT_WRITE)
            entry.user = bool(prot & PROT_USER)