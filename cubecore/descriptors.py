"""x86 segment descriptors: GDT, IDT and the task state segment."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, fields

NO_GDT_DESCRIPTORS = 8
NO_IDT_DESCRIPTORS = 256

KERNEL_STACK_TOP = 0x9FBFF
STACK_CHK_GUARD = 0xE2DEE396
TSS_SELECTOR = 0x28
KERNEL_DATA_SELECTOR = 0x10

_GDT_FORMAT = "<HHBBBB"
_IDT_FORMAT = "<HHBBH"
_PTR_FORMAT = "<HI"
_TSS_FORMAT = "<25I2H"

TSS_SIZE = struct.calcsize(_TSS_FORMAT)


def _check_index(index: int, count: int) -> None:
    if not 0 <= index < count:
        raise IndexError(f"descriptor index {index} out of range 0..{count - 1}")


@dataclass(frozen=True)
class GdtEntry:
    """One packed 8-byte GDT descriptor."""

    segment_limit: int = 0
    base_low: int = 0
    base_middle: int = 0
    access: int = 0
    granularity: int = 0
    base_high: int = 0

    @property
    def base(self) -> int:
        return self.base_low | (self.base_middle << 16) | (self.base_high << 24)

    @property
    def limit(self) -> int:
        return self.segment_limit | ((self.granularity & 0x0F) << 16)

    def pack(self) -> bytes:
        return struct.pack(
            _GDT_FORMAT,
            self.segment_limit,
            self.base_low,
            self.base_middle,
            self.access,
            self.granularity,
            self.base_high,
        )


def make_gdt_entry(base: int, limit: int, access: int, gran: int) -> GdtEntry:
    """Build a descriptor from a 32-bit base, 20-bit limit and flag bytes."""
    base &= 0xFFFFFFFF
    limit &= 0xFFFFFFFF
    return GdtEntry(
        segment_limit=limit & 0xFFFF,
        base_low=base & 0xFFFF,
        base_middle=(base >> 16) & 0xFF,
        access=access & 0xFF,
        granularity=((limit >> 16) & 0x0F) | (gran & 0xF0),
        base_high=(base >> 24) & 0xFF,
    )


@dataclass
class GlobalDescriptorTable:
    entries: list[GdtEntry] = field(
        default_factory=lambda: [GdtEntry() for _ in range(NO_GDT_DESCRIPTORS)]
    )

    def set_entry(self, index: int, base: int, limit: int, access: int, gran: int) -> GdtEntry:
        _check_index(index, len(self.entries))
        entry = make_gdt_entry(base, limit, access, gran)
        self.entries[index] = entry
        return entry

    def pack(self) -> bytes:
        return b"".join(entry.pack() for entry in self.entries)

    def pointer(self, base_address: int) -> bytes:
        """The 6-byte pseudo-descriptor loaded by ``lgdt``."""
        limit = len(self.entries) * struct.calcsize(_GDT_FORMAT) - 1
        return struct.pack(_PTR_FORMAT, limit, base_address & 0xFFFFFFFF)


def default_gdt(tss_base: int) -> GlobalDescriptorTable:
    """The kernel's flat-model GDT with a TSS descriptor at ``tss_base``."""
    gdt = GlobalDescriptorTable()
    gdt.set_entry(0, 0, 0, 0, 0)
    gdt.set_entry(1, 0, 0xFFFFFFFF, 0x9A, 0xCF)
    gdt.set_entry(2, 0, 0xFFFFFFFF, 0x92, 0xCF)
    gdt.set_entry(3, 0, 0xFFFFFFFF, 0xFA, 0xCF)
    gdt.set_entry(4, 0, 0xFFFFFFFF, 0xF2, 0xCF)
    gdt.set_entry(5, tss_base, TSS_SIZE - 1, 0x89, 0x40)
    return gdt


@dataclass(frozen=True)
class IdtEntry:
    """One packed 8-byte interrupt gate."""

    base_low: int = 0
    segment_selector: int = 0
    zero: int = 0
    type: int = 0
    base_high: int = 0

    @property
    def base(self) -> int:
        return self.base_low | (self.base_high << 16)

    def pack(self) -> bytes:
        return struct.pack(
            _IDT_FORMAT,
            self.base_low,
            self.segment_selector,
            self.zero,
            self.type,
            self.base_high,
        )


@dataclass
class InterruptDescriptorTable:
    entries: list[IdtEntry] = field(
        default_factory=lambda: [IdtEntry() for _ in range(NO_IDT_DESCRIPTORS)]
    )

    def set_entry(self, index: int, base: int, seg_sel: int, flags: int) -> IdtEntry:
        """Install a gate; the DPL bits 0x60 are always set."""
        _check_index(index, len(self.entries))
        base &= 0xFFFFFFFF
        entry = IdtEntry(
            base_low=base & 0xFFFF,
            segment_selector=seg_sel & 0xFFFF,
            zero=0,
            type=(flags | 0x60) & 0xFF,
            base_high=(base >> 16) & 0xFFFF,
        )
        self.entries[index] = entry
        return entry

    def pack(self) -> bytes:
        return b"".join(entry.pack() for entry in self.entries)


@dataclass
class TaskStateSegment:
    prev: int = 0
    esp0: int = 0
    ss0: int = 0
    esp1: int = 0
    ss1: int = 0
    esp2: int = 0
    ss2: int = 0
    cr3: int = 0
    eip: int = 0
    eflags: int = 0
    eax: int = 0
    ecx: int = 0
    edx: int = 0
    ebx: int = 0
    esp: int = 0
    ebp: int = 0
    esi: int = 0
    edi: int = 0
    es: int = 0
    cs: int = 0
    ss: int = 0
    ds: int = 0
    fs: int = 0
    gs: int = 0
    ldt: int = 0
    trap: int = 0
    iomap_base: int = 0

    def pack(self) -> bytes:
        return struct.pack(_TSS_FORMAT, *(getattr(self, f.name) for f in fields(self)))


def default_tss() -> TaskStateSegment:
    """The kernel TSS: ring-0 stack and an I/O map placed past the segment."""
    return TaskStateSegment(
        ss0=KERNEL_DATA_SELECTOR,
        esp0=KERNEL_STACK_TOP,
        iomap_base=TSS_SIZE,
    )