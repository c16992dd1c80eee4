import struct

import pytest

from cubecore.descriptors import (
    KERNEL_STACK_TOP,
    NO_GDT_DESCRIPTORS,
    NO_IDT_DESCRIPTORS,
    TSS_SIZE,
    GlobalDescriptorTable,
    InterruptDescriptorTable,
    default_gdt,
    default_tss,
    make_gdt_entry,
)


def test_flat_code_segment_wire_bytes():
    entry = make_gdt_entry(0, 0xFFFFFFFF, 0x9A, 0xCF)
    assert entry.pack() == bytes.fromhex("ffff0000009acf00")


@pytest.mark.parametrize(
    "base,limit,access,gran",
    [(0x12345678, 0xABCDE, 0x92, 0xC0), (0, 0xFFFFF, 0x9A, 0xCF), (0xDEADBEEF, 0x67, 0x89, 0x40)],
)
def test_gdt_entry_round_trip(base, limit, access, gran):
    entry = make_gdt_entry(base, limit, access, gran)
    assert entry.base == base
    assert entry.limit == limit & 0xFFFFF
    assert entry.access == access
    assert entry.granularity & 0xF0 == gran & 0xF0
    assert len(entry.pack()) == 8


def test_gdt_pack_and_pointer():
    gdt = GlobalDescriptorTable()
    packed = gdt.pack()
    assert len(packed) == 8 * NO_GDT_DESCRIPTORS
    assert packed == bytes(len(packed))
    assert struct.unpack("<HI", gdt.pointer(0x1000)) == (len(packed) - 1, 0x1000)


def test_gdt_set_entry_out_of_range():
    gdt = GlobalDescriptorTable()
    with pytest.raises(IndexError):
        gdt.set_entry(NO_GDT_DESCRIPTORS, 0, 0, 0, 0)
    with pytest.raises(IndexError):
        gdt.set_entry(-1, 0, 0, 0, 0)


def test_default_gdt_layout():
    gdt = default_gdt(0x00200000)
    assert gdt.entries[0].pack() == bytes(8)
    assert [e.access for e in gdt.entries[1:5]] == [0x9A, 0x92, 0xFA, 0xF2]
    tss = gdt.entries[5]
    assert tss.base == 0x00200000
    assert tss.limit == TSS_SIZE - 1
    assert tss.access == 0x89
    assert gdt.pack()[5 * 8:6 * 8] == tss.pack()


def test_idt_set_entry():
    idt = InterruptDescriptorTable()
    entry = idt.set_entry(3, 0x12345678, 0x08, 0x8E)
    assert entry.base == 0x12345678
    assert entry.segment_selector == 0x08
    assert entry.type & 0x60 == 0x60
    assert entry.type & 0x8E == 0x8E
    assert entry.zero == 0
    assert idt.entries[3] == entry


def test_idt_pack_layout():
    idt = InterruptDescriptorTable()
    idt.set_entry(128, 0xC0101234, 0x08, 0x8E)
    packed = idt.pack()
    assert len(packed) == 8 * NO_IDT_DESCRIPTORS
    assert packed[128 * 8:129 * 8] == idt.entries[128].pack()
    low, sel, zero, _, high = struct.unpack_from("<HHBBH", packed, 128 * 8)
    assert (high << 16) | low == 0xC0101234
    assert (sel, zero) == (0x08, 0)


def test_idt_set_entry_out_of_range():
    idt = InterruptDescriptorTable()
    with pytest.raises(IndexError):
        idt.set_entry(NO_IDT_DESCRIPTORS, 0, 0x08, 0x8E)


def test_tss_size_matches_structure():
    assert TSS_SIZE == 104
    assert len(default_tss().pack()) == TSS_SIZE


def test_default_tss_fields_in_wire_bytes():
    data = default_tss().pack()
    assert struct.unpack_from("<I", data, 4)[0] == KERNEL_STACK_TOP
    assert struct.unpack_from("<I", data, 8)[0] == 0x10
    assert struct.unpack_from("<H", data, TSS_SIZE - 2)[0] == TSS_SIZE