import pytest

from cubecore.heap import FrameBitmap, HeapExhausted
from cubecore.paging import (
    PAGE_SIZE,
    PROT_READ,
    PROT_USER,
    PROT_WRITE,
    PageDirectory,
    is_aligned,
    page_align,
    pagedir_index,
    pageframe_index,
    pagetbl_index,
)


@pytest.fixture
def directory():
    return PageDirectory(FrameBitmap(64))


def entry_of(directory, va):
    return directory.tables[pagedir_index(va)][pagetbl_index(va)]


@pytest.mark.parametrize("vaddr", [0, 0x1234, 0xC0000000, 0xC0400ABC, 0xFFFFFFFF])
def test_index_parts_recompose(vaddr):
    rebuilt = (pagedir_index(vaddr) << 22) | (pagetbl_index(vaddr) << 12) | pageframe_index(vaddr)
    assert rebuilt == vaddr


def test_index_ranges():
    assert pagedir_index(0xFFFFFFFF) < 1024
    assert pagetbl_index(0xFFFFFFFF) < 1024
    assert pageframe_index(0xFFFFFFFF) < PAGE_SIZE


def test_page_align_moves_past_boundary():
    assert page_align(0x1000) == 0x2000
    for addr in (0x0, 0x1, 0xFFF, 0x12345):
        aligned = page_align(addr)
        assert is_aligned(aligned)
        assert addr < aligned <= addr + PAGE_SIZE


def test_is_aligned():
    assert is_aligned(0x3000)
    assert not is_aligned(0x3001)


def test_allocate_explicit_frame_translates(directory):
    directory.allocate(0x400000, 7)
    assert directory.translate(0x400123) == (7 << 12) + 0x123


def test_allocate_zero_takes_frame_from_bitmap(directory):
    entry = directory.allocate(0x5000)
    assert entry.present and entry.rw and entry.user
    assert directory.frames.is_set(entry.frame)


def test_allocate_existing_keeps_frame(directory):
    directory.allocate(0x5000, 3)
    directory.allocate(0x5000, 9)
    assert directory.translate(0x5000) == 3 << 12


def test_allocate_rejects_wide_frame(directory):
    with pytest.raises(ValueError):
        directory.allocate(0x5000, 1 << 20)


def test_translate_unmapped_raises(directory):
    with pytest.raises(LookupError):
        directory.translate(0x9000)


def test_free_without_releasing_frame(directory):
    frame = directory.allocate(0x8000).frame
    directory.free(0x8000, False)
    assert directory.frames.is_set(frame)


def test_free_unmapped_raises(directory):
    with pytest.raises(LookupError):
        directory.free(0x8000, True)


def test_identity_region(directory):
    directory.allocate_region(0x1000, 0x5000, True)
    for addr in range(0x1000, 0x5001, PAGE_SIZE):
        assert directory.translate(addr + 0x10) == addr + 0x10


def test_mmap_maps_aligned_range(directory):
    start = directory.mmap(0x10000, 0x2000, PROT_WRITE)
    assert start == page_align(0x10000)
    count = page_align(0x2000 + PAGE_SIZE - 1) // PAGE_SIZE
    physical = {directory.translate(start + i * PAGE_SIZE) for i in range(count)}
    assert len(physical) == count


def test_mprotect_changes_access(directory):
    start = directory.mmap(0x20000, PAGE_SIZE, PROT_WRITE)
    directory.mprotect(0x20000, PAGE_SIZE, PROT_READ)
    entry = entry_of(directory, start)
    assert not entry.rw and not entry.user
    directory.mprotect(0x20000, PAGE_SIZE, PROT_WRITE | PROT_USER)
    assert entry.rw and entry.user


def test_munmap_releases(directory):
    start = directory.mmap(0x30000, PAGE_SIZE, PROT_WRITE)
    directory.munmap(0x30000, PAGE_SIZE)
    with pytest.raises(LookupError):
        directory.translate(start)


def test_unmap_clears_entry_and_frame(directory):
    entry = directory.allocate(0x7000)
    frame = entry.frame
    directory.unmap(0x7000, True)
    assert entry.frame == 0 and not entry.present
    assert not directory.frames.is_set(frame)


def test_unmap_missing_table_is_noop(directory):
    directory.unmap(0x7000000, True)
    assert directory.tables == {}


def test_frames_exhausted():
    directory = PageDirectory(FrameBitmap(1))
    directory.allocate(0x1000)
    with pytest.raises(HeapExhausted):
        directory.allocate(0x2000)