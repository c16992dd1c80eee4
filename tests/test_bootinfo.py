import struct

import pytest

from cubecore.bootinfo import (
    Initrd,
    InitrdError,
    MultibootInfo,
    MultibootModule,
    load_initrd,
)


def test_info_size_matches_layout():
    assert MultibootInfo.SIZE == 110
    assert len(MultibootInfo().to_bytes()) == MultibootInfo.SIZE


def test_info_fields_at_fixed_offsets():
    data = bytearray(MultibootInfo.SIZE)
    struct.pack_into("<I", data, 0, 0x1234)
    struct.pack_into("<I", data, 20, 2)
    data[109] = 1
    info = MultibootInfo.from_bytes(bytes(data))
    assert info.flags == 0x1234
    assert info.modules_count == 2
    assert info.framebuffer_type == 1


def test_info_round_trip():
    info = MultibootInfo(
        flags=7,
        mem_low=640,
        mem_high=130048,
        modules_count=1,
        modules_addr=0x10000,
        syms=(1, 2, 3, 4),
        vbe_mode=0x118,
        framebuffer_addr=0xFD000000,
        framebuffer_width=1280,
        framebuffer_height=720,
        framebuffer_bpp=32,
    )
    assert MultibootInfo.from_bytes(info.to_bytes()) == info


def test_info_too_short():
    with pytest.raises(ValueError):
        MultibootInfo.from_bytes(bytes(50))


def test_module_round_trip():
    data = struct.pack("<4I", 0x100000, 0x200000, 0x300, 0)
    module = MultibootModule.from_bytes(data)
    assert module.mod_start == 0x100000
    assert module.mod_end == 0x200000
    assert module.to_bytes() == data


def test_module_too_short():
    with pytest.raises(ValueError):
        MultibootModule.from_bytes(b"\x00" * 8)


def make_memory():
    memory = bytearray(0x2000)
    memory[0x1000:0x1005] = b"hello"
    return bytes(memory)


def test_load_initrd_reads_module():
    memory = make_memory()
    initrd = load_initrd([MultibootModule(0x1000, 0x1400)], memory)
    assert isinstance(initrd, Initrd)
    assert initrd.size == 0x1400 - 0x1000
    assert initrd.data == memory[0x1000:0x1400]
    assert initrd.data.startswith(b"hello")


def test_load_initrd_without_modules():
    with pytest.raises(InitrdError):
        load_initrd([], make_memory())


@pytest.mark.parametrize(
    "start,end",
    [(0, 0x400), (0x1400, 0x1000), (0x1000, 0x1000)],
)
def test_load_initrd_invalid_range(start, end):
    with pytest.raises(InitrdError):
        load_initrd([MultibootModule(start, end)], make_memory())


def test_load_initrd_smaller_than_tar_header():
    with pytest.raises(InitrdError):
        load_initrd([MultibootModule(0x1000, 0x1100)], make_memory())


def test_load_initrd_outside_memory():
    with pytest.raises(InitrdError):
        load_initrd([MultibootModule(0x1000, 0x4000)], make_memory())