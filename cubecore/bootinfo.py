"""Multiboot information structures and the initial ramdisk module."""

from __future__ import annotations

import struct
from dataclasses import dataclass, fields
from typing import Sequence

MULTIBOOT_MAGIC_HEADER = 0x1BADB002
MULTIBOOT_BOOTLOADER_MAGIC = 0x2BADB002

MULTIBOOT_MEMORY_AVAILABLE = 1
MULTIBOOT_MEMORY_RESERVED = 2
MULTIBOOT_MEMORY_ACPI_RECLAIMABLE = 3
MULTIBOOT_MEMORY_NVS = 4
MULTIBOOT_MEMORY_BADRAM = 5

TAR_HEADER_SIZE = 512

# 7 u32, the 16-byte symbol union as 4 u32, 9 u32, 4 u16, u64, 3 u32, 2 u8.
_INFO = struct.Struct("<7I4I9I4HQ3IBB")
_MODULE = struct.Struct("<4I")


@dataclass
class MultibootInfo:
    """Boot information handed over by a Multiboot loader."""

    flags: int = 0
    mem_low: int = 0
    mem_high: int = 0
    boot_device: int = 0
    cmdline: int = 0
    modules_count: int = 0
    modules_addr: int = 0
    syms: tuple[int, int, int, int] = (0, 0, 0, 0)
    mmap_length: int = 0
    mmap_addr: int = 0
    drives_length: int = 0
    drives_addr: int = 0
    config_table: int = 0
    boot_loader_name: int = 0
    apm_table: int = 0
    vbe_control_info: int = 0
    vbe_mode_info: int = 0
    vbe_mode: int = 0
    vbe_interface_seg: int = 0
    vbe_interface_off: int = 0
    vbe_interface_len: int = 0
    framebuffer_addr: int = 0
    framebuffer_pitch: int = 0
    framebuffer_width: int = 0
    framebuffer_height: int = 0
    framebuffer_bpp: int = 0
    framebuffer_type: int = 0

    SIZE = _INFO.size

    @classmethod
    def from_bytes(cls, data: bytes) -> "MultibootInfo":
        """Decode the little-endian structure at the start of ``data``."""
        if len(data) < _INFO.size:
            raise ValueError(
                f"multiboot info needs {_INFO.size} bytes, got {len(data)}"
            )
        values = _INFO.unpack_from(data)
        head, syms, tail = values[:7], tuple(values[7:11]), values[11:]
        return cls(*head, syms, *tail)

    def to_bytes(self) -> bytes:
        """Encode in the same layout ``from_bytes`` reads."""
        values = []
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "syms":
                values.extend(value)
            else:
                values.append(value)
        return _INFO.pack(*values)


@dataclass
class MultibootModule:
    """A boot module: physical address range and command-line pointer."""

    mod_start: int
    mod_end: int
    string: int = 0
    reserved: int = 0

    SIZE = _MODULE.size

    @classmethod
    def from_bytes(cls, data: bytes) -> "MultibootModule":
        if len(data) < _MODULE.size:
            raise ValueError(
                f"multiboot module needs {_MODULE.size} bytes, got {len(data)}"
            )
        return cls(*_MODULE.unpack_from(data))

    def to_bytes(self) -> bytes:
        return _MODULE.pack(self.mod_start, self.mod_end, self.string, self.reserved)


class InitrdError(Exception):
    """Raised when the initial ramdisk cannot be located or is unusable."""


@dataclass(frozen=True)
class Initrd:
    """The initial ramdisk: its physical range and contents."""

    start: int
    end: int
    data: bytes

    @property
    def size(self) -> int:
        return self.end - self.start


def load_initrd(modules: Sequence[MultibootModule], memory: bytes) -> Initrd:
    """Take the first boot module as the ramdisk.

    ``memory`` is physical memory starting at address 0.
    """
    if not modules:
        raise InitrdError("initrd not found")
    module = modules[0]
    if module.mod_start >= module.mod_end or module.mod_start == 0:
        raise InitrdError("Invalid initrd module range")
    if module.mod_end > len(memory):
        raise InitrdError("initrd module lies outside physical memory")
    initrd = Initrd(
        module.mod_start,
        module.mod_end,
        bytes(memory[module.mod_start:module.mod_end]),
    )
    if initrd.size < TAR_HEADER_SIZE:
        raise InitrdError("initrd size is smaller than a tar header")
    return initrd