# cubecore

`cubecore` models the core of a small 32-bit x86 kernel in plain Python.
A real kernel keeps these structures in memory or drives them through I/O
ports. Here each one is an ordinary object that you can build, inspect
and test without hardware or an emulator.

It has no runtime dependencies and needs Python 3.10 or later.

## Modules

| Module | Contents |
| --- | --- |
| `cubecore.colorspace` | Packed colour values: `make_rgb`, `make_rgba`, `invert_rgb`, `decode_rgb`, `decode_rgba`, and named `RGB_COLOR_*` constants |
| `cubecore.chunk` | `find_child(chunk_size, idx)` (truncating chunk/offset split), `sign`, `field_index` |
| `cubecore.descriptors` | `GdtEntry`, `make_gdt_entry`, `GlobalDescriptorTable`, `default_gdt`, `IdtEntry`, `InterruptDescriptorTable`, `TaskStateSegment`, `default_tss`, each packing to its exact byte layout |
| `cubecore.linkedlist` | `LinkedList` of `Node`s: insert and remove at both ends, `push`/`pop`, `unqueue`/`dequeue`, `index_of` (by identity), `node_at`, `remove_at` |
| `cubecore.generictree` | `GenericTree` of `TreeNode`s with `insert`, `find_parent`, `remove`, `to_list` and `to_array` |
| `cubecore.ringqueue` | `RingQueue`, a circular byte-buffer queue that grows by one slot when full and shrinks when it falls to a quarter of capacity |
| `cubecore.console` | `Console`, an 80x25 VGA text buffer with colours, scrolling, cursor state and keyboard input from an iterable; `VgaColor`, `vga_entry`, `vga_entry_color`, `format_printf` |
| `cubecore.debug` | `DebugLog`, a serial debug log with severity `Level`s; `format_number`; `kout`, which writes to a console and a log together |
| `cubecore.hook` | `HookList`, a bounded, named list of `Hook` callbacks. It raises `HookListFull` when it has no room |
| `cubecore.heap` | `FrameBitmap` for physical blocks and `Heap`, a best-fit allocator with boundary tags, splitting and coalescing |
| `cubecore.paging` | `PageDirectory` with `allocate`, `allocate_region`, `free`, `free_region`, `translate`, `unmap`, `mmap`, `munmap`, `mprotect`; page index and alignment helpers |
| `cubecore.bootinfo` | `MultibootInfo` and `MultibootModule` byte decoding and encoding; `load_initrd`, which returns an `Initrd` or raises `InitrdError` |

## Installing

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Examples

Colours are packed as `0xAARRGGBB`:

```python
from cubecore.colorspace import make_rgb, invert_rgb, decode_rgba

orange = make_rgb(255, 165, 0)
assert orange == 0xFFA500
assert invert_rgb(orange) == make_rgb(0, 90, 255)
assert decode_rgba(0x80FF0000) == (255, 0, 0, 128)
```

Descriptor tables are filled entry by entry and packed into the bytes
the CPU would load:

```python
from cubecore.descriptors import default_gdt, default_tss

gdt = default_gdt(tss_base=0x00100000)
assert len(gdt.pack()) == 8 * 8
pointer = gdt.pointer(0x00200000)   # 6-byte lgdt operand
tss_bytes = default_tss().pack()
```

The console keeps its cell buffer in memory, so you can read back what
would be on screen:

```python
from cubecore.console import Console

console = Console(keys="hi\n")
console.printf("%d items, %04x flags\n", 3, 0x1F)
assert console.row(0).rstrip() == "3 items, 001f flags"
line = console.gets(16)   # "hi", echoed to the screen
```

The debug log stays silent until you select a port. After that it
collects everything it sends:

```python
from cubecore.debug import COM1, DebugLog, Level, kout

log = DebugLog()
log.set_port(COM1)
log.message("ready", "boot", Level.OK)
kout(console, log, Level.WARNING, "boot", "low memory", None)
print(log.text)
```

Hooks run in the order they were registered. `call` returns how many of
them failed, meaning they returned something other than 0:

```python
from cubecore.hook import HookList

hooks = HookList("startup")
hooks.register(lambda arg: 0, "ok")
hooks.register(lambda arg: 1, "broken")
assert hooks.call() == 1
```

The heap hands out integer addresses inside its own arena. You read and
write them through the heap:

```python
from cubecore.heap import Heap

heap = Heap()
ptr = heap.malloc(40)
heap.write(ptr, b"payload")
assert heap.read(ptr, 7) == b"payload"
ptr = heap.realloc(ptr, 200)
assert heap.read(ptr, 7) == b"payload"
heap.free(ptr)
```

Page directories take their frames from a `FrameBitmap`. `mmap` starts at
`page_align(start_va)`, which moves up one page even from an aligned
address:

```python
from cubecore.heap import FrameBitmap
from cubecore.paging import PageDirectory, PROT_WRITE

pages = PageDirectory(FrameBitmap(64))
addr = pages.mmap(0x40000000, 8192, PROT_WRITE)
assert addr == 0x40001000
physical = pages.translate(addr + 0x10)
pages.munmap(0x40000000, 8192)
```

## What it does not do

- It runs nothing on real hardware. It does no port I/O, loads no
  descriptor tables into a CPU and does not switch page directories.
  The structures are only built and packed.
- It has no interrupt dispatch, exception handling or panic routine.
  It also has no registry of loadable kernel interfaces and no table of
  error numbers.
- It reads no filesystem. `load_initrd` only checks the RAM disk and
  copies its bytes out of a given memory image.
- There is no command-line program. Use the package by importing its
  modules.