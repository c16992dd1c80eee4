"""Text-mode console backed by a simulated VGA character buffer."""

from __future__ import annotations

import enum
from typing import Any, Iterable

VGA_WIDTH = 80
VGA_HEIGHT = 25

MAXIMUM_PAGES = 16
SCROLL_UP = 1
SCROLL_DOWN = 2


class VgaColor(enum.IntEnum):
    BLACK = 0
    BLUE = 1
    GREEN = 2
    CYAN = 3
    RED = 4
    MAGENTA = 5
    BROWN = 6
    LIGHT_GREY = 7
    DARK_GREY = 8
    LIGHT_BLUE = 9
    LIGHT_GREEN = 10
    LIGHT_CYAN = 11
    LIGHT_RED = 12
    LIGHT_MAGENTA = 13
    LIGHT_BROWN = 14
    WHITE = 15


def vga_entry(c: str, color: int) -> int:
    """A 16-bit VGA cell: character in the low byte, attribute in the high."""
    return (ord(c) & 0xFF) | ((int(color) & 0xFF) << 8)


def vga_entry_color(fg: int, bg: int) -> int:
    """An attribute byte with ``fg`` in the low nibble and ``bg`` in the high."""
    return (int(fg) | (int(bg) << 4)) & 0xFF


def _to_signed32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def _convert_integer(conversion: str, value: int) -> str:
    if conversion == "d":
        return str(_to_signed32(value))
    if conversion == "u":
        return str(value & 0xFFFFFFFF)
    return format(value & 0xFFFFFFFF, "x")


def format_printf(fmt: str, *args: Any) -> str:
    """Render the kernel's minimal printf dialect.

    Supports ``%d``, ``%u``, ``%x`` and ``%s`` with an optional ``0`` flag
    and a single-digit width. Any other conversion consumes an argument
    and emits it as one character. A lone trailing ``%`` is kept as is.
    """
    pending = iter(args)

    def next_arg() -> Any:
        try:
            return next(pending)
        except StopIteration:
            raise ValueError("not enough arguments for format string") from None

    out: list[str] = []
    chars = iter(fmt)
    for c in chars:
        if c != "%":
            out.append(c)
            continue

        c = next(chars, "")
        pad0 = False
        pad = 0
        if c == "0":
            pad0 = True
            c = next(chars, "")
        if len(c) == 1 and c.isdigit():
            pad = int(c)
            c = next(chars, "")

        if c == "":
            out.append("%")
            break
        if c in ("d", "u", "x"):
            text = _convert_integer(c, int(next_arg()))
        elif c == "s":
            value = next_arg()
            text = "(null)" if value is None else str(value)
        else:
            value = next_arg()
            out.append(value[:1] if isinstance(value, str) else chr(int(value) & 0xFF))
            continue
        out.append(text.rjust(pad, "0" if pad0 else " "))
    return "".join(out)


class Console:
    """A character console drawing into a ``width`` x ``height`` cell buffer.

    Keyboard input comes from ``keys``; NUL characters in it are skipped,
    as the keyboard wait loop ignores them.
    """

    def __init__(
        self,
        width: int = VGA_WIDTH,
        height: int = VGA_HEIGHT,
        keys: Iterable[str] = "",
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("console dimensions must be positive")
        self.width = width
        self.height = height
        self.color = vga_entry_color(VgaColor.LIGHT_GREY, VgaColor.BLACK)
        self.buffer: list[int] = [vga_entry(" ", self.color)] * (width * height)
        self.x = 0
        self.y = 0
        self._keys = iter(keys)
        self.cursor_visible = True
        self.cursor_scanline_start = 0
        self.cursor_scanline_end = 0
        self.cursor_position = 0

    def put(self, c: str, color: int, x: int, y: int) -> None:
        """Store character ``c`` with attribute ``color`` at (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"cell ({x}, {y}) outside the console")
        self.buffer[y * self.width + x] = vga_entry(c, color)

    def _advance_line(self) -> None:
        self.y += 1
        if self.y == self.height:
            self.scroll()
            self.y = self.height - 1

    def putc(self, c: str) -> None:
        """Print one character at the current position and advance."""
        if c == "\n":
            self.newline()
            return
        self.put(c, self.color, self.x, self.y)
        self.x += 1
        if self.x == self.width:
            self.x = 0
            self._advance_line()

    def write(self, data: str) -> None:
        for c in data:
            self.putc(c)

    def puts(self, text: str) -> None:
        self.write(text)

    def color_print(self, text: str, color: int) -> None:
        """Print ``text`` with a temporary attribute."""
        previous = self.color
        self.color = int(color)
        try:
            self.puts(text)
        finally:
            self.color = previous

    def printf(self, fmt: str, *args: Any) -> None:
        self.puts(format_printf(fmt, *args))

    def newline(self) -> None:
        """Move to the start of the next line, scrolling at the bottom."""
        self.x = 0
        self._advance_line()

    def newline_keep_x(self) -> None:
        """Move down one line without changing the column."""
        if self.y >= self.height:
            self.scroll()
            return
        self.y += 1

    def scroll(self) -> None:
        """Shift every row up by one and blank the last row."""
        blank = vga_entry(" ", self.color)
        self.buffer = self.buffer[self.width:] + [blank] * self.width

    def gotoxy(self, x: int, y: int) -> None:
        self.x = x
        self.y = y

    def wherexy(self) -> tuple[int, int]:
        return self.x, self.y

    def getc(self) -> str:
        """Wait for the next non-NUL key; EOFError when input is exhausted."""
        for key in self._keys:
            if key != "\0":
                return key
        raise EOFError("no more keyboard input")

    def gets(self, size: int) -> str:
        """Read and echo up to ``size - 1`` characters, stopping at a newline.

        The newline is echoed but not included in the result.
        """
        if size <= 0:
            raise ValueError("buffer size must be positive")
        self.cursor_show()
        self.cursor_move(self.x, self.y)
        chars: list[str] = []
        try:
            while len(chars) < size - 1:
                key = self.getc()
                self.cursor_move(self.x + 1, self.y)
                self.putc(key)
                if key == "\n":
                    break
                chars.append(key)
        finally:
            self.cursor_disable()
        return "".join(chars)

    def cursor_enable(self, scanline_start: int, scanline_end: int) -> None:
        self.cursor_visible = True
        self.cursor_scanline_start = scanline_start
        self.cursor_scanline_end = scanline_end

    def cursor_disable(self) -> None:
        self.cursor_visible = False

    cursor_hide = cursor_disable

    def cursor_move(self, x: int, y: int) -> None:
        self.cursor_position = (y * self.width + x) & 0xFFFF

    def cursor_show(self) -> None:
        self.cursor_enable(self.cursor_scanline_start, self.cursor_scanline_end)

    def row(self, y: int) -> str:
        """The characters of row ``y`` as text."""
        if not 0 <= y < self.height:
            raise IndexError(f"row {y} outside the console")
        start = y * self.width
        return "".join(chr(cell & 0xFF) for cell in self.buffer[start:start + self.width])