"""Serial debug log and the kernel's combined screen/log output."""

from __future__ import annotations

import enum
from typing import Callable, Optional

from cubecore.console import Console, VgaColor, vga_entry_color

COM1 = 0x3F8
COM2 = 0x2F8

SEPARATOR_LENGTH = 80

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

_LABELS = (
    "[   ***   ]",
    "[ NOTE    ]",
    "[ NOTE !! ]",
    "[ WARNING ]",
    "[ ERROR   ]",
    "[ FATAL   ]",
    "[ VERBOSE ]",
    "[ OKAY    ]",
    "[ FAIL    ]",
    "[ PENDING ]",
)

_COLORS = (7, 7, 5, 14, 4, 4, 8, 10, 4, 1)

_NUMBER_PREFIXES = {0: "", 10: "", 1: "0b", 12: "0c", 16: "0x"}
_MESSAGE_PREFIXES = {16: "0x", 12: "0c", 2: "0b"}


class Level(enum.IntEnum):
    MESSAGE = 0
    INFORMATION = 1
    IMPORTANT = 2
    WARNING = 3
    ERROR = 4
    FATAL = 5
    VERBOSE = 6
    OK = 7
    FAIL = 8
    PENDING = 9

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def color(self) -> int:
        return _COLORS[self]


def format_number(number: int, base: int) -> str:
    """Digits of ``number`` in ``base`` (0 means 10), without a prefix.

    Negative numbers keep a minus sign in base 10 and are shown as their
    32-bit two's complement in any other base.
    """
    if base == 0:
        base = 10
    if not 2 <= base <= 36:
        raise ValueError(f"unsupported number base {base}")
    if number < 0:
        if base == 10:
            return "-" + format_number(-number, 10)
        number &= 0xFFFFFFFF
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, base)
        digits.append(_DIGITS[rem])
    return "".join(reversed(digits))


class DebugLog:
    """Debug output over a serial port; silent until a port is set."""

    def __init__(
        self,
        console: Optional[Console] = None,
        write: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.console = console
        self._write = write
        self._chunks: list[str] = []
        self.enabled = False
        self.verbose = False
        self.port: Optional[int] = None
        self.breakpoints = 0

    @property
    def text(self) -> str:
        """Everything sent to the port so far."""
        return "".join(self._chunks)

    def _emit(self, data: str) -> None:
        self._chunks.append(data)
        if self._write is not None:
            self._write(data)

    def set_port(self, port: int) -> None:
        """Select COM1 or COM2 for output; 0 disables the log."""
        if port == 0:
            self.enabled = False
            return
        if port not in (COM1, COM2):
            self.enabled = False
            raise ValueError("Debug port not supported")
        self.port = port
        self.enabled = True
        if self.console is not None:
            color = vga_entry_color(VgaColor.LIGHT_CYAN, VgaColor.BLACK)
            self.console.color_print("Port ", color)
            self.console.color_print("COM1" if port == COM1 else "COM2", color)
            self.console.color_print(" used as a debug port. ", color)
            self.console.color_print(
                "You should be able to use debug features after connecting "
                "the debugger via this port.\n",
                color,
            )

    def set_verbose(self, verbose: bool) -> None:
        if not self.enabled:
            return
        self.verbose = bool(verbose)
        self.message("Verbose flag enabled", None, Level.VERBOSE)

    def append(self, data: str) -> None:
        if self.enabled:
            self._emit(data)

    def message(self, message: Optional[str], interface: Optional[str], level: Level) -> None:
        """Start a new log line with a level label and optional interface tag."""
        if not self.enabled:
            return
        if level == Level.VERBOSE and not self.verbose:
            return
        self.append("\n\rDEBUG: ")
        if message is None:
            self.append("\n\r")
            return
        self.append(Level(level).label)
        if interface is not None:
            self.append("[")
            self.append(interface)
            self.append("] ")
        self.append(message)

    def separator(self, title: Optional[str]) -> None:
        if not self.enabled:
            return
        if title is not None:
            self.append("DEBUG: << [ ")
            self.append(title)
            self.append(" ] >>\n\r")
        self.append("-" * SEPARATOR_LENGTH)
        self.append("\n\r")

    def breakpoint(self) -> None:
        """Mark a numbered pseudo-breakpoint in the log."""
        if not self.enabled:
            return
        self.append("\n ------------------ BREAKPOINT INSERTED: ")
        self.number(self.breakpoints, 10)
        self.append(" ------------------\n")
        self.breakpoints += 1

    def number(self, number: int, base: int) -> None:
        """Append ``number`` with a base prefix; bases 0, 1, 10, 12 and 16.

        Base 1 is written in binary with the ``0b`` prefix.
        """
        if base not in _NUMBER_PREFIXES:
            raise ValueError("Invalid number base")
        digits = format_number(number, 2 if base == 1 else base)
        self.append(_NUMBER_PREFIXES[base])
        self.append(digits)

    def message_number(
        self,
        message: Optional[str],
        interface: Optional[str],
        level: Level,
        number: int,
        base: int,
    ) -> None:
        """A message followed directly by a prefixed number."""
        digits = format_number(number, base)
        self.message(message, interface, level)
        self.append(_MESSAGE_PREFIXES.get(base, ""))
        self.append(digits)

    def putc(self, c: str) -> None:
        """Send one character to the port, whether or not logging is enabled."""
        self._emit(c)


def kout(
    console: Console,
    log: DebugLog,
    level: Level,
    interface: Optional[str],
    message: Optional[str],
    query: Optional[str],
) -> None:
    """Report a status line to both the debug log and the screen."""
    level = Level(level)
    log.message(message, interface, level)
    if query is not None:
        log.append(" ")
        log.append(query)

    if message is None:
        return

    color = level.color
    console.color_print(level.label, color)
    console.putc(" ")
    if interface is not None:
        console.putc("@")
        console.color_print(interface, color)
        console.putc(":")
        console.putc(" ")
    console.color_print(message, color)
    if query is not None:
        console.putc(" ")
        console.color_print(query, VgaColor.WHITE)
    console.putc("\n")