"""Named lists of startup callbacks that run in registration order."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from cubecore.console import Console, VgaColor
from cubecore.debug import DebugLog, Level

HOOKS_MAX = 256

HookCallback = Callable[[Any], int]


@dataclass
class Hook:
    """A registered callback with its display name and argument."""

    name: str
    callback: HookCallback
    arg: Any = None


class HookListFull(Exception):
    """Raised when a hook list has no room for another entry."""


class HookList:
    """A named, bounded list of hooks.

    A callback returns 0 on success and any other value on failure.
    """

    def __init__(
        self,
        name: str,
        console: Optional[Console] = None,
        log: Optional[DebugLog] = None,
        capacity: int = HOOKS_MAX,
    ) -> None:
        self.name = name
        self.capacity = capacity
        self.hooks: list[Hook] = []
        self.console = console if console is not None else Console()
        self.log = log if log is not None else DebugLog()

    def __len__(self) -> int:
        return len(self.hooks)

    def _report_failure(self, name: str, reason: str) -> None:
        self.log.message('Could not register a new hook: "', "hook", Level.ERROR)
        self.log.append(name)
        self.log.append('" on: ')
        self.log.append(self.name)
        self.log.append(" - ")
        self.log.append(reason)

    def register(
        self,
        callback: Optional[HookCallback],
        name: Optional[str] = None,
        arg: Any = None,
    ) -> int:
        """Add a hook and return its index in the list."""
        label = "(null)" if name is None else name
        if callback is None:
            self._report_failure(label, "invalid callback function")
            raise ValueError("invalid callback function")
        if len(self.hooks) >= self.capacity:
            self._report_failure(label, "not enough space for a new hook")
            raise HookListFull("not enough space for a new hook")

        index = len(self.hooks)
        self.hooks.append(Hook(label, callback, arg))

        self.log.message('Registered a new hook: "', "hook", Level.MESSAGE)
        self.log.append(label)
        self.log.append('" @ ')
        self.log.append(self.name)
        self.log.append(":")
        self.log.number(index, 10)
        return index

    def call(self) -> int:
        """Run every hook in order and return how many of them failed."""
        self.log.message('Executing "', "hook", Level.MESSAGE)
        self.log.append(self.name)
        self.log.append('" hooks...')

        self.console.puts('\nExecuting "')
        self.console.puts(self.name)
        self.console.puts('" hooks...')

        errors = 0
        for hook in self.hooks:
            self.console.puts("\n--> executing hook: ")
            self.console.puts(hook.name)
            self.console.puts("... ")

            status = hook.callback(hook.arg)

            self.log.message("--> executed hook: ", "hook", Level.MESSAGE)
            self.log.append(hook.name)
            self.log.append("; with code: ")
            self.log.number(status, 16)

            if status == 0:
                self.console.color_print("OK", VgaColor.LIGHT_GREEN)
            else:
                self.console.color_print("FAILED", VgaColor.LIGHT_RED)
                errors += 1

        self.console.puts("\nHook list execution completed.")

        self.log.message("Completed running all hooks with ", "hook", Level.MESSAGE)
        self.log.number(errors, 10)
        self.log.append(" errors in total ")
        self.log.number(len(self.hooks), 10)
        self.log.append(" of executed callbacks.")
        return errors