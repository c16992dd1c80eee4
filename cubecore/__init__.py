"""In-memory models of a small x86 kernel: console, debug log, descriptor tables,
hooks, heap, paging, boot info and kernel data structures."""

__version__ = "0.1.0"