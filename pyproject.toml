[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cubecore"
version = "0.1.0"
description = "In-memory models of a small x86 kernel's core: VGA console, serial debug log, descriptor tables, heap, paging, boot info and kernel data structures."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "kernel",
    "x86",
    "gdt",
    "idt",
    "tss",
    "paging",
    "heap",
    "allocator",
    "vga",
    "multiboot",
    "simulation",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System Kernels",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cubecore"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
