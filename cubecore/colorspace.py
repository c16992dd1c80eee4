"""Packed 32-bit RGB/RGBA colour values."""

from __future__ import annotations

_U32 = 0xFFFFFFFF


def make_rgb(r: int, g: int, b: int) -> int:
    """Pack red, green and blue components into a 0x00RRGGBB value."""
    return ((r << 16) | (g << 8) | b) & _U32


def make_rgba(r: int, g: int, b: int, a: int) -> int:
    """Pack components into a 0xAARRGGBB value."""
    return ((a << 24) | make_rgb(r, g, b)) & _U32


def invert_rgb(rgb: int) -> int:
    """Invert each colour component of an RGB value; alpha is dropped."""
    r, g, b = decode_rgb(rgb)
    return make_rgb(255 - r, 255 - g, 255 - b)


def decode_rgb(rgb: int) -> tuple[int, int, int]:
    """Split an RGB value into (r, g, b)."""
    return (rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF


def decode_rgba(rgba: int) -> tuple[int, int, int, int]:
    """Split an RGBA value into (r, g, b, a)."""
    r, g, b = decode_rgb(rgba)
    return r, g, b, (rgba >> 24) & 0xFF


RGB_COLOR_BLACK = make_rgb(0, 0, 0)
RGB_COLOR_WHITE = make_rgb(255, 255, 255)
RGB_COLOR_RED = make_rgb(255, 0, 0)
RGB_COLOR_GREEN = make_rgb(0, 255, 0)
RGB_COLOR_BLUE = make_rgb(0, 0, 255)
RGB_COLOR_YELLOW = make_rgb(255, 255, 0)
RGB_COLOR_CYAN = make_rgb(0, 255, 255)
RGB_COLOR_MAGENTA = make_rgb(255, 0, 255)
RGB_COLOR_GRAY = make_rgb(128, 128, 128)
RGB_COLOR_LIGHT_GRAY = make_rgb(211, 211, 211)
RGB_COLOR_DARK_GRAY = make_rgb(169, 169, 169)
RGB_COLOR_ORANGE = make_rgb(255, 165, 0)
RGB_COLOR_PURPLE = make_rgb(128, 0, 128)
RGB_COLOR_BROWN = make_rgb(165, 42, 42)
RGB_COLOR_PINK = make_rgb(255, 192, 203)
RGB_COLOR_NAVY = make_rgb(0, 0, 128)
RGB_COLOR_TEAL = make_rgb(0, 128, 128)
RGB_COLOR_OLIVE = make_rgb(128, 128, 0)
RGB_COLOR_LIGHT_BLUE = make_rgb(173, 216, 230)
RGB_COLOR_VIOLET = make_rgb(238, 130, 238)
RGB_COLOR_SALMON = make_rgb(250, 128, 114)
RGB_COLOR_GOLD = make_rgb(255, 215, 0)
RGB_COLOR_SILVER = make_rgb(192, 192, 192)
RGB_COLOR_LIME = make_rgb(0, 255, 0)