"""
Texture format definitions shared by the codec, swizzle and pipeline modules.

Format numbering matches GPU_TEXCOLOR in ctrulib, so header values read from
CGFX/BCLIM files can be passed through unchanged.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class UnsupportedFormat(ValueError):
    pass


class UnsupportedOrientation(ValueError):
    pass


class Format(enum.IntEnum):
    RGBA8888 = 0x00
    RGB888 = 0x01
    RGBA5551 = 0x02
    RGB565 = 0x03
    RGBA4444 = 0x04
    LA88 = 0x05
    HL88 = 0x06
    L8 = 0x07
    A8 = 0x08
    LA44 = 0x09
    L4 = 0x0A
    A4 = 0x0B
    ETC1 = 0x0C
    ETC1A4 = 0x0D


class Orientation(enum.IntEnum):
    DEFAULT = 0
    TRANSPOSE_TILE = 1
    ROTATE_90 = 4
    TRANSPOSE = 8


# Block formats are amortized over a 4x4 block (8 or 16 bytes per 16 pixels)
BITS_PER_PIXEL = {
    Format.RGBA8888: 32,
    Format.RGB888: 24,
    Format.RGBA5551: 16,
    Format.RGB565: 16,
    Format.RGBA4444: 16,
    Format.LA88: 16,
    Format.HL88: 16,
    Format.L8: 8,
    Format.A8: 8,
    Format.LA44: 8,
    Format.L4: 4,
    Format.A4: 4,
    Format.ETC1: 4,
    Format.ETC1A4: 8,
}

BLOCK_FORMATS = (Format.ETC1, Format.ETC1A4)


def resolve_format(value: Any) -> Format:
    """Validate a format value, raising UnsupportedFormat for anything outside Format."""
    try:
        return Format(value)
    except ValueError:
        raise UnsupportedFormat(f"Unsupported texture format: {value!r}") from None


def resolve_orientation(value: Any) -> Orientation:
    """Validate an orientation value, raising UnsupportedOrientation for unknown values."""
    try:
        return Orientation(value)
    except ValueError:
        raise UnsupportedOrientation(f"Unsupported orientation: {value!r}") from None


def convert_format(original: Any) -> Format:
    """
    Map a container-specific format onto Format by member name.

    Containers number their formats differently (e.g. RGBA4444 = 1 in some
    headers), but the member names agree. Accepts an enum member or a name.

    Args:
        original: Enum member from another format enum, or its name

    Returns:
        The Format member with the same name
    """
    name = original.name if isinstance(original, enum.Enum) else str(original)
    try:
        return Format[name.upper()]
    except KeyError:
        raise UnsupportedFormat(f"Unsupported texture format: {name}") from None


def bits_per_pixel(fmt: Any) -> int:
    return BITS_PER_PIXEL[resolve_format(fmt)]


@dataclass(frozen=True)
class Color:
    """One ARGB pixel; every channel is 0-255."""
    a: int = 255
    r: int = 255
    g: int = 255
    b: int = 255

    @classmethod
    def from_rgba(cls, rgba: tuple[int, ...]) -> Color:
        r, g, b, a = rgba
        return cls(a, r, g, b)

    def to_rgba(self) -> tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    @classmethod
    def from_argb(cls, value: int) -> Color:
        return cls((value >> 24) & 0xFF, (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)

    def to_argb(self) -> int:
        return (self.a << 24) | (self.r << 16) | (self.g << 8) | self.b


@dataclass(frozen=True)
class ConversionSettings:
    width: int
    height: int
    format: Format
    orientation: Orientation = Orientation.DEFAULT
    pad_to_power_of_2: bool = True
