"""
ETC1 / ETC1A4 block codec.

The 3DS variant of ETC1 stores every 4x4 block as a little-endian 64-bit word
(optionally preceded by a little-endian 64-bit table of 4-bit alpha values).
Blocks are visited in the same Morton order as every other pixel, so the 16
colors of one bundle are exchanged in Morton order as well:

    index k -> x = (k & 1) | ((k >> 1) & 2),  y = ((k >> 1) & 1) | ((k >> 2) & 2)

Inside the block word (and the alpha table) pixels are numbered column-major,
j = x * 4 + y.

Block word layout (bit 63 first):
    individual:   R1:4 R2:4 G1:4 G2:4 B1:4 B2:4 | table1:3 table2:3 diff:1 flip:1
    differential: R:5 dR:3  G:5 dG:3  B:5 dB:3  | table1:3 table2:3 diff:1 flip:1
    low 32 bits:  selector MSBs (bits 16-31), selector LSBs (bits 0-15)
"""

from __future__ import annotations

from typing import List, Protocol, Sequence, Tuple

from .bitstream import BitReader, BitWriter
from .formats import Color


BLOCK_PIXELS = 16

# Selector order: +small, +large, -small, -large
ETC1_MODIFIER_TABLES = [
    (2, 8, -2, -8),
    (5, 17, -5, -17),
    (9, 29, -9, -29),
    (13, 42, -13, -42),
    (18, 60, -18, -60),
    (24, 80, -24, -80),
    (33, 106, -33, -106),
    (47, 183, -47, -183),
]

# Morton bundle index -> column-major pixel index
BUNDLE_TO_PIXEL = [
    (((k & 1) | ((k >> 1) & 2)) * 4) + (((k >> 1) & 1) | ((k >> 2) & 2))
    for k in range(BLOCK_PIXELS)
]


class BlockCodec(Protocol):
    def decode_block_bundle(self, reader: BitReader, has_alpha: bool) -> List[Color]:
        ...

    def encode_block_bundle(self, colors: Sequence[Color], has_alpha: bool, writer: BitWriter):
        ...


def clamp_to_byte(n: int) -> int:
    return max(0, min(255, n))


def _expand4(v: int) -> int:
    return v * 17


def _expand5(v: int) -> int:
    return (v << 3) | (v >> 2)


def _in_first_half(pixel: int, flip: int) -> bool:
    x, y = divmod(pixel, 4)
    return (y if flip else x) < 2


def decode_color_block(block: int) -> List[Tuple[int, int, int]]:
    """
    Decode one ETC1 block word into 16 RGB tuples in column-major pixel order.
    """
    high = block >> 32
    flip = high & 1
    diff = (high >> 1) & 1
    table1 = ETC1_MODIFIER_TABLES[(high >> 5) & 7]
    table2 = ETC1_MODIFIER_TABLES[(high >> 2) & 7]

    if diff:
        base1 = []
        base2 = []
        for shift in (27, 19, 11):
            c = (high >> shift) & 0x1F
            d = (high >> (shift - 3)) & 0x7
            if d >= 4:
                d -= 8
            base1.append(_expand5(c))
            base2.append(_expand5(max(0, min(31, c + d))))
    else:
        base1 = [_expand4((high >> shift) & 0xF) for shift in (28, 20, 12)]
        base2 = [_expand4((high >> shift) & 0xF) for shift in (24, 16, 8)]

    pixels = []
    for j in range(BLOCK_PIXELS):
        if _in_first_half(j, flip):
            base, table = base1, table1
        else:
            base, table = base2, table2
        selector = (((block >> (16 + j)) & 1) << 1) | ((block >> j) & 1)
        mod = table[selector]
        pixels.append(tuple(clamp_to_byte(c + mod) for c in base))
    return pixels


def _average(pixels: Sequence[Tuple[int, int, int]]) -> Tuple[int, int, int]:
    n = len(pixels)
    return tuple((sum(p[i] for p in pixels) + n // 2) // n for i in range(3))


def _error(a: Sequence[int], b: Sequence[int]) -> int:
    return sum((x - y) * (x - y) for x, y in zip(a, b))


def _fit_half(pixels: Sequence[Tuple[int, int, int]], base: Sequence[int]) -> Tuple[int, int, List[int]]:
    """Pick the modifier table and selectors that best fit pixels around base."""
    best = None
    for t, table in enumerate(ETC1_MODIFIER_TABLES):
        total = 0
        selectors = []
        for p in pixels:
            errs = [_error(p, [clamp_to_byte(c + mod) for c in base]) for mod in table]
            s = errs.index(min(errs))
            selectors.append(s)
            total += errs[s]
        if best is None or total < best[0]:
            best = (total, t, selectors)
    return best


def _base_candidates(avg1, avg2):
    """Yield (diff, fields1, fields2, base1, base2) for both base color modes."""
    q1 = [min(15, (c + 8) // 17) for c in avg1]
    q2 = [min(15, (c + 8) // 17) for c in avg2]
    yield 0, q1, q2, [_expand4(c) for c in q1], [_expand4(c) for c in q2]

    d1 = [min(31, (c * 31 + 127) // 255) for c in avg1]
    d2 = [min(31, (c * 31 + 127) // 255) for c in avg2]
    deltas = [b - a for a, b in zip(d1, d2)]
    if all(-4 <= d <= 3 for d in deltas):
        yield 1, d1, deltas, [_expand5(c) for c in d1], [_expand5(c) for c in d2]


def encode_color_block(pixels: Sequence[Tuple[int, int, int]]) -> int:
    """
    Encode 16 RGB tuples (column-major pixel order) into one ETC1 block word.
    """
    if len(pixels) != BLOCK_PIXELS:
        raise ValueError(f"ETC1 block must have 16 pixels, got {len(pixels)}")

    best = None
    for flip in (0, 1):
        first = [j for j in range(BLOCK_PIXELS) if _in_first_half(j, flip)]
        second = [j for j in range(BLOCK_PIXELS) if not _in_first_half(j, flip)]
        avg1 = _average([pixels[j] for j in first])
        avg2 = _average([pixels[j] for j in second])

        for diff, fields1, fields2, base1, base2 in _base_candidates(avg1, avg2):
            err1, t1, sel1 = _fit_half([pixels[j] for j in first], base1)
            err2, t2, sel2 = _fit_half([pixels[j] for j in second], base2)
            total = err1 + err2
            if best is None or total < best[0]:
                selectors = [0] * BLOCK_PIXELS
                for j, s in zip(first, sel1):
                    selectors[j] = s
                for j, s in zip(second, sel2):
                    selectors[j] = s
                best = (total, flip, diff, fields1, fields2, t1, t2, selectors)

    _, flip, diff, fields1, fields2, t1, t2, selectors = best

    high = (t1 << 5) | (t2 << 2) | (diff << 1) | flip
    if diff:
        for shift, c, d in zip((27, 19, 11), fields1, fields2):
            high |= (c << shift) | ((d & 7) << (shift - 3))
    else:
        for shift, c1, c2 in zip((28, 20, 12), fields1, fields2):
            high |= (c1 << shift) | (c2 << (shift - 4))

    low = 0
    for j, s in enumerate(selectors):
        low |= ((s >> 1) << (16 + j)) | ((s & 1) << j)

    return (high << 32) | low


def encode_alpha_block(alphas: Sequence[int]) -> int:
    """Pack 16 alpha values (column-major pixel order) into the 4-bit alpha table."""
    table = 0
    for j, a in enumerate(alphas):
        table |= (a // 16) << (j * 4)
    return table


class ETC1Codec:
    """Default BlockCodec for the ETC1 and ETC1A4 formats."""

    def decode_block_bundle(self, reader: BitReader, has_alpha: bool) -> List[Color]:
        alpha = reader.read_u64() if has_alpha else 0xFFFFFFFFFFFFFFFF
        rgb = decode_color_block(reader.read_u64())

        colors = []
        for j in BUNDLE_TO_PIXEL:
            r, g, b = rgb[j]
            a = ((alpha >> (j * 4)) & 0xF) * 17
            colors.append(Color(a, r, g, b))
        return colors

    def encode_block_bundle(self, colors: Sequence[Color], has_alpha: bool, writer: BitWriter):
        if len(colors) != BLOCK_PIXELS:
            raise ValueError(f"Block bundle must have 16 colors, got {len(colors)}")

        pixels = [None] * BLOCK_PIXELS
        alphas = [0] * BLOCK_PIXELS
        for color, j in zip(colors, BUNDLE_TO_PIXEL):
            pixels[j] = (color.r, color.g, color.b)
            alphas[j] = color.a

        if has_alpha:
            writer.write_u64(encode_alpha_block(alphas))
        writer.write_u64(encode_color_block(pixels))
