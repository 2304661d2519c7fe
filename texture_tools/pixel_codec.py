"""
Per-format pixel codec.

Each non-block format has a decoder (BitReader -> Color) and an encoder
(Color, BitWriter). Channel expansion uses the same integer formulas as the
hardware tools (5-bit v -> v*33/4, 6-bit v -> v*65/16, 4-bit v -> v*17), so
data survives a decode/encode round trip bit for bit.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .bitstream import BitReader, BitWriter
from .etc1 import BLOCK_PIXELS, BlockCodec, ETC1Codec
from .formats import BITS_PER_PIXEL, BLOCK_FORMATS, Color, Format, resolve_format

logger = logging.getLogger(__name__)


def _decode_rgb565(br: BitReader) -> Color:
    s = br.read_u16()
    return Color(
        r=(s >> 11) * 33 // 4,
        g=(s >> 5) % 64 * 65 // 16,
        b=(s % 32) * 33 // 4,
    )


def _decode_rgba5551(br: BitReader) -> Color:
    s = br.read_u16()
    return Color(
        a=(s & 1) * 255,
        r=(s >> 11) % 32 * 33 // 4,
        g=(s >> 6) % 32 * 33 // 4,
        b=(s >> 1) % 32 * 33 // 4,
    )


def _decode_la44(br: BitReader) -> Color:
    a = br.read_nibble() * 17
    lum = br.read_nibble() * 17
    return Color(a, lum, lum, lum)


def _decode_la88(br: BitReader) -> Color:
    a = br.read_u8()
    lum = br.read_u8()
    return Color(a, lum, lum, lum)


def _decode_hl88(br: BitReader) -> Color:
    g = br.read_u8()
    r = br.read_u8()
    return Color(r=r, g=g)


def _decode_rgb888(br: BitReader) -> Color:
    b, g, r = br.read_u8(), br.read_u8(), br.read_u8()
    return Color(r=r, g=g, b=b)


def _decode_rgba4444(br: BitReader) -> Color:
    a, b, g, r = (br.read_nibble() * 17 for _ in range(4))
    return Color(a, r, g, b)


def _decode_rgba8888(br: BitReader) -> Color:
    a, b, g, r = br.read_bytes(4)
    return Color(a, r, g, b)


def _decode_l8(br: BitReader) -> Color:
    lum = br.read_u8()
    return Color(r=lum, g=lum, b=lum)


def _decode_l4(br: BitReader) -> Color:
    lum = br.read_nibble() * 17
    return Color(r=lum, g=lum, b=lum)


def _encode_la44(c: Color, bw: BitWriter):
    bw.write_nibble(c.a // 16)
    bw.write_nibble(c.g // 16)


def _encode_rgba4444(c: Color, bw: BitWriter):
    for v in (c.a, c.b, c.g, c.r):
        bw.write_nibble(v // 16)


def _encode_rgb565(c: Color, bw: BitWriter):
    bw.write_u16((c.r // 8 << 11) | (c.g // 4 << 5) | (c.b // 8))


def _encode_rgba5551(c: Color, bw: BitWriter):
    bw.write_u16((c.r // 8 << 11) | (c.g // 8 << 6) | (c.b // 8 << 1) | (c.a // 128))


PixelDecoder = Callable[[BitReader], Color]
PixelEncoder = Callable[[Color, BitWriter], None]

PIXEL_CODECS: Dict[Format, Tuple[PixelDecoder, PixelEncoder]] = {
    Format.L8: (_decode_l8, lambda c, bw: bw.write_u8(c.g)),
    Format.A8: (lambda br: Color(a=br.read_u8()), lambda c, bw: bw.write_u8(c.a)),
    Format.LA44: (_decode_la44, _encode_la44),
    Format.LA88: (_decode_la88, lambda c, bw: bw.write_bytes((c.a, c.g))),
    Format.HL88: (_decode_hl88, lambda c, bw: bw.write_bytes((c.g, c.r))),
    Format.RGB565: (_decode_rgb565, _encode_rgb565),
    Format.RGB888: (_decode_rgb888, lambda c, bw: bw.write_bytes((c.b, c.g, c.r))),
    Format.RGBA5551: (_decode_rgba5551, _encode_rgba5551),
    Format.RGBA4444: (_decode_rgba4444, _encode_rgba4444),
    Format.RGBA8888: (_decode_rgba8888, lambda c, bw: bw.write_bytes((c.a, c.b, c.g, c.r))),
    Format.L4: (_decode_l4, lambda c, bw: bw.write_nibble(c.g // 16)),
    Format.A4: (lambda br: Color(a=br.read_nibble() * 17), lambda c, bw: bw.write_nibble(c.a // 16)),
}


def decode_pixel(br: BitReader, fmt: Format) -> Color:
    """Decode a single pixel of a non-block format."""
    fmt = resolve_format(fmt)
    if fmt in BLOCK_FORMATS:
        raise ValueError(f"{fmt.name} is block compressed; decode whole blocks instead")
    return PIXEL_CODECS[fmt][0](br)


def encode_pixel(color: Color, fmt: Format, bw: BitWriter):
    """Encode a single pixel of a non-block format."""
    fmt = resolve_format(fmt)
    if fmt in BLOCK_FORMATS:
        raise ValueError(f"{fmt.name} is block compressed; encode whole blocks instead")
    PIXEL_CODECS[fmt][1](color, bw)


def iter_colors(data: bytes, fmt: Format, block_codec: Optional[BlockCodec] = None) -> Iterator[Color]:
    """
    Decode colors from texture data in stream order.

    The format is validated before the first byte is read. Iteration ends when
    fewer bits remain than the next pixel (or block) needs.

    Args:
        data: Raw texture bytes
        fmt: Format of the data
        block_codec: Codec for ETC1/ETC1A4 (defaults to ETC1Codec)

    Returns:
        Iterator of Color
    """
    fmt = resolve_format(fmt)
    reader = BitReader(data)

    if fmt in BLOCK_FORMATS:
        codec = block_codec or ETC1Codec()
        return _iter_block_colors(reader, codec, fmt == Format.ETC1A4)
    return _iter_pixel_colors(reader, PIXEL_CODECS[fmt][0], BITS_PER_PIXEL[fmt])


def _iter_pixel_colors(reader: BitReader, decode: PixelDecoder, bits: int) -> Iterator[Color]:
    while reader.remaining_bits >= bits:
        yield decode(reader)


def _iter_block_colors(reader: BitReader, codec: BlockCodec, has_alpha: bool) -> Iterator[Color]:
    block_bits = 128 if has_alpha else 64
    while reader.remaining_bits >= block_bits:
        yield from codec.decode_block_bundle(reader, has_alpha)


class ColorEncoder:
    """
    Accumulates colors in stream order and produces the encoded bytes.

    Block formats are buffered 16 colors at a time and handed to the block
    codec as complete bundles.
    """

    def __init__(self, fmt: Format, block_codec: Optional[BlockCodec] = None):
        self.format = resolve_format(fmt)
        self.writer = BitWriter()
        self.block_codec = None
        self.pending: List[Color] = []
        if self.format in BLOCK_FORMATS:
            self.block_codec = block_codec or ETC1Codec()
        else:
            self._encode = PIXEL_CODECS[self.format][1]

    def write(self, color: Color):
        if self.block_codec is None:
            self._encode(color, self.writer)
            return

        self.pending.append(color)
        if len(self.pending) == BLOCK_PIXELS:
            self._flush_block()

    def write_all(self, colors: Iterable[Color]):
        for color in colors:
            self.write(color)

    def _flush_block(self):
        self.block_codec.encode_block_bundle(self.pending, self.format == Format.ETC1A4, self.writer)
        self.pending = []

    def getvalue(self) -> bytes:
        if self.pending:
            # Partial block: repeat the last color to fill it
            logger.debug(f"Padding partial {self.format.name} block of {len(self.pending)} colors")
            self.pending.extend([self.pending[-1]] * (BLOCK_PIXELS - len(self.pending)))
            self._flush_block()
        return self.writer.getvalue()
