import pytest

from texture_tools.bitstream import BitReader, BitWriter
from texture_tools.formats import Color, Format, UnsupportedFormat
from texture_tools.pixel_codec import ColorEncoder, decode_pixel, encode_pixel, iter_colors

# Colors already quantized to each format's precision
NATIVE_COLORS = {
    Format.L8: Color(255, 77, 77, 77),
    Format.A8: Color(a=100),
    Format.LA44: Color(51, 153, 153, 153),
    Format.LA88: Color(10, 200, 200, 200),
    Format.HL88: Color(r=12, g=34),
    Format.RGB565: Color(255, 255, 40, 24),
    Format.RGB888: Color(255, 1, 2, 3),
    Format.RGBA5551: Color(0, 132, 41, 247),
    Format.RGBA4444: Color(17, 255, 136, 68),
    Format.RGBA8888: Color(1, 2, 3, 4),
    Format.L4: Color(255, 34, 34, 34),
    Format.A4: Color(a=187),
}


def encode(color, fmt):
    bw = BitWriter()
    encode_pixel(color, fmt, bw)
    return bw.getvalue()


def decode(data, fmt):
    return decode_pixel(BitReader(data), fmt)


@pytest.mark.parametrize('fmt, color', NATIVE_COLORS.items(), ids=lambda v: getattr(v, 'name', None))
def test_native_precision_round_trip(fmt, color):
    assert decode(encode(color, fmt), fmt) == color


def test_rgb565_full_red():
    assert decode(b'\x00\xF8', Format.RGB565) == Color(255, 255, 0, 0)


def test_rgb565_expansion_is_truncating():
    # 0x0821: r=1, g=1, b=1
    assert decode(b'\x21\x08', Format.RGB565) == Color(255, 8, 4, 8)


def test_la44_alpha_nibble_first():
    assert decode(b'\xF0', Format.LA44) == Color(255, 0, 0, 0)


def test_rgba5551_alpha_bit():
    assert decode(b'\x01\xF8', Format.RGBA5551) == Color(255, 255, 0, 0)
    assert decode(b'\x00\xF8', Format.RGBA5551) == Color(0, 255, 0, 0)


@pytest.mark.parametrize('fmt, color, expected', [
    (Format.L8, Color(1, 2, 3, 4), b'\x03'),
    (Format.A8, Color(1, 2, 3, 4), b'\x01'),
    (Format.LA88, Color(1, 2, 3, 4), b'\x01\x03'),
    (Format.HL88, Color(1, 2, 3, 4), b'\x03\x02'),
    (Format.RGB888, Color(1, 2, 3, 4), b'\x04\x03\x02'),
    (Format.RGBA8888, Color(1, 2, 3, 4), b'\x01\x04\x03\x02'),
    (Format.RGB565, Color(0, 255, 0, 0), b'\x00\xF8'),
    (Format.RGBA5551, Color(255, 255, 0, 0), b'\x01\xF8'),
    (Format.RGBA4444, Color(0x10, 0x40, 0x30, 0x20), b'\x12\x34'),
    (Format.LA44, Color(0xF0, 0x00, 0x50, 0x00), b'\xF5'),
])
def test_encoded_byte_layout(fmt, color, expected):
    assert encode(color, fmt) == expected


def test_downconversion_is_lossy():
    # Low bits are discarded, not rounded
    assert encode(Color(r=7, g=3, b=7), Format.RGB565) == b'\x00\x00'
    assert encode(Color(a=127), Format.RGBA5551)[0] & 1 == 0
    assert decode(encode(Color(a=31), Format.A4), Format.A4) == Color(a=17)


def test_iter_colors_stops_at_end_of_data():
    assert len(list(iter_colors(b'\x01\x02\x03', Format.L8))) == 3
    assert len(list(iter_colors(b'\x01\x02\x03', Format.RGB565))) == 1
    assert list(iter_colors(b'\x1F', Format.L4)) == [Color(255, 17, 17, 17), Color(255, 255, 255, 255)]


def test_iter_colors_block_format_needs_whole_blocks():
    assert len(list(iter_colors(bytes(8), Format.ETC1))) == 16
    assert len(list(iter_colors(bytes(15), Format.ETC1A4))) == 0
    assert len(list(iter_colors(bytes(32), Format.ETC1A4))) == 32


def test_iter_colors_rejects_unknown_format_eagerly():
    with pytest.raises(UnsupportedFormat):
        iter_colors(b'\x00' * 4, 99)


def test_single_pixel_codec_rejects_block_formats():
    with pytest.raises(ValueError):
        decode(bytes(8), Format.ETC1)
    with pytest.raises(UnsupportedFormat):
        encode(Color(), 42)


def test_color_encoder_nibble_formats():
    encoder = ColorEncoder(Format.L4)
    encoder.write_all([Color(g=0x10), Color(g=0x20), Color(g=0xF0)])
    assert encoder.getvalue() == b'\x12\xF0'


def test_color_encoder_buffers_blocks():
    encoder = ColorEncoder(Format.ETC1A4)
    encoder.write_all([Color(255, 10, 20, 30)] * 15)
    assert encoder.writer.getvalue() == b''
    encoder.write(Color(255, 10, 20, 30))
    assert len(encoder.getvalue()) == 16


def test_color_encoder_pads_partial_block():
    encoder = ColorEncoder(Format.ETC1)
    encoder.write_all([Color(255, 0, 0, 0)] * 3)
    assert len(encoder.getvalue()) == 8


def test_color_encoder_rejects_unknown_format():
    with pytest.raises(UnsupportedFormat):
        ColorEncoder(0x20)
