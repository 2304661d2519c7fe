import enum

import pytest

from texture_tools.formats import (
    Color,
    ConversionSettings,
    Format,
    Orientation,
    UnsupportedFormat,
    UnsupportedOrientation,
    bits_per_pixel,
    convert_format,
    resolve_format,
    resolve_orientation,
)


class ContainerFormat(enum.IntEnum):
    RGBA8888 = 0
    RGBA4444 = 1
    RGBA5551 = 2
    RGB888 = 3
    RGB565 = 4
    LA88 = 11
    LA44 = 12
    L8 = 13
    HL88 = 14
    A8 = 15
    L4 = 26
    A4 = 27
    ETC1 = 28
    ETC1A4 = 29


def test_format_numbering_matches_hardware():
    assert len(Format) == 14
    assert Format.RGBA8888 == 0
    assert Format.RGB565 == 3
    assert Format.ETC1A4 == 13


def test_orientation_values():
    assert [int(o) for o in Orientation] == [0, 1, 4, 8]


def test_resolve_rejects_unknown_values():
    assert resolve_format(3) is Format.RGB565
    with pytest.raises(UnsupportedFormat):
        resolve_format(14)
    with pytest.raises(UnsupportedOrientation):
        resolve_orientation(2)


def test_errors_are_value_errors():
    assert issubclass(UnsupportedFormat, ValueError)
    assert issubclass(UnsupportedOrientation, ValueError)


@pytest.mark.parametrize('member', list(ContainerFormat))
def test_convert_format_by_name(member):
    assert convert_format(member).name == member.name


def test_convert_format_from_string():
    assert convert_format('etc1a4') is Format.ETC1A4
    with pytest.raises(UnsupportedFormat):
        convert_format('BC7')


def test_bits_per_pixel():
    assert bits_per_pixel(Format.RGB888) == 24
    assert bits_per_pixel(Format.L4) == 4
    assert bits_per_pixel(Format.ETC1A4) == 8


def test_color_defaults_and_conversions():
    assert Color() == Color(255, 255, 255, 255)
    c = Color(0x80, 0x10, 0x20, 0x30)
    assert c.to_rgba() == (0x10, 0x20, 0x30, 0x80)
    assert Color.from_rgba((0x10, 0x20, 0x30, 0x80)) == c
    assert c.to_argb() == 0x80102030
    assert Color.from_argb(0x80102030) == c


def test_settings_defaults():
    settings = ConversionSettings(16, 8, Format.L8)
    assert settings.orientation is Orientation.DEFAULT
    assert settings.pad_to_power_of_2 is True
