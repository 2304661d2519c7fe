"""
Conversion between Pillow images and raw 3DS texture data.

load() decodes raw texture bytes into an RGBA image, save() encodes an image
back. Both pair the color stream of the pixel codec with the tile coordinate
stream position by position:

- load drops texels that land outside the image (padding)
- save clamps coordinates into the image, so padding repeats the edge pixels
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Iterable, Optional

from PIL import Image

from .etc1 import BlockCodec
from .formats import (
    BITS_PER_PIXEL,
    Color,
    ConversionSettings,
    resolve_format,
    resolve_orientation,
)
from .pixel_codec import ColorEncoder, iter_colors
from .swizzle import point_sequence, stride_size

logger = logging.getLogger(__name__)


def _clamp(value: int, size: int) -> int:
    return min(max(value, 0), size - 1)


def texture_size(width: int, height: int, format_type, pad_to_power_of_2: bool = True) -> int:
    """
    Calculate encoded texture size in bytes.

    Args:
        width: Texture width in pixels
        height: Texture height in pixels
        format_type: Format of the texture
        pad_to_power_of_2: Whether the strides are padded to powers of two

    Returns:
        Size in bytes
    """
    bits = BITS_PER_PIXEL[resolve_format(format_type)]
    stride_width, stride_height = stride_size(width, height, pad_to_power_of_2)
    return stride_width * stride_height * bits // 8


def load_colors(colors: Iterable[Color], settings: ConversionSettings) -> Image.Image:
    """
    Place already-decoded colors into a new RGBA image.

    Colors are matched with the tile coordinates in order; colors whose
    coordinate falls outside the image are discarded.
    """
    resolve_orientation(settings.orientation)
    width, height = settings.width, settings.height
    points = point_sequence(settings)

    image = Image.new('RGBA', (width, height))
    pixels = image.load()

    written = 0
    total = 0
    for (x, y), color in zip(points, colors):
        total += 1
        if 0 <= x < width and 0 <= y < height:
            pixels[x, y] = color.to_rgba()
            written += 1

    expected = stride_size(width, height, settings.pad_to_power_of_2)
    if total < expected[0] * expected[1]:
        logger.warning(f"Texture data ended after {total} of {expected[0] * expected[1]} texels")
    logger.debug(f"Placed {written} of {total} texels into {width}x{height} image")
    return image


def load(data: bytes, settings: ConversionSettings, block_codec: Optional[BlockCodec] = None) -> Image.Image:
    """
    Decode raw texture data into an RGBA image.

    Args:
        data: Raw texture bytes (no header)
        settings: Dimensions, format, orientation and padding of the texture
        block_codec: Codec used for ETC1/ETC1A4 data

    Returns:
        PIL Image in RGBA mode, settings.width x settings.height
    """
    fmt = resolve_format(settings.format)
    resolve_orientation(settings.orientation)
    logger.debug(f"Loading {settings.width}x{settings.height} {fmt.name} from {len(data)} bytes")

    colors = iter_colors(data, settings.format, block_codec)
    return load_colors(colors, settings)


def save(image: Image.Image, settings: ConversionSettings, block_codec: Optional[BlockCodec] = None) -> bytes:
    """
    Encode an image into raw texture data.

    The image size overrides settings.width/height. Coordinates in the padded
    area are clamped to the nearest edge pixel.

    Args:
        image: PIL Image (converted to RGBA if needed)
        settings: Format, orientation and padding of the texture
        block_codec: Codec used for ETC1/ETC1A4 data

    Returns:
        Encoded texture data bytes
    """
    encoder = ColorEncoder(settings.format, block_codec)
    resolve_orientation(settings.orientation)

    if image.mode != 'RGBA':
        image = image.convert('RGBA')
    width, height = image.size
    settings = dataclasses.replace(settings, width=width, height=height)

    pixels = image.load()
    for x, y in point_sequence(settings):
        rgba = pixels[_clamp(x, width), _clamp(y, height)]
        encoder.write(Color.from_rgba(rgba))

    data = encoder.getvalue()
    logger.debug(f"Saved {width}x{height} {encoder.format.name} texture ({len(data)} bytes)")
    return data
