"""
3DS texture tile addressing.

Textures are stored as 8x8 tiles in row-major tile order; the 64 pixels of a
tile follow a Morton (Z-order) pattern, so bits of the in-tile index alternate
between x and y:

    x_in = bits 4, 2, 0 of the index
    y_in = bits 5, 3, 1 of the index

The orientation decides whether the tile rows run along the width or the
height of the image and how tile/in-tile offsets become the final coordinate.
"""

from __future__ import annotations

import logging
from typing import Iterator, Tuple

from .formats import ConversionSettings, Orientation, resolve_orientation

logger = logging.getLogger(__name__)

TILE_SIZE = 8


def morton_point(index: int) -> Tuple[int, int]:
    """
    Get the (x, y) position inside an 8x8 tile for a Morton index.

    Args:
        index: Pixel index within the tile (0-63)

    Returns:
        (x, y) within the tile
    """
    x = ((index >> 2) & 4) | ((index >> 1) & 2) | (index & 1)
    y = ((index >> 3) & 4) | ((index >> 2) & 2) | ((index >> 1) & 1)
    return x, y


def _next_power_of_2(n: int) -> int:
    return 1 << (n - 1).bit_length()


def stride_size(width: int, height: int, pad_to_power_of_2: bool = True) -> Tuple[int, int]:
    """
    Compute the padded canvas size used for tiling.

    Dimensions are rounded up to a multiple of the tile size, then to the next
    power of two when padding is enabled.

    Returns:
        (stride_width, stride_height)
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Texture dimensions must be positive, got {width}x{height}")

    stride_width = (width + 7) & ~7
    stride_height = (height + 7) & ~7
    if pad_to_power_of_2:
        stride_width = _next_power_of_2(stride_width)
        stride_height = _next_power_of_2(stride_height)
    return stride_width, stride_height


def generate_points(width: int, height: int, orientation: Orientation = Orientation.DEFAULT,
                    pad_to_power_of_2: bool = True) -> Iterator[Tuple[int, int]]:
    """
    Generate the (x, y) coordinate of every texel in stream order.

    Yields stride_width * stride_height points covering the padded canvas.
    Points may fall outside width x height; callers decide whether to drop or
    clamp them. Each call returns a fresh iterator.
    """
    orientation = resolve_orientation(orientation)
    stride_width, stride_height = stride_size(width, height, pad_to_power_of_2)
    # DEFAULT and TRANSPOSE_TILE lay tile rows along the width
    stride = stride_width if orientation < 4 else stride_height

    logger.debug(f"Tiling {width}x{height} as {stride_width}x{stride_height} ({orientation.name})")
    return _iter_points(stride_width * stride_height, stride, orientation)


def _iter_points(count: int, stride: int, orientation: Orientation) -> Iterator[Tuple[int, int]]:
    tiles_per_row = stride // TILE_SIZE

    for i in range(count):
        tile = i // 64
        x_out = (tile % tiles_per_row) * TILE_SIZE
        y_out = (tile // tiles_per_row) * TILE_SIZE
        x_in, y_in = morton_point(i)

        if orientation == Orientation.DEFAULT:
            yield x_out + x_in, y_out + y_in
        elif orientation == Orientation.TRANSPOSE_TILE:
            yield x_out + y_in, y_out + x_in
        elif orientation == Orientation.ROTATE_90:
            yield y_out + y_in, stride - 1 - (x_out + x_in)
        else:
            yield y_out + y_in, x_out + x_in


def point_sequence(settings: ConversionSettings) -> Iterator[Tuple[int, int]]:
    return generate_points(settings.width, settings.height, settings.orientation,
                           settings.pad_to_power_of_2)
