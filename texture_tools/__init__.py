"""
3DS Texture Tools

Conversion between Pillow images and the PICA200 GPU's tiled texture data.

Modules:
- formats: Format/Orientation enums, Color and ConversionSettings
- pixel_codec: Per-format pixel decoding and encoding
- etc1: ETC1/ETC1A4 block codec
- swizzle: 8x8 Morton tile addressing
- texture: load/save between raw texture data and images
"""

from .etc1 import BlockCodec, ETC1Codec
from .formats import (
    Color,
    ConversionSettings,
    Format,
    Orientation,
    UnsupportedFormat,
    UnsupportedOrientation,
    convert_format,
)
from .swizzle import generate_points, stride_size
from .texture import load, load_colors, save, texture_size

__all__ = [
    'BlockCodec',
    'Color',
    'ConversionSettings',
    'ETC1Codec',
    'Format',
    'Orientation',
    'UnsupportedFormat',
    'UnsupportedOrientation',
    'convert_format',
    'generate_points',
    'load',
    'load_colors',
    'save',
    'stride_size',
    'texture_size',
]
