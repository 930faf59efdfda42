"""
RasterLib - Raster values, transport encoding and pixel operations

This module provides the Raster value type, the data URL transport codec,
alpha-channel opacity and the crop/background primitives.
"""

from RC_Libs.RasterLib.raster_transport import (
    Raster,
    decode_data_url,
    encode_image,
    is_data_url,
)
from RC_Libs.RasterLib.opacity_blender import apply_opacity
from RC_Libs.RasterLib.raster_ops import (
    create_solid_background,
    crop_to_rectangle,
    parse_hex_color,
)

__all__ = [
    "Raster",
    "decode_data_url",
    "encode_image",
    "is_data_url",
    "apply_opacity",
    "create_solid_background",
    "crop_to_rectangle",
    "parse_hex_color",
]
