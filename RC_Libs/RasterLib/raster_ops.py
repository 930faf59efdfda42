"""
Pixel-level raster operations shared by extraction, cropping and backgrounds.

Functions:
    crop_to_rectangle: Cut a clipped rectangle out of an image
    parse_hex_color: Parse '#rrggbb' into an RGB tuple
    create_solid_background: Build a solid-color base raster
"""

from typing import Any, Optional, Tuple

from PIL import Image

from RC_Libs.constants import (
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_BACKGROUND_HEIGHT,
    DEFAULT_BACKGROUND_WIDTH,
    MAX_BACKGROUND_DIMENSION,
)
from RC_Libs.GeometryLib.geometry_models import Rectangle
from RC_Libs.RasterLib.raster_transport import encode_image

RgbColor = Tuple[int, int, int]

WHITE: RgbColor = (255, 255, 255)


def crop_to_rectangle(image: Any, rectangle: Rectangle) -> Optional[Any]:
    """
    Crop an image to a rectangle, preserving its mode (and transparency).

    The rectangle is intersected with the image bounds first.

    Returns:
        Cropped PIL Image, or None when the intersection has zero area
    """
    if not hasattr(image, "crop"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    left = max(0, rectangle.x)
    top = max(0, rectangle.y)
    right = min(image.width, rectangle.right)
    bottom = min(image.height, rectangle.bottom)

    if right <= left or bottom <= top:
        return None

    return image.crop((left, top, right, bottom))


def parse_hex_color(color: str) -> RgbColor:
    """Parse '#rrggbb' (leading '#' optional). Unparseable input yields white."""
    digits = str(color).strip().lstrip("#")
    if len(digits) < 6:
        return WHITE
    try:
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    except ValueError:
        return WHITE


def _clamp_dimension(value: Any, default: int) -> int:
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError):
        number = 0
    if number == 0:
        number = default
    return max(1, min(MAX_BACKGROUND_DIMENSION, number))


def create_solid_background(
    color: str = DEFAULT_BACKGROUND_COLOR,
    width: Any = DEFAULT_BACKGROUND_WIDTH,
    height: Any = DEFAULT_BACKGROUND_HEIGHT,
) -> str:
    """
    Create an opaque single-color base raster.

    Args:
        color: Hex color string, e.g. '#1e3a5f'
        width: Width in pixels, clamped to 1-4096 (missing/zero -> 1024)
        height: Height in pixels, clamped to 1-4096 (missing/zero -> 768)

    Returns:
        Encoded 3-channel PNG raster
    """
    size = (
        _clamp_dimension(width, DEFAULT_BACKGROUND_WIDTH),
        _clamp_dimension(height, DEFAULT_BACKGROUND_HEIGHT),
    )
    return encode_image(Image.new("RGB", size, parse_hex_color(color)))
