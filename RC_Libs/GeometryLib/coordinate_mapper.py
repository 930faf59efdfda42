"""
Coordinate mapping between normalized and absolute pixel space.

Vision collaborators report regions in a 0-1000 space; crop requests use
fractions of the source. Both are converted here into Rectangles that are
guaranteed to lie inside the target canvas.

Functions:
    map_region: Map a NormalizedRegion onto a canvas
    map_fractional: Map fractional crop bounds onto a canvas
"""

import math

from RC_Libs.constants import MIN_FRACTION_SIZE, NORMALIZED_SCALE
from RC_Libs.errors import ValidationError
from RC_Libs.GeometryLib.geometry_models import NormalizedRegion, Rectangle, round_half_up


def _check_target(target_width: int, target_height: int) -> None:
    if target_width < 1 or target_height < 1:
        raise ValidationError(
            f"Target canvas must be at least 1x1, got {target_width}x{target_height}"
        )


def _fraction(value, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Crop {name} must be numeric, got {value!r}")
    if math.isnan(number):
        raise ValidationError(f"Crop {name} must not be NaN")
    return number


def _clip(x: int, y: int, width: int, height: int, target_width: int, target_height: int) -> Rectangle:
    left = max(0, min(x, target_width - 1))
    top = max(0, min(y, target_height - 1))
    clipped_width = min(max(1, width), target_width - left)
    clipped_height = min(max(1, height), target_height - top)
    return Rectangle(left, top, clipped_width, clipped_height)


def map_region(region: NormalizedRegion, target_width: int, target_height: int) -> Rectangle:
    """
    Map a normalized region onto a target canvas.

    Each coordinate is scaled by target/1000 and rounded, then the result is
    clipped into [0, target_width) x [0, target_height). Regions entirely
    outside the canvas collapse to a 1x1 rectangle at the clipped corner.

    Args:
        region: Region in 0-1000 normalized coordinates
        target_width: Canvas width in pixels
        target_height: Canvas height in pixels

    Returns:
        Rectangle fully inside the canvas

    Raises:
        ValidationError: If the canvas is smaller than 1x1
    """
    _check_target(target_width, target_height)

    x_factor = target_width / NORMALIZED_SCALE
    y_factor = target_height / NORMALIZED_SCALE

    return _clip(
        round_half_up(region.x * x_factor),
        round_half_up(region.y * y_factor),
        round_half_up(region.width * x_factor),
        round_half_up(region.height * y_factor),
        target_width,
        target_height,
    )


def map_fractional(
    left: float,
    top: float,
    width: float,
    height: float,
    target_width: int,
    target_height: int,
) -> Rectangle:
    """
    Map fractional crop bounds onto a target canvas.

    left/top are clamped into [0, 1] and width/height into [0.01, 1] before
    the same pixel conversion and clipping as map_region.
    """
    _check_target(target_width, target_height)

    left = max(0.0, min(1.0, _fraction(left, "left")))
    top = max(0.0, min(1.0, _fraction(top, "top")))
    width = max(MIN_FRACTION_SIZE, min(1.0, _fraction(width, "width")))
    height = max(MIN_FRACTION_SIZE, min(1.0, _fraction(height, "height")))

    return _clip(
        round_half_up(left * target_width),
        round_half_up(top * target_height),
        round_half_up(width * target_width),
        round_half_up(height * target_height),
        target_width,
        target_height,
    )
