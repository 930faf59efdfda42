"""
Uniform opacity for raw rasters.

Example:
    >>> from PIL import Image
    >>> overlay = Image.new("RGBA", (10, 10), (0, 0, 255, 255))
    >>> faded = apply_opacity(overlay, 0.5)
    >>> faded.getpixel((0, 0))
    (0, 0, 255, 128)
"""

from typing import Any

import numpy as np
from PIL import Image

from RC_Libs.constants import MAX_OPACITY, MIN_OPACITY


def apply_opacity(image: Any, opacity: float) -> Any:
    """
    Multiply every pixel's alpha by a scalar opacity.

    Color channels are left untouched. Images without alpha get a fully
    opaque channel first. Repeated calls compound: 0.5 twice leaves a
    quarter of the original alpha.

    Args:
        image: PIL Image (any mode; converted to RGBA)
        opacity: Opacity factor, clamped into 0.0-1.0

    Returns:
        New RGBA PIL Image with scaled alpha

    Raises:
        TypeError: If image is not a PIL Image
    """
    if not hasattr(image, "mode"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    opacity = max(MIN_OPACITY, min(MAX_OPACITY, float(opacity)))

    rgba = image.convert("RGBA")

    if opacity >= MAX_OPACITY:
        return rgba

    pixels = np.array(rgba, dtype=np.uint8)
    alpha = pixels[:, :, 3].astype(np.float64)
    # new_a = a * opacity, rounded half up
    pixels[:, :, 3] = np.floor(alpha * opacity + 0.5).clip(0, 255).astype(np.uint8)

    return Image.fromarray(pixels)
