"""
Layer Transformer.

Scales, rotates and fades a single layer's raster so the composition
engine can place it. Rotation expands the canvas, so callers must use the
reported output size rather than scale x original.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from PIL import Image

from RC_Libs.errors import ValidationError
from RC_Libs.GeometryLib.geometry_models import round_half_up
from RC_Libs.LayersLib.layer_models import (
    Layer,
    clamp_opacity,
    clamp_scale,
    normalize_rotation,
)
from RC_Libs.RasterLib.opacity_blender import apply_opacity
from RC_Libs.RasterLib.raster_transport import decode_data_url

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True)
class TransformedLayer:
    """Transformer output.

    Attributes:
        image: RGBA PIL Image ready for placement
        width: Measured output width
        height: Measured output height
    """
    image: Any
    width: int
    height: int


class LayerTransformer:
    """Applies a layer's scale, rotation and opacity to its raster."""

    def __init__(self, resample: int = Image.Resampling.LANCZOS, rotate_resample: int = Image.Resampling.BICUBIC):
        self.resample = resample
        self.rotate_resample = rotate_resample

    def transform(self, layer: Layer, image: Optional[Any] = None) -> TransformedLayer:
        """
        Transform a layer for placement.

        Args:
            layer: Layer with a raster
            image: Already-decoded raster pixels (decoded from layer.raster
                when omitted)

        Returns:
            TransformedLayer with the RGBA result and its measured size

        Raises:
            ValidationError: If the layer has no raster or a malformed one
            DecodeError: If the layer raster cannot be decoded
        """
        if image is None:
            if not layer.has_raster:
                raise ValidationError(f"Layer {layer.layer_id} has no raster to transform")
            image = decode_data_url(layer.raster).image

        result = self.scale(image, layer.rectangle.width, layer.rectangle.height, layer.scale)
        result = self.rotate(result, layer.rotation_degrees)

        opacity = clamp_opacity(layer.opacity)
        if opacity < 1.0:
            result = apply_opacity(result, opacity)

        logger.debug(
            f"Transformed layer {layer.layer_id}: scale={layer.scale}, "
            f"rotation={layer.rotation_degrees}, opacity={opacity} -> {result.width}x{result.height}"
        )
        return TransformedLayer(image=result, width=result.width, height=result.height)

    def scale(self, image: Any, width: int, height: int, scale: float) -> Any:
        """Resize to (width, height) x scale, ignoring aspect ratio."""
        scale = clamp_scale(scale)
        scaled_size = (
            max(1, round_half_up(width * scale)),
            max(1, round_half_up(height * scale)),
        )

        rgba = image.convert("RGBA")
        if rgba.size == scaled_size:
            return rgba
        return rgba.resize(scaled_size, self.resample)

    def rotate(self, image: Any, rotation_degrees: float) -> Any:
        """
        Rotate clockwise about the center, expanding to the rotated bounding
        box. Newly exposed pixels are fully transparent.
        """
        angle = normalize_rotation(rotation_degrees)
        if angle == 0:
            return image

        # PIL rotates counter-clockwise for positive angles
        return image.convert("RGBA").rotate(
            -angle,
            resample=self.rotate_resample,
            expand=True,
            fillcolor=TRANSPARENT,
        )


def transform_layer(layer: Layer) -> TransformedLayer:
    """Transform a layer with the default resampling filters."""
    return LayerTransformer().transform(layer)
