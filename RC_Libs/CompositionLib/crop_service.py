"""
Crop Service.

Single ad hoc crops expressed as fractions of the source raster.
"""

from typing import Any, Optional

from RC_Libs.constants import DEFAULT_OUTPUT_FORMAT
from RC_Libs.errors import ValidationError
from RC_Libs.GeometryLib.coordinate_mapper import map_fractional
from RC_Libs.GeometryLib.geometry_models import FractionalRect
from RC_Libs.RasterLib.raster_ops import crop_to_rectangle
from RC_Libs.RasterLib.raster_transport import decode_data_url, encode_image


class CropService:
    """Crops a fractional rectangle out of an encoded raster."""

    def __init__(self, output_format: str = DEFAULT_OUTPUT_FORMAT):
        self.output_format = output_format

    def crop(self, source_raster: str, fractional_rect: Optional[FractionalRect] = None) -> str:
        """
        Crop a raster.

        Fractions are clamped (left/top into 0-1, width/height into 0.01-1)
        and the pixel rectangle clipped to the source, so any request yields
        at least a 1x1 crop.

        Args:
            source_raster: Encoded source raster (data URL)
            fractional_rect: Crop bounds; the whole source when omitted

        Returns:
            Encoded cropped raster

        Raises:
            ValidationError: If the source transport string is malformed
            DecodeError: If the source raster cannot be decoded
        """
        if fractional_rect is None:
            fractional_rect = FractionalRect()
        if not isinstance(fractional_rect, FractionalRect):
            raise TypeError(f"Expected FractionalRect, got {type(fractional_rect)}")

        source = decode_data_url(source_raster)
        rectangle = map_fractional(
            fractional_rect.left,
            fractional_rect.top,
            fractional_rect.width,
            fractional_rect.height,
            source.width,
            source.height,
        )

        cropped = crop_to_rectangle(source.image, rectangle)
        if cropped is None:
            raise ValidationError(f"Crop rectangle {rectangle} does not overlap the source")

        return encode_image(cropped, self.output_format)


def crop_image(
    source_raster: str,
    left: Any = 0.0,
    top: Any = 0.0,
    width: Any = 1.0,
    height: Any = 1.0,
) -> str:
    """Crop with loose fractional arguments (defaults cover the whole source)."""
    return CropService().crop(source_raster, FractionalRect(left, top, width, height))
