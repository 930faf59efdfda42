"""
Region Extractor.

Turns vision-reported regions into independent layers by cropping each one
out of the source raster.

Example:
    >>> regions = [
    ...     NormalizedRegion("background", 0, 0, 1000, 1000),
    ...     NormalizedRegion("image", 100, 100, 300, 300),
    ...     NormalizedRegion("text", 500, 50, 400, 80, text_content="SALE"),
    ... ]
    >>> layers = RegionExtractor().extract(source_url, regions)
    >>> [layer.kind for layer in layers]
    ['image', 'image', 'text']
"""

import logging
from typing import Any, Iterable, List

from RC_Libs.constants import (
    DEFAULT_OUTPUT_FORMAT,
    LAYER_KIND_IMAGE,
    LAYER_KIND_TEXT,
    MAX_EXTRACTED_REGIONS,
)
from RC_Libs.GeometryLib.coordinate_mapper import map_region
from RC_Libs.GeometryLib.geometry_models import NormalizedRegion
from RC_Libs.LayersLib.layer_models import Layer
from RC_Libs.RasterLib.raster_ops import crop_to_rectangle
from RC_Libs.RasterLib.raster_transport import Raster, decode_data_url, encode_image

logger = logging.getLogger(__name__)


class RegionExtractor:
    """Crops normalized regions out of a source raster."""

    def __init__(self, max_regions: int = MAX_EXTRACTED_REGIONS, output_format: str = DEFAULT_OUTPUT_FORMAT):
        if max_regions < 1:
            raise ValueError(f"max_regions must be >= 1, got {max_regions}")
        self.max_regions = max_regions
        self.output_format = output_format

    def extract(self, source_raster: Any, regions: Iterable[NormalizedRegion]) -> List[Layer]:
        """
        Extract one layer per region.

        Only the first max_regions regions are used; the rest are dropped.
        Text regions become raster-less layers carrying their text. Every
        other region is cropped (transparency preserved) and the crop's
        rectangle becomes the layer's initial placement.

        Args:
            source_raster: Encoded source raster (data URL) or a Raster
            regions: Normalized regions in priority order

        Returns:
            List of new layers in region order

        Raises:
            ValidationError: If the source transport string is malformed
            DecodeError: If the source raster cannot be decoded
            TypeError: If a region is not a NormalizedRegion
        """
        source = source_raster if isinstance(source_raster, Raster) else decode_data_url(source_raster)

        regions = list(regions)
        if len(regions) > self.max_regions:
            logger.info(
                f"Dropping {len(regions) - self.max_regions} region(s) beyond the "
                f"{self.max_regions}-region limit"
            )
            regions = regions[:self.max_regions]

        layers = []
        for region in regions:
            if not isinstance(region, NormalizedRegion):
                raise TypeError(f"Expected NormalizedRegion, got {type(region)}")
            layers.append(self._extract_region(source, region))

        return layers

    def _extract_region(self, source: Raster, region: NormalizedRegion) -> Layer:
        rectangle = map_region(region, source.width, source.height)

        if region.is_text:
            return Layer(
                rectangle=rectangle,
                kind=LAYER_KIND_TEXT,
                region_type=region.region_type,
                text_content=region.text_content,
            )

        raster = None
        cropped = crop_to_rectangle(source.image, rectangle)
        if cropped is None:
            logger.debug(f"Region {region} clipped to zero area; layer has no raster")
        else:
            raster = encode_image(cropped, self.output_format)

        return Layer(
            rectangle=rectangle,
            raster=raster,
            original_raster=raster,
            kind=LAYER_KIND_IMAGE,
            region_type=region.region_type,
            text_content=region.text_content,
        )


def extract_regions(source_raster: Any, regions: Iterable[NormalizedRegion]) -> List[Layer]:
    """Extract layers with the default region cap."""
    return RegionExtractor().extract(source_raster, regions)
