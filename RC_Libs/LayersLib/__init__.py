"""
LayersLib - Layer model, ordered layer collection and per-layer processing

This module provides the Layer model, the LayerStack collection, region
extraction from a source raster and per-layer transforms.
"""

from RC_Libs.LayersLib.layer_models import (
    Layer,
    clamp_opacity,
    clamp_scale,
    normalize_rotation,
)
from RC_Libs.LayersLib.layer_stack import LayerStack
from RC_Libs.LayersLib.region_extractor import RegionExtractor, extract_regions
from RC_Libs.LayersLib.layer_transformer import (
    LayerTransformer,
    TransformedLayer,
    transform_layer,
)

__all__ = [
    "Layer",
    "clamp_opacity",
    "clamp_scale",
    "normalize_rotation",
    "LayerStack",
    "RegionExtractor",
    "extract_regions",
    "LayerTransformer",
    "TransformedLayer",
    "transform_layer",
]
