"""
CompositionLib - Recomposition and cropping

This module provides the composition engine that blends layers onto a
base raster, and the fractional crop service.
"""

from RC_Libs.CompositionLib.composition_engine import (
    CompositionConfig,
    CompositionEngine,
    CompositionRequest,
    CompositionResult,
    Placement,
    compose,
    compute_placement,
    visible_region,
)
from RC_Libs.CompositionLib.crop_service import CropService, crop_image

__all__ = [
    "CompositionConfig",
    "CompositionEngine",
    "CompositionRequest",
    "CompositionResult",
    "Placement",
    "compose",
    "compute_placement",
    "visible_region",
    "CropService",
    "crop_image",
]
