"""
GeometryLib - Coordinate spaces and rectangle models

This module converts vision-model and fractional coordinates into
clipped absolute pixel rectangles.
"""

from RC_Libs.GeometryLib.geometry_models import (
    FractionalRect,
    NormalizedRegion,
    Rectangle,
    round_half_up,
)
from RC_Libs.GeometryLib.coordinate_mapper import map_fractional, map_region

__all__ = [
    "FractionalRect",
    "NormalizedRegion",
    "Rectangle",
    "round_half_up",
    "map_fractional",
    "map_region",
]
