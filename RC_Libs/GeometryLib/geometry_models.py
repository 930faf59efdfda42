"""
Geometry data models for Recompose.

Classes:
    Rectangle: Clipped absolute pixel rectangle
    NormalizedRegion: Vision-reported region in 0-1000 normalized coordinates
    FractionalRect: Crop rectangle expressed as fractions of the source size

Functions:
    round_half_up: Round a real to the nearest integer, halves rounding up
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from RC_Libs.constants import (
    NORMALIZED_SCALE,
    REGION_TYPES,
    REGION_TYPE_TEXT,
)
from RC_Libs.errors import ValidationError


def round_half_up(value: float) -> int:
    """Round to the nearest integer; exact halves go towards +infinity."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Rectangle:
    """Pixel rectangle with a non-negative origin and a size of at least 1x1.

    Attributes:
        x: Left edge in pixels
        y: Top edge in pixels
        width: Width in pixels (>= 1)
        height: Height in pixels (>= 1)
    """
    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        for name in ("x", "y", "width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"Rectangle {name} must be an integer, got {value!r}")

        if self.x < 0 or self.y < 0:
            raise ValidationError(f"Rectangle origin must be non-negative, got ({self.x}, {self.y})")

        if self.width < 1 or self.height < 1:
            raise ValidationError(
                f"Rectangle size must be at least 1x1, got {self.width}x{self.height}"
            )

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def as_box(self) -> Tuple[int, int, int, int]:
        """Return the (left, upper, right, lower) box PIL expects."""
        return (self.x, self.y, self.right, self.bottom)

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rectangle":
        try:
            return cls(
                x=int(round(float(data.get("x", 0)))),
                y=int(round(float(data.get("y", 0)))),
                width=int(round(float(data.get("width", 1)))),
                height=int(round(float(data.get("height", 1)))),
            )
        except (TypeError, ValueError, OverflowError) as e:
            if isinstance(e, ValidationError):
                raise
            raise ValidationError(f"Invalid rectangle data: {data!r}") from e


def _clamp_normalized(value: Any, name: str, minimum: int) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Region field '{name}' must be numeric, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Region field '{name}' must be numeric, got {value!r}")
    if not math.isfinite(number):
        raise ValidationError(f"Region field '{name}' must be finite, got {value!r}")
    return max(minimum, min(NORMALIZED_SCALE, round_half_up(number)))


@dataclass(frozen=True)
class NormalizedRegion:
    """Region of semantic interest reported by a vision collaborator.

    Coordinates live in a 0-1000 space independent of the raster size and
    must go through the coordinate mapper before touching pixels.

    Attributes:
        region_type: One of 'image', 'text', 'background'
        x: Left edge (0-1000)
        y: Top edge (0-1000)
        width: Width (1-1000)
        height: Height (1-1000)
        text_content: Visible text for 'text' regions, empty otherwise
    """
    region_type: str
    x: int
    y: int
    width: int
    height: int
    text_content: str = ""

    def __post_init__(self):
        if self.region_type not in REGION_TYPES:
            raise ValidationError(
                f"Unknown region type '{self.region_type}'. "
                f"Expected one of: {', '.join(REGION_TYPES)}"
            )
        for name in ("x", "y"):
            value = getattr(self, name)
            if not 0 <= value <= NORMALIZED_SCALE:
                raise ValidationError(f"Region {name} must be 0-{NORMALIZED_SCALE}, got {value}")
        for name in ("width", "height"):
            value = getattr(self, name)
            if not 1 <= value <= NORMALIZED_SCALE:
                raise ValidationError(f"Region {name} must be 1-{NORMALIZED_SCALE}, got {value}")

    @property
    def is_text(self) -> bool:
        return self.region_type == REGION_TYPE_TEXT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NormalizedRegion":
        """
        Build a region from loosely-typed collaborator output.

        Numeric fields are clamped into range instead of trusted; the type tag
        must be one of the known region types.

        Raises:
            ValidationError: If the entry is not a mapping, has an unknown type,
                or has missing/non-numeric coordinates
        """
        if not isinstance(data, dict):
            raise ValidationError(f"Region entry must be a mapping, got {type(data).__name__}")

        region_type = str(data.get("type", "")).strip().lower()
        if region_type not in REGION_TYPES:
            raise ValidationError(f"Unknown region type '{data.get('type')}'")

        for key in ("x", "y", "width", "height"):
            if key not in data:
                raise ValidationError(f"Region entry missing required field '{key}'")

        text_content = data.get("textContent", data.get("text_content", ""))
        if text_content is None:
            text_content = ""

        return cls(
            region_type=region_type,
            x=_clamp_normalized(data["x"], "x", 0),
            y=_clamp_normalized(data["y"], "y", 0),
            width=_clamp_normalized(data["width"], "width", 1),
            height=_clamp_normalized(data["height"], "height", 1),
            text_content=str(text_content).strip(),
        )


@dataclass(frozen=True)
class FractionalRect:
    """Crop rectangle in fractions of the source raster (nominally 0-1).

    Out-of-range values are accepted here and clamped by the coordinate mapper.
    """
    left: float = 0.0
    top: float = 0.0
    width: float = 1.0
    height: float = 1.0
