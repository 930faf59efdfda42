"""
Layer data model for Recompose.

A layer is a positioned, transformable raster (or text metadata) that
contributes to a composed image.

Example:
    >>> layer = Layer(
    ...     raster=red_square_url,
    ...     rectangle=Rectangle(350, 250, 100, 100),
    ...     opacity=0.8,
    ...     rotation_degrees=-45,
    ... )
    >>> layer.rotation_degrees
    315.0
"""

import math
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from RC_Libs.constants import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    DEFAULT_TEXT_COLOR,
    FULL_ROTATION,
    LAYER_KIND_IMAGE,
    LAYER_KIND_TEXT,
    MAX_LAYER_SCALE,
    MAX_OPACITY,
    MIN_LAYER_SCALE,
    MIN_OPACITY,
    REGION_TYPE_IMAGE,
    REGION_TYPES,
)
from RC_Libs.errors import ValidationError
from RC_Libs.GeometryLib.geometry_models import Rectangle


def _finite(value: Any, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Layer {name} must be numeric, got {value!r}")
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"Layer {name} must be finite, got {value!r}")
    return number


def clamp_scale(scale: Any) -> float:
    return max(MIN_LAYER_SCALE, min(MAX_LAYER_SCALE, _finite(scale, "scale")))


def clamp_opacity(opacity: Any) -> float:
    return max(MIN_OPACITY, min(MAX_OPACITY, _finite(opacity, "opacity")))


def normalize_rotation(rotation_degrees: Any) -> float:
    """Normalize an angle into [0, 360)."""
    return _finite(rotation_degrees, "rotation") % FULL_ROTATION


def _new_layer_id() -> str:
    return f"layer-{uuid.uuid4().hex[:12]}"


@dataclass
class Layer:
    """A single composable layer.

    Attributes:
        rectangle: Original placement on the canvas; its center anchors the
            transformed raster
        raster: Encoded raster (data URL); None for text layers
        original_raster: Raster at extraction time, used to reset edits
        kind: 'image' or 'text'
        region_type: Region tag the layer was extracted from
        opacity: 0.0-1.0
        rotation_degrees: Clockwise rotation, normalized into [0, 360)
        scale: Size multiplier, clamped to 0.1-5.0
        z_index: Stacking priority; higher draws later
        text_content: Text for text layers (metadata only, never rasterized)
        color: Text color as a hex string (text layers)
        font_size: Text size in pixels (text layers)
        font_family: Text font family (text layers)
        layer_id: Stable identifier
    """
    rectangle: Rectangle
    raster: Optional[str] = None
    original_raster: Optional[str] = None
    kind: str = LAYER_KIND_IMAGE
    region_type: str = REGION_TYPE_IMAGE
    opacity: float = 1.0
    rotation_degrees: float = 0.0
    scale: float = 1.0
    z_index: int = 0
    text_content: str = ""
    color: str = DEFAULT_TEXT_COLOR
    font_size: float = DEFAULT_FONT_SIZE
    font_family: str = DEFAULT_FONT_FAMILY
    layer_id: str = field(default_factory=_new_layer_id)

    def __post_init__(self):
        """Validate and normalize layer parameters."""
        if not isinstance(self.rectangle, Rectangle):
            raise TypeError(f"rectangle must be a Rectangle, got {type(self.rectangle)}")

        if self.kind not in (LAYER_KIND_IMAGE, LAYER_KIND_TEXT):
            raise ValidationError(f"Unknown layer kind: {self.kind}")

        if self.region_type not in REGION_TYPES:
            raise ValidationError(f"Unknown region type: {self.region_type}")

        self.opacity = clamp_opacity(self.opacity)
        self.rotation_degrees = normalize_rotation(self.rotation_degrees)
        self.scale = clamp_scale(self.scale)
        self.z_index = int(_finite(self.z_index, "z_index"))
        self.text_content = str(self.text_content or "")
        self.color = str(self.color or DEFAULT_TEXT_COLOR)
        self.font_family = str(self.font_family or DEFAULT_FONT_FAMILY)
        self.font_size = _finite(self.font_size, "font_size")
        if self.font_size <= 0:
            raise ValidationError(f"Layer font_size must be positive, got {self.font_size}")

    @property
    def is_text(self) -> bool:
        return self.kind == LAYER_KIND_TEXT

    @property
    def has_raster(self) -> bool:
        return bool(self.raster)

    def update(self, **changes: Any) -> "Layer":
        """
        Apply user edits in place and re-normalize.

        Raises:
            KeyError: If a change names an unknown or read-only field
        """
        for key in changes:
            if key == "layer_id" or key not in self.__dataclass_fields__:
                raise KeyError(f"Cannot update layer field '{key}'")

        if isinstance(changes.get("rectangle"), dict):
            changes["rectangle"] = Rectangle.from_dict(changes["rectangle"])

        # Validate on a candidate so a rejected edit leaves the layer untouched
        candidate = replace(self, **changes)
        for key in self.__dataclass_fields__:
            setattr(self, key, getattr(candidate, key))
        return self

    def copy(self) -> "Layer":
        return Layer.from_dict(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "layer_id": self.layer_id,
            "kind": self.kind,
            "region_type": self.region_type,
            "raster": self.raster,
            "original_raster": self.original_raster,
            "rectangle": self.rectangle.to_dict(),
            "opacity": self.opacity,
            "rotation_degrees": self.rotation_degrees,
            "scale": self.scale,
            "z_index": self.z_index,
            "text_content": self.text_content,
            "color": self.color,
            "font_size": self.font_size,
            "font_family": self.font_family,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Layer":
        """Create from dictionary, ignoring unknown keys."""
        if not isinstance(data, dict):
            raise ValidationError(f"Layer data must be a mapping, got {type(data).__name__}")

        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        rectangle = filtered.get("rectangle")
        if isinstance(rectangle, dict):
            filtered["rectangle"] = Rectangle.from_dict(rectangle)
        elif not isinstance(rectangle, Rectangle):
            raise ValidationError("Layer data missing 'rectangle'")

        if not filtered.get("layer_id"):
            filtered.pop("layer_id", None)

        return cls(**filtered)
