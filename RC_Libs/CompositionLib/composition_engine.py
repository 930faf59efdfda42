"""
Composition Engine.

Recomposes a base raster with an ordered collection of layers. Each layer is
scaled, rotated and faded, centered on the center of its original rectangle,
and alpha-composited onto the base in z-index order. The canvas never grows;
anything hanging off the edges is clipped.

Example:
    >>> request = CompositionRequest(
    ...     base_raster=white_canvas_url,
    ...     layers=[Layer(raster=red_square_url, rectangle=Rectangle(350, 250, 100, 100))],
    ... )
    >>> result = CompositionEngine().compose(request)
    >>> result.width, result.height
    (800, 600)
"""

import concurrent.futures
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from PIL import Image

from RC_Libs.constants import DEFAULT_OUTPUT_FORMAT
from RC_Libs.errors import DecodeError, ValidationError
from RC_Libs.GeometryLib.geometry_models import round_half_up
from RC_Libs.LayersLib.layer_models import Layer
from RC_Libs.LayersLib.layer_transformer import LayerTransformer
from RC_Libs.RasterLib.raster_transport import decode_data_url, encode_image

logger = logging.getLogger(__name__)


@dataclass
class CompositionConfig:
    """Engine tuning.

    Attributes:
        use_threading: Transform layers in a thread pool (default: True)
        max_workers: Maximum number of threads (None = executor default)
        output_format: Encoding of the composed raster (default: PNG)
    """
    use_threading: bool = True
    max_workers: Optional[int] = None
    output_format: str = DEFAULT_OUTPUT_FORMAT


@dataclass
class CompositionRequest:
    """A base raster plus the layers to draw over it.

    Attributes:
        base_raster: Encoded base raster (data URL)
        layers: Layers in input order; ties in z_index keep this order
    """
    base_raster: str
    layers: List[Layer] = field(default_factory=list)


@dataclass
class CompositionResult:
    """Composed raster and per-layer diagnostics.

    Attributes:
        raster: Encoded composed raster, same size as the base
        width: Canvas width
        height: Canvas height
        composited_layer_ids: Layers drawn, bottom to top
        skipped_layer_ids: Layers skipped because their raster failed to decode
        dropped_layer_ids: Layers dropped for lying entirely off-canvas
    """
    raster: str
    width: int
    height: int
    composited_layer_ids: List[str] = field(default_factory=list)
    skipped_layer_ids: List[str] = field(default_factory=list)
    dropped_layer_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Placement:
    """Transformed layer pixels and their top-left corner on the canvas."""
    layer_id: str
    image: Any
    left: int
    top: int

    @property
    def right(self) -> int:
        return self.left + self.image.width

    @property
    def bottom(self) -> int:
        return self.top + self.image.height


def compute_placement(layer: Layer, width: int, height: int) -> Tuple[int, int]:
    """
    Center a (width x height) raster on the center of the layer's rectangle.

    Returns:
        (left, top) in canvas pixels; may be negative or past the far edge
    """
    center_x, center_y = layer.rectangle.center
    return (
        round_half_up(center_x - width / 2.0),
        round_half_up(center_y - height / 2.0),
    )


def visible_region(placement: Placement, canvas_width: int, canvas_height: int) -> Optional[Tuple[int, int, int, int]]:
    """
    Intersect a placement with the canvas.

    Returns:
        (left, top, right, bottom) in overlay coordinates of the visible part,
        or None when the intersection has no area
    """
    left = max(0, -placement.left)
    top = max(0, -placement.top)
    right = min(placement.image.width, canvas_width - placement.left)
    bottom = min(placement.image.height, canvas_height - placement.top)

    if right <= left or bottom <= top:
        return None
    return (left, top, right, bottom)


class CompositionEngine:
    """
    Orchestrates recomposition of a base raster and its layers.

    Engines hold only configuration, so one instance can serve concurrent
    requests.
    """

    def __init__(self, config: Optional[CompositionConfig] = None, transformer: Optional[LayerTransformer] = None):
        self.config = config or CompositionConfig()
        self.transformer = transformer or LayerTransformer()

    def compose(self, request: CompositionRequest) -> CompositionResult:
        """
        Compose the request's layers onto its base raster.

        Steps:
            1. Discard layers without a raster (text layers are never drawn)
            2. Stable-sort by z_index
            3. Transform each layer and center it on its rectangle's center
            4. Drop layers that do not overlap the canvas
            5. Alpha-composite the rest in order

        A layer whose raster cannot be decoded is skipped with a warning; the
        rest of the composition still completes.

        Raises:
            ValidationError: If the request or base raster is malformed
            DecodeError: If the base raster cannot be decoded
        """
        if not isinstance(request, CompositionRequest):
            raise TypeError(f"Expected CompositionRequest, got {type(request)}")

        base = decode_data_url(request.base_raster)

        layers = list(request.layers or [])
        for layer in layers:
            if not isinstance(layer, Layer):
                raise ValidationError(f"Composition layers must be Layer objects, got {type(layer)}")

        drawable = [layer for layer in layers if layer.has_raster]
        ordered = sorted(drawable, key=lambda layer: layer.z_index)

        result = CompositionResult(raster="", width=base.width, height=base.height)
        placements = self._prepare_placements(ordered, result)

        canvas = base.to_image().convert("RGBA")
        for placement in placements:
            box = visible_region(placement, canvas.width, canvas.height)
            if box is None:
                logger.debug(
                    f"Dropping layer {placement.layer_id}: placement "
                    f"({placement.left}, {placement.top}, {placement.right}, {placement.bottom}) "
                    f"is off-canvas"
                )
                result.dropped_layer_ids.append(placement.layer_id)
                continue

            dest = (max(0, placement.left), max(0, placement.top))
            canvas.alpha_composite(placement.image, dest=dest, source=box)
            result.composited_layer_ids.append(placement.layer_id)

        if not base.has_alpha:
            canvas = canvas.convert("RGB")

        result.raster = encode_image(canvas, self.config.output_format)
        return result

    def _prepare_placements(self, ordered: Sequence[Layer], result: CompositionResult) -> List[Placement]:
        """Transform layers (in parallel when enabled), keeping sorted order."""
        if self.config.use_threading and len(ordered) > 1:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                prepared = list(executor.map(self._prepare_layer, ordered))
        else:
            prepared = [self._prepare_layer(layer) for layer in ordered]

        placements = []
        for layer, placement in zip(ordered, prepared):
            if placement is None:
                result.skipped_layer_ids.append(layer.layer_id)
            else:
                placements.append(placement)
        return placements

    def _prepare_layer(self, layer: Layer) -> Optional[Placement]:
        try:
            transformed = self.transformer.transform(layer)
        except (ValidationError, DecodeError) as e:
            logger.warning(f"Skipping layer {layer.layer_id}: {str(e)}")
            return None

        left, top = compute_placement(layer, transformed.width, transformed.height)
        return Placement(layer_id=layer.layer_id, image=transformed.image, left=left, top=top)


def compose(base_raster: str, layers: Sequence[Layer], config: Optional[CompositionConfig] = None) -> CompositionResult:
    """Compose layers onto a base raster with a one-off engine."""
    return CompositionEngine(config).compose(CompositionRequest(base_raster=base_raster, layers=list(layers)))
