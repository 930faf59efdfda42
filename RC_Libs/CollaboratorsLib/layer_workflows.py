"""
Layer workflows that combine collaborators with the layer model.

Functions:
    extract_layers: Vision analysis followed by region extraction
    populate_stack: Replace a stack's contents with freshly extracted layers
    remove_layer_background: Make a layer's background transparent
    edit_layer: Apply an instruction-driven edit to a layer's raster
    generate_layer: Generate a new layer from a prompt and add it to a stack
"""

import logging
import math
from typing import Any, List, Optional

from PIL import Image

from RC_Libs.constants import DEFAULT_GENERATED_LAYER_SIZE, MAX_GENERATED_LAYER_DIMENSION
from RC_Libs.errors import ValidationError
from RC_Libs.GeometryLib.geometry_models import Rectangle, round_half_up
from RC_Libs.LayersLib.layer_models import Layer
from RC_Libs.LayersLib.layer_stack import LayerStack
from RC_Libs.LayersLib.region_extractor import RegionExtractor
from RC_Libs.CollaboratorsLib.collaborators import (
    BackgroundRemover,
    ImageEditor,
    ImageGenerator,
    VisionAnalyzer,
    edit_image,
    generate_image,
    remove_background,
    run_vision_analysis,
)
from RC_Libs.RasterLib.raster_transport import decode_data_url, encode_image

logger = logging.getLogger(__name__)


def extract_layers(
    source_raster: str,
    analyzer: VisionAnalyzer,
    extractor: Optional[RegionExtractor] = None,
) -> List[Layer]:
    """
    Analyze a raster and crop every reported region into its own layer.

    Raises:
        ValidationError / DecodeError: If the source raster is unusable
        CollaboratorError: If the vision service fails or returns no regions
    """
    regions = run_vision_analysis(analyzer, source_raster)
    extractor = extractor or RegionExtractor()
    layers = extractor.extract(source_raster, regions)
    logger.info(f"Extracted {len(layers)} layer(s) from {len(regions)} region(s)")
    return layers


def populate_stack(
    stack: LayerStack,
    source_raster: str,
    analyzer: VisionAnalyzer,
    extractor: Optional[RegionExtractor] = None,
) -> List[Layer]:
    """
    Extract layers and make them the stack's contents, with the source as
    the base raster. The stack is left untouched if extraction fails.
    """
    layers = extract_layers(source_raster, analyzer, extractor)
    stack.replace_all(layers, base_raster=source_raster)
    return stack.layers()


def _raster_of(stack: LayerStack, layer_id: str) -> str:
    layer = stack.get(layer_id)
    if not layer.has_raster:
        raise ValidationError(f"Layer {layer_id} has no raster to process")
    return layer.raster


def remove_layer_background(stack: LayerStack, layer_id: str, remover: BackgroundRemover) -> Layer:
    """
    Replace a layer's raster with a background-free version.

    The extraction-time raster stays available through LayerStack.reset_layer.
    """
    result = remove_background(remover, _raster_of(stack, layer_id))
    return stack.update(layer_id, raster=result)


def edit_layer(stack: LayerStack, layer_id: str, editor: ImageEditor, instruction: str) -> Layer:
    """Replace a layer's raster with an edited version (resettable)."""
    result = edit_image(editor, _raster_of(stack, layer_id), instruction)
    return stack.update(layer_id, raster=result)


def _clamp_generated_dimension(value: Any, name: str) -> int:
    if value is None:
        return DEFAULT_GENERATED_LAYER_SIZE
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Generated layer {name} must be numeric, got {value!r}")
    if not math.isfinite(number):
        raise ValidationError(f"Generated layer {name} must be finite, got {value!r}")
    return max(1, min(MAX_GENERATED_LAYER_DIMENSION, round_half_up(number)))


def generate_layer(
    stack: LayerStack,
    generator: ImageGenerator,
    prompt: str,
    width: Any = DEFAULT_GENERATED_LAYER_SIZE,
    height: Any = DEFAULT_GENERATED_LAYER_SIZE,
    rectangle: Optional[Rectangle] = None,
) -> Layer:
    """
    Generate a new image layer from a prompt and add it on top of the stack.

    The size is clamped to 1-2048 pixels per side (256 when omitted) and the
    generated raster is resized to exactly that size, ignoring its aspect
    ratio. The new layer sits at the top-left corner unless a rectangle is
    given, and draws above every existing layer.

    Returns:
        Copy of the added layer

    Raises:
        ValidationError: If the prompt is empty or a dimension is not a number
        CollaboratorError: If the service fails or returns no usable image
    """
    size = (
        _clamp_generated_dimension(width, "width"),
        _clamp_generated_dimension(height, "height"),
    )

    generated = decode_data_url(generate_image(generator, prompt))
    image = generated.image
    if image.size != size:
        image = image.resize(size, Image.Resampling.LANCZOS)
    raster = encode_image(image)

    if rectangle is None:
        rectangle = Rectangle(0, 0, size[0], size[1])

    z_index = max((layer.z_index for layer in stack.layers()), default=-1) + 1
    layer = stack.add(
        Layer(
            rectangle=rectangle,
            raster=raster,
            original_raster=raster,
            z_index=z_index,
        )
    )
    logger.info(f"Generated layer {layer.layer_id} at {size[0]}x{size[1]}")
    return layer
