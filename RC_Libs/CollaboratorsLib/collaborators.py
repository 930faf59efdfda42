"""
Contracts for the external AI collaborators.

Concrete services (vision models, image generators, background removers)
live outside this package. They implement the abstract classes below, and
callers reach them through the run_*/generate_*/edit_*/remove_* helpers,
which validate inputs, check that the output is usable and turn any
failure into a CollaboratorError. Failures are never papered over with
placeholder content.

Classes:
    VisionAnalyzer: Reports semantic regions of a raster
    ImageGenerator: Creates a raster from a prompt
    ImageEditor: Edits a raster following an instruction
    BackgroundRemover: Makes background pixels transparent
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from RC_Libs.constants import ASPECT_RATIOS
from RC_Libs.errors import CollaboratorError, DecodeError, ValidationError
from RC_Libs.GeometryLib.geometry_models import NormalizedRegion
from RC_Libs.CollaboratorsLib.vision_response import VISION_COLLABORATOR, parse_vision_response
from RC_Libs.RasterLib.raster_transport import decode_data_url

logger = logging.getLogger(__name__)

GENERATION_COLLABORATOR = "image-generation"
EDIT_COLLABORATOR = "image-edit"
BACKGROUND_REMOVAL_COLLABORATOR = "background-removal"


class VisionAnalyzer(ABC):
    """Vision-analysis service."""

    @abstractmethod
    def analyze(self, raster: str) -> Any:
        """
        Return the raw region response for an encoded raster: JSON text or a
        mapping with a 'regions' list in 0-1000 coordinates.
        """


class ImageGenerator(ABC):
    """Generative-image service."""

    @abstractmethod
    def generate(self, prompt: str, aspect_ratio: Optional[str] = None) -> str:
        """Return an encoded raster for the prompt."""


class ImageEditor(ABC):
    """Instruction-driven image editing service."""

    @abstractmethod
    def edit(self, raster: str, instruction: str) -> str:
        """Return an edited copy of an encoded raster."""


class BackgroundRemover(ABC):
    """Background-removal service."""

    @abstractmethod
    def remove_background(self, raster: str) -> str:
        """Return the raster with background pixels made transparent."""


def _require_raster(raster: Any) -> None:
    """Reject unusable input rasters before the service is called."""
    decode_data_url(raster)


def _require_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} is required")
    return value.strip()


def _checked_output(collaborator: str, output: Any) -> str:
    if not output:
        raise CollaboratorError(collaborator, "No image returned")
    try:
        decode_data_url(output)
    except (ValidationError, DecodeError) as e:
        raise CollaboratorError(collaborator, f"Returned an unusable image: {str(e)}") from e
    return output


def _call(collaborator: str, func, *args) -> Any:
    try:
        return func(*args)
    except CollaboratorError:
        raise
    except Exception as e:
        logger.error(f"{collaborator} collaborator failed: {str(e)}")
        raise CollaboratorError(collaborator, str(e) or type(e).__name__) from e


def run_vision_analysis(analyzer: VisionAnalyzer, raster: str) -> List[NormalizedRegion]:
    """
    Ask a vision collaborator for regions and validate its answer.

    Raises:
        ValidationError / DecodeError: If the input raster is unusable
        CollaboratorError: If the service fails or returns no usable regions
    """
    _require_raster(raster)
    response = _call(VISION_COLLABORATOR, analyzer.analyze, raster)
    return parse_vision_response(response)


def generate_image(generator: ImageGenerator, prompt: str, aspect_ratio: Optional[str] = None) -> str:
    """
    Generate a base image.

    Raises:
        ValidationError: If the prompt is empty or the aspect ratio unknown
        CollaboratorError: If the service fails or returns no usable image
    """
    prompt = _require_text(prompt, "prompt")
    if aspect_ratio is not None and aspect_ratio not in ASPECT_RATIOS:
        raise ValidationError(
            f"Unsupported aspect ratio '{aspect_ratio}'. Use one of: {', '.join(ASPECT_RATIOS)}"
        )

    output = _call(GENERATION_COLLABORATOR, generator.generate, prompt, aspect_ratio)
    return _checked_output(GENERATION_COLLABORATOR, output)


def edit_image(editor: ImageEditor, raster: str, instruction: str) -> str:
    """Edit a raster; see generate_image for the failure policy."""
    _require_raster(raster)
    instruction = _require_text(instruction, "instruction")

    output = _call(EDIT_COLLABORATOR, editor.edit, raster, instruction)
    return _checked_output(EDIT_COLLABORATOR, output)


def remove_background(remover: BackgroundRemover, raster: str) -> str:
    """Remove a raster's background; see generate_image for the failure policy."""
    _require_raster(raster)

    output = _call(BACKGROUND_REMOVAL_COLLABORATOR, remover.remove_background, raster)
    return _checked_output(BACKGROUND_REMOVAL_COLLABORATOR, output)
