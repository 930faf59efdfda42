"""
CollaboratorsLib - External AI service contracts and layer workflows

This module defines the contracts for vision, generation, editing and
background-removal services, validates their responses at the ingestion
boundary, and wires them into layer workflows.
"""

from RC_Libs.CollaboratorsLib.vision_response import parse_vision_response
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
from RC_Libs.CollaboratorsLib.layer_workflows import (
    edit_layer,
    extract_layers,
    generate_layer,
    populate_stack,
    remove_layer_background,
)

__all__ = [
    "parse_vision_response",
    "BackgroundRemover",
    "ImageEditor",
    "ImageGenerator",
    "VisionAnalyzer",
    "edit_image",
    "generate_image",
    "remove_background",
    "run_vision_analysis",
    "edit_layer",
    "extract_layers",
    "generate_layer",
    "populate_stack",
    "remove_layer_background",
]
