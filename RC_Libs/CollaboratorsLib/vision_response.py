"""
Ingestion of vision-analysis responses.

Vision collaborators answer with loosely-typed JSON of the form::

    {"regions": [{"type": "image", "x": 100, "y": 120, "width": 300,
                  "height": 280, "textContent": ""}, ...]}

This module is the only place that reads that structure. Each entry is
checked against the known region tags and its coordinates are clamped into
the 0-1000 space before anything downstream sees it.

Functions:
    parse_vision_response: Validate a response into NormalizedRegion objects
"""

import json
import logging
from typing import Any, List

from RC_Libs.constants import MAX_EXTRACTED_REGIONS
from RC_Libs.errors import CollaboratorError, ValidationError
from RC_Libs.GeometryLib.geometry_models import NormalizedRegion

logger = logging.getLogger(__name__)

VISION_COLLABORATOR = "vision"


def parse_vision_response(payload: Any, max_regions: int = MAX_EXTRACTED_REGIONS) -> List[NormalizedRegion]:
    """
    Validate a vision response into normalized regions.

    Args:
        payload: JSON text, bytes, or an already-decoded mapping
        max_regions: Cap on the number of regions returned

    Returns:
        Validated regions in response order (at most max_regions)

    Raises:
        CollaboratorError: If the response is empty, not JSON, or has no
            'regions' list
    """
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8", errors="replace")

    if isinstance(payload, str):
        text = payload.strip()
        if not text:
            raise CollaboratorError(VISION_COLLABORATOR, "No regions returned from vision model")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise CollaboratorError(VISION_COLLABORATOR, f"Response is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise CollaboratorError(
            VISION_COLLABORATOR,
            f"Response must be an object, got {type(payload).__name__}",
        )

    entries = payload.get("regions")
    if not isinstance(entries, list):
        raise CollaboratorError(VISION_COLLABORATOR, "Response has no 'regions' list")

    regions: List[NormalizedRegion] = []
    for index, entry in enumerate(entries):
        if len(regions) >= max_regions:
            logger.info(f"Ignoring {len(entries) - index} region(s) beyond the {max_regions}-region limit")
            break

        try:
            regions.append(NormalizedRegion.from_dict(entry))
        except ValidationError as e:
            logger.warning(f"Skipping malformed region {index}: {str(e)}")

    return regions
