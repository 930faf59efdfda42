"""
Raster value type and transport codec for Recompose.

Rasters travel between the engine and its callers as data URLs
(``data:<media-type>;base64,<payload>``). Internally they are decoded into
Pillow images in RGB or RGBA mode.

Classes:
    Raster: Immutable decoded raster with its transport media type

Functions:
    decode_data_url: Parse a transport string into a Raster
    encode_image: Encode a Pillow image as a transport string
    is_data_url: Check whether a value looks like a transport string
"""

import base64
import binascii
import io
import re
from dataclasses import dataclass, field
from typing import Any

from PIL import Image

from RC_Libs.constants import (
    DATA_URL_PREFIX,
    DEFAULT_MEDIA_TYPE,
    DEFAULT_OUTPUT_FORMAT,
    FORMAT_MEDIA_TYPES,
)
from RC_Libs.errors import DecodeError, ValidationError

DATA_URL_PATTERN = re.compile(r"^data:([^;,]+);base64,(.+)$", re.DOTALL)


def _normalize_mode(image: Image.Image) -> Image.Image:
    """Convert any Pillow mode into RGB or RGBA, keeping transparency."""
    if image.mode in ("RGB", "RGBA"):
        return image.copy()
    if "A" in image.getbands() or "transparency" in image.info:
        return image.convert("RGBA")
    return image.convert("RGB")


@dataclass(frozen=True, eq=False)
class Raster:
    """Decoded raster. Never mutated; transforms build new instances.

    Attributes:
        image: Pillow image in RGB or RGBA mode, copied on construction and
            owned by the raster. Read it freely but never modify it; use
            to_image() for a copy that may be changed.
        media_type: Media type the raster was transported with
    """
    image: Image.Image = field(repr=False)
    media_type: str = DEFAULT_MEDIA_TYPE

    @classmethod
    def from_image(cls, image: Any, media_type: str = DEFAULT_MEDIA_TYPE) -> "Raster":
        if not hasattr(image, "mode"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")
        return cls(image=_normalize_mode(image), media_type=media_type)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def channels(self) -> int:
        return len(self.image.getbands())

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    def to_image(self) -> Image.Image:
        """Return a copy of the pixels that callers may modify freely."""
        return self.image.copy()

    def to_data_url(self, save_format: str = DEFAULT_OUTPUT_FORMAT) -> str:
        return encode_image(self.image, save_format)


def is_data_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(DATA_URL_PREFIX)


def decode_data_url(data_url: Any) -> Raster:
    """
    Decode a transport string into a Raster.

    Args:
        data_url: String of the form data:<media-type>;base64,<payload>

    Returns:
        Raster in RGB or RGBA mode

    Raises:
        ValidationError: If the value is not a well-formed base64 data URL
        DecodeError: If the payload bytes are not a decodable image
    """
    if not isinstance(data_url, str):
        raise ValidationError(f"Raster must be a data URL string, got {type(data_url).__name__}")

    match = DATA_URL_PATTERN.match(data_url.strip())
    if not match:
        raise ValidationError("Raster must be a data URL (data:...;base64,...)")

    media_type = match.group(1).strip()
    payload = re.sub(r"\s+", "", match.group(2))

    try:
        raw_bytes = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Raster payload is not valid base64: {e}") from e

    try:
        with Image.open(io.BytesIO(raw_bytes)) as img:
            img.load()
            image = _normalize_mode(img)
    except Exception as e:
        raise DecodeError(f"Failed to decode {media_type} raster: {str(e)}") from e

    return Raster(image=image, media_type=media_type)


def encode_image(image: Any, save_format: str = DEFAULT_OUTPUT_FORMAT) -> str:
    """
    Encode a Pillow image as a transport string.

    Args:
        image: Pillow image to encode
        save_format: Pillow format name (PNG default; JPG is accepted for JPEG)

    Returns:
        data URL string
    """
    if not hasattr(image, "save"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    save_format = save_format.upper()
    if save_format == "JPG":
        save_format = "JPEG"

    if save_format not in FORMAT_MEDIA_TYPES:
        raise ValidationError(f"Unsupported output format: {save_format}")

    # JPEG has no alpha channel
    if save_format == "JPEG" and image.mode != "RGB":
        image = image.convert("RGB")

    buffer = io.BytesIO()
    image.save(buffer, format=save_format)
    payload = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:{FORMAT_MEDIA_TYPES[save_format]};base64,{payload}"
