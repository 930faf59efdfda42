"""
Constants and configuration values for Recompose.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the composition engine.
"""

# Normalized coordinate space reported by vision collaborators
NORMALIZED_SCALE = 1000

# Region extraction
MAX_EXTRACTED_REGIONS = 12
REGION_TYPE_IMAGE = "image"
REGION_TYPE_TEXT = "text"
REGION_TYPE_BACKGROUND = "background"
REGION_TYPES = (REGION_TYPE_IMAGE, REGION_TYPE_TEXT, REGION_TYPE_BACKGROUND)

# Layer kinds
LAYER_KIND_IMAGE = "image"
LAYER_KIND_TEXT = "text"

# Text layer metadata
DEFAULT_TEXT_COLOR = "#000000"
DEFAULT_FONT_SIZE = 16
DEFAULT_FONT_FAMILY = "sans-serif"

# Layer transform bounds
MIN_LAYER_SCALE = 0.1
MAX_LAYER_SCALE = 5.0
MIN_OPACITY = 0.0
MAX_OPACITY = 1.0
FULL_ROTATION = 360.0

# Fractional crop bounds
MIN_FRACTION_SIZE = 0.01

# Raster transport
DATA_URL_PREFIX = "data:"
DEFAULT_OUTPUT_FORMAT = "PNG"
DEFAULT_MEDIA_TYPE = "image/png"
FORMAT_MEDIA_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "BMP": "image/bmp",
}

# Solid background
DEFAULT_BACKGROUND_COLOR = "#ffffff"
DEFAULT_BACKGROUND_WIDTH = 1024
DEFAULT_BACKGROUND_HEIGHT = 768
MAX_BACKGROUND_DIMENSION = 4096

# Generation collaborators
ASPECT_RATIOS = ("1:1", "9:16", "16:9", "custom")
DEFAULT_GENERATED_LAYER_SIZE = 256
MAX_GENERATED_LAYER_DIMENSION = 2048

# Session persistence
SESSION_FILE_EXTENSION = ".rcsession"
SESSION_SCHEMA_VERSION = 1
NAMESPACE_SAVES = "saves"
NAMESPACE_VERSIONS = "versions"
MAX_SAVES = 200
MAX_VERSIONS = 500
NAMESPACE_ID_PREFIXES = {
    NAMESPACE_SAVES: "save",
    NAMESPACE_VERSIONS: "ver",
}

# Session snapshot field names
FIELD_SCHEMA_VERSION = "schema_version"
FIELD_ID = "id"
FIELD_SEQUENCE = "sequence"
FIELD_CREATED_AT = "created_at"
FIELD_LABEL = "label"
FIELD_STATE = "state"
FIELD_PROMPT_USED = "prompt_used"
FIELD_EDIT_HISTORY = "edit_history"
FIELD_CANVAS = "canvas"
FIELD_ELEMENTS = "elements"
