"""
Pytest configuration and shared fixtures for Recompose tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import pytest
from PIL import Image

from RC_Libs.RasterLib.raster_transport import encode_image


def make_data_url(mode="RGB", size=(100, 100), color="white", save_format="PNG"):
    """Build an encoded raster of a single color."""
    return encode_image(Image.new(mode, size, color), save_format)


@pytest.fixture
def white_canvas_url():
    """
    Provide an opaque 800x600 white base raster.

    Returns:
        data URL string
    """
    return make_data_url("RGB", (800, 600), (255, 255, 255))


@pytest.fixture
def red_square_url():
    """
    Provide an opaque 100x100 red layer raster.

    Returns:
        data URL string
    """
    return make_data_url("RGBA", (100, 100), (255, 0, 0, 255))


@pytest.fixture
def blue_square_url():
    """Provide an opaque 100x100 blue layer raster."""
    return make_data_url("RGBA", (100, 100), (0, 0, 255, 255))


@pytest.fixture
def temp_store_dir(tmp_path):
    """
    Provide a temporary directory for session snapshots.
    
    Args:
        tmp_path: Pytest's built-in temporary directory fixture
        
    Returns:
        Path object pointing to a temporary directory
    """
    return tmp_path


@pytest.fixture
def sample_rgba_colors():
    """
    Provide a list of sample RGBA color tuples for testing.
    
    Returns:
        List of (R, G, B, A) tuples with common test colors
    """
    return [
        (255, 0, 0, 255),    # Red
        (0, 255, 0, 255),    # Green
        (0, 0, 255, 255),    # Blue
        (255, 255, 255, 255),  # White
        (0, 0, 0, 255),      # Black
        (128, 128, 128, 255),  # Gray
    ]
