"""
Tests for the Composition Engine.

Tests cover:
- End-to-end recomposition
- Placement and clipping
- Z-order and stable ties
- Skipped and dropped layers
- Threaded and sequential preparation
"""

import unittest

from PIL import Image

from RC_Libs.errors import DecodeError, ValidationError
from RC_Libs.GeometryLib.geometry_models import Rectangle
from RC_Libs.LayersLib.layer_models import Layer
from RC_Libs.CompositionLib.composition_engine import (
    CompositionConfig,
    CompositionEngine,
    CompositionRequest,
    Placement,
    compose,
    compute_placement,
    visible_region,
)
from RC_Libs.RasterLib.raster_transport import decode_data_url, encode_image

WHITE = (255, 255, 255)
RED = (255, 0, 0)
BLUE = (0, 0, 255)


def _url(mode, size, color):
    return encode_image(Image.new(mode, size, color))


def _pixels(data_url):
    return decode_data_url(data_url).image


class TestPlacementHelpers(unittest.TestCase):
    """Test compute_placement and visible_region."""

    def test_centered_on_rectangle(self):
        """Test that the transformed raster is centered on the rectangle center."""
        layer = Layer(rectangle=Rectangle(350, 250, 100, 100))

        self.assertEqual(compute_placement(layer, 100, 100), (350, 250))
        self.assertEqual(compute_placement(layer, 142, 142), (329, 229))

    def test_visible_region_clips_negative_corner(self):
        """Test clipping a placement hanging off the top-left."""
        placement = Placement("a", Image.new("RGBA", (50, 50)), -10, -20)

        self.assertEqual(visible_region(placement, 100, 100), (10, 20, 50, 50))

    def test_visible_region_off_canvas(self):
        """Test that placements past any edge have no visible region."""
        image = Image.new("RGBA", (50, 50))

        self.assertIsNone(visible_region(Placement("a", image, -60, 0), 100, 100))
        self.assertIsNone(visible_region(Placement("a", image, 100, 0), 100, 100))
        self.assertIsNone(visible_region(Placement("a", image, 0, 150), 100, 100))


class TestCompositionEngine(unittest.TestCase):
    """Test CompositionEngine.compose."""

    def setUp(self):
        self.base = _url("RGB", (800, 600), WHITE)
        self.red = _url("RGBA", (100, 100), RED + (255,))
        self.blue = _url("RGBA", (100, 100), BLUE + (255,))

    def test_single_layer_end_to_end(self):
        """Test a red square composited at its rectangle."""
        layer = Layer(raster=self.red, rectangle=Rectangle(350, 250, 100, 100))

        result = CompositionEngine().compose(CompositionRequest(self.base, [layer]))
        image = _pixels(result.raster)

        self.assertEqual((result.width, result.height), (800, 600))
        self.assertEqual(image.mode, "RGB")
        self.assertEqual(image.getpixel((400, 300)), RED)
        self.assertEqual(image.getpixel((10, 10)), WHITE)
        self.assertEqual(image.getpixel((349, 300)), WHITE)
        self.assertEqual(result.composited_layer_ids, [layer.layer_id])

    def test_no_layers_returns_base(self):
        """Test that an empty layer list reproduces the base pixels."""
        result = compose(self.base, [])

        self.assertEqual(_pixels(result.raster).tobytes(), _pixels(self.base).tobytes())

    def test_text_layers_are_not_drawn(self):
        """Test that raster-less layers are discarded."""
        text = Layer(rectangle=Rectangle(0, 0, 800, 600), kind="text", region_type="text", text_content="Hi")

        result = compose(self.base, [text])

        self.assertEqual(_pixels(result.raster).tobytes(), _pixels(self.base).tobytes())
        self.assertEqual(result.composited_layer_ids, [])

    def test_z_index_controls_overlap(self):
        """Test that the higher z_index wins where layers overlap."""
        rect = Rectangle(100, 100, 100, 100)
        red = Layer(raster=self.red, rectangle=rect, z_index=1)
        blue = Layer(raster=self.blue, rectangle=rect, z_index=0)

        self.assertEqual(_pixels(compose(self.base, [red, blue]).raster).getpixel((150, 150)), RED)

        red.update(z_index=0)
        blue.update(z_index=1)

        self.assertEqual(_pixels(compose(self.base, [red, blue]).raster).getpixel((150, 150)), BLUE)

    def test_equal_z_index_keeps_input_order(self):
        """Test that ties are drawn in input order."""
        rect = Rectangle(100, 100, 100, 100)
        red = Layer(raster=self.red, rectangle=rect)
        blue = Layer(raster=self.blue, rectangle=rect)

        first = compose(self.base, [red, blue])
        second = compose(self.base, [blue, red])

        self.assertEqual(_pixels(first.raster).getpixel((150, 150)), BLUE)
        self.assertEqual(_pixels(second.raster).getpixel((150, 150)), RED)
        self.assertEqual(first.composited_layer_ids, [red.layer_id, blue.layer_id])

    def test_opacity_blends_over_base(self):
        """Test over-blending of a half-transparent layer on white."""
        layer = Layer(raster=self.red, rectangle=Rectangle(0, 0, 100, 100), opacity=0.5)

        pixel = _pixels(compose(self.base, [layer]).raster).getpixel((50, 50))

        self.assertEqual(pixel[0], 255)
        self.assertTrue(126 <= pixel[1] <= 128)
        self.assertTrue(126 <= pixel[2] <= 128)

    def test_partially_off_canvas_is_clipped(self):
        """Test that a layer hanging off the corner is clipped, not dropped."""
        layer = Layer(raster=self.red, rectangle=Rectangle(750, 550, 100, 100))

        result = compose(self.base, [layer])
        image = _pixels(result.raster)

        self.assertEqual(image.size, (800, 600))
        self.assertEqual(image.getpixel((799, 599)), RED)
        self.assertEqual(image.getpixel((749, 599)), WHITE)

    def test_scaled_layer_clipped_at_origin(self):
        """Test a scaled layer overhanging the top-left corner."""
        layer = Layer(raster=self.red, rectangle=Rectangle(0, 0, 100, 100), scale=3)

        image = _pixels(compose(self.base, [layer]).raster)

        # 300x300 centered on (50, 50) covers up to x=199
        self.assertEqual(image.getpixel((0, 0)), RED)
        self.assertEqual(image.getpixel((199, 199)), RED)
        self.assertEqual(image.getpixel((200, 200)), WHITE)

    def test_fully_off_canvas_layer_is_dropped(self):
        """Test that an off-canvas layer leaves the base untouched."""
        base = _url("RGB", (100, 100), WHITE)
        layer = Layer(raster=self.red, rectangle=Rectangle(5000, 5000, 10, 10))

        result = compose(base, [layer])

        self.assertEqual(_pixels(result.raster).tobytes(), _pixels(base).tobytes())
        self.assertEqual(result.dropped_layer_ids, [layer.layer_id])
        self.assertEqual(result.composited_layer_ids, [])

    def test_rotated_layer_stays_centered(self):
        """Test that rotation keeps the layer centered on its rectangle."""
        layer = Layer(raster=self.red, rectangle=Rectangle(350, 250, 100, 100), rotation_degrees=45)

        image = _pixels(compose(self.base, [layer]).raster)

        self.assertEqual(image.getpixel((400, 300)), RED)
        # Diamond tip reaches beyond the original square horizontally
        self.assertEqual(image.getpixel((345, 300)), RED)
        # Original square corner is now outside the diamond
        self.assertEqual(image.getpixel((352, 252)), WHITE)

    def test_undecodable_layer_is_skipped(self):
        """Test that a bad layer raster does not abort the composition."""
        bad = Layer(raster="data:image/png;base64,AAAA", rectangle=Rectangle(0, 0, 10, 10))
        good = Layer(raster=self.red, rectangle=Rectangle(350, 250, 100, 100))

        result = compose(self.base, [bad, good])

        self.assertEqual(result.skipped_layer_ids, [bad.layer_id])
        self.assertEqual(result.composited_layer_ids, [good.layer_id])
        self.assertEqual(_pixels(result.raster).getpixel((400, 300)), RED)

    def test_bad_base_raises(self):
        """Test that an unusable base raster fails the request."""
        layer = Layer(raster=self.red, rectangle=Rectangle(0, 0, 10, 10))

        with self.assertRaises(ValidationError):
            compose("not-a-data-url", [layer])
        with self.assertRaises(DecodeError):
            compose("data:image/png;base64,AAAA", [layer])

    def test_rejects_non_layer_entries(self):
        """Test that layer entries must be Layer objects."""
        with self.assertRaises(ValidationError):
            compose(self.base, [{"raster": self.red}])

    def test_rejects_wrong_request_type(self):
        """Test that compose requires a CompositionRequest."""
        with self.assertRaises(TypeError):
            CompositionEngine().compose({"base_raster": self.base})

    def test_transparent_base_keeps_alpha(self):
        """Test that an RGBA base yields an RGBA result."""
        base = _url("RGBA", (50, 50), (0, 0, 0, 0))
        layer = Layer(raster=self.red, rectangle=Rectangle(0, 0, 10, 10))

        image = _pixels(compose(base, [layer]).raster)

        self.assertEqual(image.mode, "RGBA")
        self.assertEqual(image.getpixel((5, 5)), (255, 0, 0, 255))
        self.assertEqual(image.getpixel((40, 40)), (0, 0, 0, 0))

    def test_threaded_matches_sequential(self):
        """Test that thread-pool preparation gives identical output."""
        layers = [
            Layer(raster=self.red, rectangle=Rectangle(i * 40, i * 30, 100, 100), z_index=i % 3, rotation_degrees=i * 15)
            for i in range(8)
        ]

        threaded = CompositionEngine(CompositionConfig(use_threading=True, max_workers=4))
        sequential = CompositionEngine(CompositionConfig(use_threading=False))

        first = threaded.compose(CompositionRequest(self.base, layers))
        second = sequential.compose(CompositionRequest(self.base, layers))

        self.assertEqual(_pixels(first.raster).tobytes(), _pixels(second.raster).tobytes())
        self.assertEqual(first.composited_layer_ids, second.composited_layer_ids)

    def test_request_layers_are_not_modified(self):
        """Test that composing does not mutate the input layers."""
        layer = Layer(raster=self.red, rectangle=Rectangle(10, 10, 100, 100), scale=2, rotation_degrees=30)
        before = layer.to_dict()

        compose(self.base, [layer])

        self.assertEqual(layer.to_dict(), before)


if __name__ == "__main__":
    unittest.main()
