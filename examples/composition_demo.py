"""
Recomposition demonstration.

Extracts layers from a generated poster using a canned vision response,
edits a few of them, recomposes the result and saves the session.
Writes the composed image next to this script.

Run:
    python examples/composition_demo.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import base64
import logging
import tempfile
import time

from PIL import Image, ImageDraw

from RC_Libs.CollaboratorsLib import ImageGenerator, VisionAnalyzer, generate_layer, populate_stack
from RC_Libs.CompositionLib import CompositionConfig, CompositionEngine, CompositionRequest
from RC_Libs.GeometryLib import Rectangle
from RC_Libs.LayersLib import LayerStack
from RC_Libs.RasterLib import create_solid_background, encode_image
from RC_Libs.SessionStoreLib import SessionStore


class CannedVisionAnalyzer(VisionAnalyzer):
    """Vision stand-in that always reports the same regions."""

    def analyze(self, raster):
        return {
            "regions": [
                {"type": "image", "x": 100, "y": 100, "width": 300, "height": 300},
                {"type": "image", "x": 550, "y": 450, "width": 300, "height": 400},
                {"type": "text", "x": 100, "y": 800, "width": 500, "height": 100, "textContent": "SUMMER SALE"},
            ]
        }


class CannedGenerator(ImageGenerator):
    """Generator stand-in that paints a yellow disc."""

    def generate(self, prompt, aspect_ratio=None):
        image = Image.new("RGBA", (512, 512), (0, 0, 0, 0))
        ImageDraw.Draw(image).ellipse((0, 0, 511, 511), fill=(250, 210, 40, 255))
        return encode_image(image)


def build_poster():
    """Draw a simple poster: a red square and a blue ellipse on cream."""
    image = Image.new("RGB", (800, 600), (250, 240, 220))
    draw = ImageDraw.Draw(image)
    draw.rectangle((80, 60, 320, 240), fill=(220, 40, 40))
    draw.ellipse((440, 270, 680, 510), fill=(40, 80, 220))
    return encode_image(image)


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("Recompose demo")
    print("=" * 60)

    poster = build_poster()
    stack = LayerStack()
    layers = populate_stack(stack, poster, CannedVisionAnalyzer())
    print(f"\nExtracted {len(layers)} layer(s):")
    for layer in layers:
        print(f"  {layer.layer_id}  {layer.kind:5s}  {layer.rectangle.to_dict()}  {layer.text_content!r}")

    square, ellipse = layers[0], layers[1]
    stack.update(square.layer_id, rotation_degrees=20, scale=1.3, z_index=1)
    stack.update(ellipse.layer_id, opacity=0.6, rectangle={"x": 60, "y": 300, "width": 240, "height": 240})

    sun = generate_layer(
        stack, CannedGenerator(), "a bright sun", 120, 120, rectangle=Rectangle(640, 40, 120, 120)
    )
    print(f"\nGenerated layer {sun.layer_id} at z_index {sun.z_index}")

    # Recompose onto a fresh background instead of the original poster
    background = create_solid_background("#1e3a5f", 800, 600)
    engine = CompositionEngine(CompositionConfig(use_threading=True))

    start = time.time()
    result = engine.compose(CompositionRequest(base_raster=background, layers=stack.layers()))
    elapsed = time.time() - start

    print(f"\nComposed {result.width}x{result.height} in {elapsed:.3f}s")
    print(f"  composited: {result.composited_layer_ids}")
    print(f"  skipped:    {result.skipped_layer_ids}")
    print(f"  dropped:    {result.dropped_layer_ids}")

    output_path = Path(__file__).parent / "composition_demo_output.png"
    payload = result.raster.split(",", 1)[1]
    output_path.write_bytes(base64.b64decode(payload))
    print(f"\nWrote {output_path}")

    with tempfile.TemporaryDirectory() as tmpdir:
        with SessionStore(Path(tmpdir), namespace="versions") as store:
            record = store.save(
                {"canvas": {"zoom": 1.0, "pan_x": 0, "pan_y": 0}, "elements": stack.to_dict()},
                label="demo",
            )
            print(f"Saved session snapshot {record.id}")
            restored = LayerStack.from_dict(store.get(record.id)["elements"])
            print(f"Restored {len(restored)} layer(s) from the snapshot")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
