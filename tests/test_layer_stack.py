"""
Tests for LayerStack.

Tests cover:
- Adding, reading and removing layers
- Move semantics
- Edits, reset and selection
- Snapshot serialization
- Concurrent mutation
"""

import threading

import pytest

from RC_Libs.errors import ValidationError
from RC_Libs.GeometryLib.geometry_models import Rectangle
from RC_Libs.LayersLib.layer_models import Layer
from RC_Libs.LayersLib.layer_stack import LayerStack


def _layer(name, **kwargs):
    return Layer(rectangle=Rectangle(0, 0, 10, 10), layer_id=name, **kwargs)


def _ids(stack):
    return [layer.layer_id for layer in stack.layers()]


class TestLayerStackBasics:
    """Tests for adding, getting and removing layers."""

    def test_add_appends_in_order(self):
        """Layers should keep insertion order."""
        stack = LayerStack(layers=[_layer("a"), _layer("b")])
        stack.add(_layer("c"))

        assert _ids(stack) == ["a", "b", "c"]
        assert len(stack) == 3
        assert "b" in stack

    def test_add_at_index(self):
        """An explicit index should insert at that position."""
        stack = LayerStack(layers=[_layer("a"), _layer("b")])
        stack.add(_layer("c"), index=0)

        assert _ids(stack) == ["c", "a", "b"]

    def test_add_rejects_duplicates(self):
        """A layer id may only appear once."""
        stack = LayerStack(layers=[_layer("a")])

        with pytest.raises(ValidationError):
            stack.add(_layer("a"))

    def test_add_rejects_non_layers(self):
        """Only Layer objects can be added."""
        with pytest.raises(TypeError):
            LayerStack().add({"layer_id": "a"})

    def test_get_returns_copy(self):
        """Mutating the returned layer should not affect the stack."""
        stack = LayerStack(layers=[_layer("a")])

        layer = stack.get("a")
        layer.update(opacity=0.2)

        assert stack.get("a").opacity == 1.0

    def test_add_stores_copy(self):
        """Mutating the added layer or the returned one should not affect the stack."""
        stack = LayerStack()
        layer = _layer("a")

        returned = stack.add(layer)
        layer.update(opacity=0.1)
        returned.update(scale=3.0)

        assert stack.get("a").opacity == 1.0
        assert stack.get("a").scale == 1.0

    def test_constructor_stores_copies(self):
        """Layers passed to the constructor should be copied."""
        layer = _layer("a")
        stack = LayerStack(layers=[layer])

        layer.update(z_index=9)

        assert stack.get("a").z_index == 0

    def test_get_unknown_raises(self):
        """Unknown ids should raise KeyError."""
        with pytest.raises(KeyError):
            LayerStack().get("missing")

    def test_remove(self):
        """Remove should report whether a layer existed."""
        stack = LayerStack(layers=[_layer("a"), _layer("b")])
        stack.select("a")

        assert stack.remove("a") is True
        assert stack.remove("a") is False
        assert _ids(stack) == ["b"]
        assert stack.selected_id is None


class TestLayerStackMove:
    """Tests for move and move_layer."""

    def test_move_forward(self):
        """Moving to a later index should place the layer there."""
        stack = LayerStack(layers=[_layer("a"), _layer("b"), _layer("c")])

        assert stack.move(0, 2) is True
        assert _ids(stack) == ["b", "c", "a"]

    def test_move_backward(self):
        """Moving to an earlier index should place the layer there."""
        stack = LayerStack(layers=[_layer("a"), _layer("b"), _layer("c")])

        stack.move(2, 0)

        assert _ids(stack) == ["c", "a", "b"]

    def test_move_out_of_range_source_is_noop(self):
        """An invalid source index should change nothing."""
        stack = LayerStack(layers=[_layer("a"), _layer("b")])

        assert stack.move(5, 0) is False
        assert stack.move(-1, 0) is False
        assert _ids(stack) == ["a", "b"]

    def test_move_clamps_destination(self):
        """A destination past the end should clamp to the end."""
        stack = LayerStack(layers=[_layer("a"), _layer("b"), _layer("c")])

        stack.move(0, 99)

        assert _ids(stack) == ["b", "c", "a"]

    def test_move_layer_by_id(self):
        """Layers can be moved by id."""
        stack = LayerStack(layers=[_layer("a"), _layer("b"), _layer("c")])

        stack.move_layer("c", 1)

        assert _ids(stack) == ["a", "c", "b"]


class TestLayerStackEditing:
    """Tests for update, reset and selection."""

    def test_update(self):
        """Update should normalize and return a copy."""
        stack = LayerStack(layers=[_layer("a")])

        updated = stack.update("a", rotation_degrees=-10, scale=9)

        assert updated.rotation_degrees == 350.0
        assert updated.scale == 5.0
        assert stack.get("a").scale == 5.0

    def test_reset_restores_original_raster(self):
        """Reset should restore pixels but keep transforms."""
        stack = LayerStack(layers=[_layer("a", raster="data:image/png;base64,ORIG", original_raster="data:image/png;base64,ORIG")])
        stack.update("a", raster="data:image/png;base64,EDIT", opacity=0.5)

        layer = stack.reset_layer("a")

        assert layer.raster == "data:image/png;base64,ORIG"
        assert layer.opacity == 0.5

    def test_select_unknown_raises(self):
        """Selecting an unknown layer should raise KeyError."""
        stack = LayerStack(layers=[_layer("a")])

        with pytest.raises(KeyError):
            stack.select("missing")

        stack.select("a")
        assert stack.selected_id == "a"
        stack.select(None)
        assert stack.selected_id is None

    def test_replace_all_and_clear(self):
        """replace_all swaps contents; clear empties the stack."""
        stack = LayerStack(base_raster="base-1", layers=[_layer("a")])
        stack.replace_all([_layer("x"), _layer("y")], base_raster="base-2")

        assert _ids(stack) == ["x", "y"]
        assert stack.base_raster == "base-2"

        stack.clear()

        assert len(stack) == 0
        assert stack.base_raster is None

    def test_replace_all_stores_copies(self):
        """Mutating replaced-in layers afterwards should not affect the stack."""
        stack = LayerStack()
        layer = _layer("x")
        stack.replace_all([layer])

        layer.update(rotation_degrees=90)

        assert stack.get("x").rotation_degrees == 0.0


class TestLayerStackSerialization:
    """Tests for to_dict/from_dict."""

    def test_roundtrip(self):
        """A stack should survive serialization with selection."""
        stack = LayerStack(base_raster="data:image/png;base64,BASE", layers=[_layer("a", z_index=2), _layer("b")])
        stack.select("b")

        restored = LayerStack.from_dict(stack.to_dict())

        assert _ids(restored) == ["a", "b"]
        assert restored.get("a").z_index == 2
        assert restored.base_raster == "data:image/png;base64,BASE"
        assert restored.selected_id == "b"

    def test_from_dict_rejects_bad_layers(self):
        """'layers' must be a list."""
        with pytest.raises(ValidationError):
            LayerStack.from_dict({"layers": "nope"})


class TestLayerStackConcurrency:
    """Tests for concurrent mutation."""

    def test_concurrent_adds_and_moves(self):
        """Concurrent adds and moves should never lose layers."""
        stack = LayerStack()

        def worker(offset):
            for i in range(50):
                stack.add(_layer(f"w{offset}-{i}"))
                stack.move(0, len(stack))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(stack) == 200
        assert len(set(_ids(stack))) == 200
