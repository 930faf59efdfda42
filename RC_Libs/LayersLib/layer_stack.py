"""
Owned, ordered layer collection.

LayerStack holds a session's layers in list order together with the base
raster they sit on. All mutation goes through explicit sequence operations
guarded by a lock, so concurrent callers never observe a half-applied move.

Classes:
    LayerStack: Thread-safe ordered collection of Layer objects
"""

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional

from RC_Libs.errors import ValidationError
from RC_Libs.LayersLib.layer_models import Layer

logger = logging.getLogger(__name__)


class LayerStack:
    """
    Ordered collection of layers for one editing session.

    Example:
        >>> stack = LayerStack(base_raster=background_url)
        >>> stack.add(logo_layer)
        >>> stack.update(logo_layer.layer_id, opacity=0.5, rotation_degrees=30)
        >>> stack.move(0, 2)
        >>> layers = stack.layers()  # independent copies
    """

    def __init__(self, base_raster: Optional[str] = None, layers: Optional[Iterable[Layer]] = None):
        self._lock = threading.RLock()
        self._layers: List[Layer] = []
        self._selected_id: Optional[str] = None
        self.base_raster = base_raster

        for layer in layers or []:
            self.add(layer)

    def __len__(self) -> int:
        with self._lock:
            return len(self._layers)

    def __contains__(self, layer_id: object) -> bool:
        with self._lock:
            return any(layer.layer_id == layer_id for layer in self._layers)

    def _index_of(self, layer_id: str) -> int:
        for index, layer in enumerate(self._layers):
            if layer.layer_id == layer_id:
                return index
        raise KeyError(f"No layer with id '{layer_id}'")

    def add(self, layer: Layer, index: Optional[int] = None) -> Layer:
        """
        Insert a copy of a layer (at the end by default).

        Returns:
            Copy of the stored layer

        Raises:
            TypeError: If layer is not a Layer
            ValidationError: If a layer with the same id is already present
        """
        if not isinstance(layer, Layer):
            raise TypeError(f"Expected Layer, got {type(layer)}")

        layer = layer.copy()
        with self._lock:
            if any(existing.layer_id == layer.layer_id for existing in self._layers):
                raise ValidationError(f"Layer '{layer.layer_id}' is already in the stack")

            if index is None:
                self._layers.append(layer)
            else:
                self._layers.insert(max(0, min(int(index), len(self._layers))), layer)

        logger.debug(f"Added layer {layer.layer_id} ({layer.kind})")
        return layer.copy()

    def get(self, layer_id: str) -> Layer:
        """Return a copy of the layer with the given id (KeyError if absent)."""
        with self._lock:
            return self._layers[self._index_of(layer_id)].copy()

    def update(self, layer_id: str, **changes: Any) -> Layer:
        """
        Apply user edits (opacity, scale, rotation, rectangle...) to a layer.

        Returns:
            Copy of the updated layer

        Raises:
            KeyError: If the layer or a field is unknown
            ValidationError: If a value cannot be normalized
        """
        with self._lock:
            layer = self._layers[self._index_of(layer_id)]
            layer.update(**changes)
            return layer.copy()

    def remove(self, layer_id: str) -> bool:
        """
        Remove a layer.

        Returns:
            True if removed, False if no such layer existed
        """
        with self._lock:
            try:
                index = self._index_of(layer_id)
            except KeyError:
                return False

            del self._layers[index]
            if self._selected_id == layer_id:
                self._selected_id = None

        logger.debug(f"Removed layer {layer_id}")
        return True

    def move(self, from_index: int, to_index: int) -> bool:
        """
        Move the layer at from_index so it ends up at to_index.

        An out-of-range source is a no-op; the destination is clamped into
        the list.

        Returns:
            True if a layer was moved
        """
        with self._lock:
            if not 0 <= from_index < len(self._layers):
                return False

            layer = self._layers.pop(from_index)
            to_index = max(0, min(int(to_index), len(self._layers)))
            self._layers.insert(to_index, layer)

        logger.debug(f"Moved layer {layer.layer_id} from {from_index} to {to_index}")
        return True

    def move_layer(self, layer_id: str, to_index: int) -> bool:
        """Move a layer, addressed by id, to a new position."""
        with self._lock:
            return self.move(self._index_of(layer_id), to_index)

    def reset_layer(self, layer_id: str) -> Layer:
        """
        Restore a layer's raster to the one captured at extraction.

        Transform settings are kept; only the pixels are restored.
        """
        with self._lock:
            layer = self._layers[self._index_of(layer_id)]
            if layer.original_raster:
                layer.update(raster=layer.original_raster)
            return layer.copy()

    def select(self, layer_id: Optional[str]) -> None:
        with self._lock:
            if layer_id is not None:
                self._index_of(layer_id)
            self._selected_id = layer_id

    @property
    def selected_id(self) -> Optional[str]:
        with self._lock:
            return self._selected_id

    def layers(self) -> List[Layer]:
        """Snapshot of the stack as independent copies, in list order."""
        with self._lock:
            return [layer.copy() for layer in self._layers]

    def replace_all(self, layers: Iterable[Layer], base_raster: Optional[str] = None) -> None:
        """Swap in a new layer list (e.g. after extraction) in one step."""
        new_layers = []
        for layer in layers:
            if not isinstance(layer, Layer):
                raise TypeError(f"Expected Layer, got {type(layer)}")
            new_layers.append(layer.copy())

        with self._lock:
            self._layers = new_layers
            self._selected_id = None
            if base_raster is not None:
                self.base_raster = base_raster

    def clear(self) -> None:
        """Remove all layers and the base raster."""
        with self._lock:
            self._layers.clear()
            self._selected_id = None
            self.base_raster = None
        logger.debug("Layer stack cleared")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the 'elements' part of a session snapshot."""
        with self._lock:
            return {
                "main_image": self.base_raster,
                "layers": [layer.to_dict() for layer in self._layers],
                "selected_layer": self._selected_id,
            }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayerStack":
        """Rebuild a stack from a session snapshot's 'elements' mapping."""
        if not isinstance(data, dict):
            raise ValidationError(f"Layer stack data must be a mapping, got {type(data).__name__}")

        layers_data = data.get("layers") or []
        if not isinstance(layers_data, list):
            raise ValidationError("Layer stack 'layers' must be a list")

        stack = cls(
            base_raster=data.get("main_image"),
            layers=[Layer.from_dict(entry) for entry in layers_data],
        )

        selected = data.get("selected_layer")
        if selected in stack:
            stack.select(selected)

        return stack
