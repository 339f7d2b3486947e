"""
Shared fixtures: an in-memory HostMap and circle factories.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from geocircle import BroadcastCoordinator, EditableCircle, Settings
from geocircle.host.protocol import MapMouseEvent

CENTER = {'lat': 39.984, 'lng': -75.343}


class FakeSource:
    type = 'geojson'

    def __init__(self, data: Dict[str, Any]):
        self.data = data
        self.updates = 0

    def set_data(self, data: Dict[str, Any]) -> None:
        self.data = data
        self.updates += 1


class FakeMap:
    """
    HostMap double that records sources, layers, listeners and paint.

    Pointer events are delivered explicitly with mouse(); hit-testing is
    driven by the `features` mapping (screen point -> layer ids under it) and
    unprojection by `positions` (screen point -> lng/lat), falling back to
    a fixed linear projection.
    """

    def __init__(self, loaded: bool = True, style_loaded: bool = True,
                 zoom: float = 10.0, size: Tuple[float, float] = (800, 600)):
        self._loaded = loaded
        self._style_loaded = style_loaded
        self.zoom = zoom
        self.size = size
        self.sources: Dict[str, FakeSource] = {}
        self.layers: List[Dict[str, Any]] = []
        self.listeners: Dict[Tuple[str, Optional[str]], List[Tuple[Callable, bool]]] = {}
        self.cursor = ''
        self.drag_pan = True
        self.frames: List[Callable] = []
        self.timers: List[Tuple[float, Callable]] = []
        self.features: Dict[Tuple[float, float], List[str]] = {}
        self.positions: Dict[Tuple[float, float], Tuple[float, float]] = {}

    # --- State ---

    def loaded(self) -> bool:
        return self._loaded

    def is_style_loaded(self) -> bool:
        return self._style_loaded

    def get_zoom(self) -> float:
        return self.zoom

    def container_size(self) -> Tuple[float, float]:
        return self.size

    # --- Events ---

    def on(self, event, handler, layer_id=None):
        self.listeners.setdefault((event, layer_id), []).append((handler, False))

    def once(self, event, handler):
        self.listeners.setdefault((event, None), []).append((handler, True))

    def off(self, event, handler, layer_id=None):
        entries = self.listeners.get((event, layer_id), [])
        for i, (registered, _) in enumerate(entries):
            if registered == handler:
                del entries[i]
                break

    def listener_count(self, event: str, layer_id: Optional[str] = None) -> int:
        return len(self.listeners.get((event, layer_id), []))

    def fire(self, event: str, payload: Any = None, layer_id: Optional[str] = None) -> None:
        key = (event, layer_id)
        entries = list(self.listeners.get(key, []))
        for entry in entries:
            if entry[1]:
                self.listeners[key].remove(entry)
        for handler, _ in entries:
            if payload is None:
                handler()
            else:
                handler(payload)

    def mouse(self, event: str, point=(0.0, 0.0), layer_id: Optional[str] = None, **kwargs) -> MapMouseEvent:
        payload = MapMouseEvent(type=event, point=point, **kwargs)
        self.fire(event, payload, layer_id)
        return payload

    # --- Sources and layers ---

    def add_source(self, source_id, source):
        assert source_id not in self.sources, f"duplicate source {source_id}"
        self.sources[source_id] = FakeSource(source['data'])

    def get_source(self, source_id):
        return self.sources.get(source_id)

    def remove_source(self, source_id):
        del self.sources[source_id]

    def add_layer(self, layer, before=None):
        assert self.get_layer(layer['id']) is None, f"duplicate layer {layer['id']}"
        layer = {**layer, 'paint': dict(layer.get('paint', {}))}
        ids = self.layer_ids()
        if before is not None and before in ids:
            self.layers.insert(ids.index(before), layer)
        else:
            self.layers.append(layer)

    def layer_ids(self) -> List[str]:
        return [layer['id'] for layer in self.layers]

    def get_layer(self, layer_id):
        for layer in self.layers:
            if layer['id'] == layer_id:
                return layer
        return None

    def remove_layer(self, layer_id):
        self.layers.remove(self.get_layer(layer_id))

    def set_paint_property(self, layer_id, name, value):
        self.get_layer(layer_id)['paint'][name] = value

    # --- Interaction ---

    def set_cursor(self, cursor):
        self.cursor = cursor

    def get_cursor(self):
        return self.cursor

    def disable_drag_pan(self):
        self.drag_pan = False

    def enable_drag_pan(self):
        self.drag_pan = True

    def unproject(self, point):
        if tuple(point) in self.positions:
            return self.positions[tuple(point)]
        return (point[0] / 1000.0, -point[1] / 1000.0)

    def query_rendered_features(self, point, layers):
        return [{'layer': layer_id} for layer_id in self.features.get(tuple(point), [])
                if layer_id in layers]

    # --- Scheduling ---

    def request_frame(self, callback):
        self.frames.append(callback)

    def call_later(self, delay, callback):
        self.timers.append((delay, callback))

    def flush_frames(self) -> int:
        frames, self.frames = self.frames, []
        for callback in frames:
            callback()
        return len(frames)

    def run_timers(self) -> int:
        timers, self.timers = self.timers, []
        for _, callback in timers:
            callback()
        return len(timers)


@pytest.fixture
def fake_map():
    return FakeMap()


@pytest.fixture
def coordinator():
    return BroadcastCoordinator()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def make_circle(coordinator, settings):
    """Factory for circles bound to the test's own coordinator and settings."""
    def _make(center=None, radius=300, **kwargs):
        kwargs.setdefault('coordinator', coordinator)
        kwargs.setdefault('settings', settings)
        return EditableCircle(center or CENTER, radius, **kwargs)
    return _make
