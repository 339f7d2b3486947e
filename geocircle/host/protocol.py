"""
HostMap Protocol Definition.

This module defines the interface a map rendering engine must offer for
circles to attach to it. The engine owns the canvas, sources, layers and
low-level pointer events; circles only use what is declared here.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

Point = Tuple[float, float]  # screen (x, y) in pixels
Coordinate = Tuple[float, float]  # (lng, lat)
Handler = Callable[..., Any]


@dataclass(frozen=True)
class MapMouseEvent:
    """
    Pointer event as delivered by the host.

    Attributes:
        type: Event type ('mousedown', 'mouseup', 'mouseout', 'click', ...)
        point: Screen position relative to the map container
        lng_lat: Geographic position under the pointer
        ctrl_key: Whether the ctrl modifier was held
        from_classes: CSS classes of the element the pointer left (mouseout)
        to_classes: CSS classes of the element the pointer entered (mouseout)
        original: Raw host payload, if any
    """
    type: str
    point: Point = (0.0, 0.0)
    lng_lat: Optional[Coordinate] = None
    ctrl_key: bool = False
    from_classes: FrozenSet[str] = field(default_factory=frozenset)
    to_classes: FrozenSet[str] = field(default_factory=frozenset)
    original: Any = None


@runtime_checkable
class GeoJSONSource(Protocol):
    type: str

    def set_data(self, data: Dict[str, Any]) -> None:
        ...


@runtime_checkable
class HostMap(Protocol):
    """
    Abstract protocol for host maps.

    Event names follow the usual web-map vocabulary: 'load', 'idle',
    'styledata', 'styledataloading', 'zoomend', 'mousemove', 'mouseup',
    'mouseout', and the layer-scoped 'mouseenter', 'mouseleave',
    'mousedown', 'mousemove', 'click', 'contextmenu'.
    """

    # --- State ---

    def loaded(self) -> bool:
        """Return True once the map finished its initial load."""
        ...

    def is_style_loaded(self) -> bool:
        """Return True if the current style is ready for sources/layers."""
        ...

    def get_zoom(self) -> float:
        ...

    def container_size(self) -> Tuple[float, float]:
        """Return (width, height) of the map container in pixels."""
        ...

    # --- Events ---

    def on(self, event: str, handler: Handler, layer_id: Optional[str] = None) -> None:
        """Register a listener, optionally scoped to features of one layer."""
        ...

    def once(self, event: str, handler: Handler) -> None:
        ...

    def off(self, event: str, handler: Handler, layer_id: Optional[str] = None) -> None:
        ...

    # --- Sources and layers ---

    def add_source(self, source_id: str, source: Dict[str, Any]) -> None:
        ...

    def get_source(self, source_id: str) -> Optional[GeoJSONSource]:
        ...

    def remove_source(self, source_id: str) -> None:
        ...

    def add_layer(self, layer: Dict[str, Any], before: Optional[str] = None) -> None:
        ...

    def get_layer(self, layer_id: str) -> Optional[Dict[str, Any]]:
        ...

    def remove_layer(self, layer_id: str) -> None:
        ...

    def set_paint_property(self, layer_id: str, name: str, value: Any) -> None:
        ...

    # --- Interaction ---

    def set_cursor(self, cursor: str) -> None:
        ...

    def get_cursor(self) -> str:
        ...

    def disable_drag_pan(self) -> None:
        ...

    def enable_drag_pan(self) -> None:
        ...

    def unproject(self, point: Point) -> Coordinate:
        """Convert a screen point to (lng, lat)."""
        ...

    def query_rendered_features(self, point: Point, layers: Sequence[str]) -> List[Dict[str, Any]]:
        """Return rendered features of the given layers under a screen point."""
        ...

    # --- Scheduling ---

    def request_frame(self, callback: Callable[[], Any]) -> None:
        """Run callback before the next repaint."""
        ...

    def call_later(self, delay: float, callback: Callable[[], Any]) -> None:
        """Run callback after delay seconds."""
        ...
