"""
EditableCircle - a geodesically correct circle rendered on a host map.

Composes the circle model, the derived geometry, the two handle drag
controllers and a public event emitter, and owns the attach/detach
lifecycle against a HostMap.

Usage:
    circle = EditableCircle({'lat': 39.984, 'lng': -75.343}, 25000,
                            editable=True, min_radius=1500, fill_color='#29AB87')
    circle.add_to(host_map)
    circle.on('centerchanged', lambda c: print('New center:', c.get_center()))
    circle.once('radiuschanged', lambda c: print('New radius:', c.get_radius()))
    circle.on('click', lambda event: print('Click:', event.point))
"""

import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from geocircle import __version__
from geocircle.broadcast import (
    RESUME_CENTER_HANDLE,
    RESUME_CIRCLE_FILL,
    RESUME_RADIUS_HANDLES,
    SUSPEND_CENTER_HANDLE,
    SUSPEND_CIRCLE_FILL,
    SUSPEND_RADIUS_HANDLES,
    BroadcastCoordinator,
    get_default_coordinator,
    next_instance_id,
)
from geocircle.config import Settings, get_settings
from geocircle.edit.constants import POINTER_CURSOR
from geocircle.edit.controller import CenterHandleController, HandleDragController, RadiusHandleController
from geocircle.errors import CircleStateError
from geocircle.events import EventEmitter, Listener
from geocircle.geodesy import GeodesyPort, SphericalGeodesy
from geocircle.geometry import (
    CircleGeometry,
    CircleShape,
    center_handle_collection,
    circle_collection,
    radius_handles_collection,
)
from geocircle.host.protocol import GeoJSONSource, HostMap, MapMouseEvent, Point
from geocircle.host.quirks import HostQuirks, NullQuirks
from geocircle.layers import (
    LayerIds,
    center_handle_layer,
    fill_layer,
    geojson_source,
    handle_paint,
    radius_handles_layer,
    stroke_layer,
)
from geocircle.model import Bounds, CenterInput, CircleModel, HandleKind, LatLng, parse_center
from geocircle.options import CircleOptions

logger = logging.getLogger(__name__)

CLICK = 'click'
CONTEXTMENU = 'contextmenu'
CENTER_CHANGED = 'centerchanged'
RADIUS_CHANGED = 'radiuschanged'
RENDERED = 'rendered'

_CHANGE_EVENTS = {
    HandleKind.CENTER: CENTER_CHANGED,
    HandleKind.RADIUS: RADIUS_CHANGED,
}

# Marker for "before layer not given", as opposed to an explicit None
_DEFAULT = object()


class EditableCircle:
    """
    A google.maps.Circle-style spherical cap for web maps.

    Args:
        center: Circle center as LatLng, {'lat', 'lng'} mapping or [lng, lat]
        radius: Radius in meters
        options: CircleOptions or a mapping of option names
        geodesy: GeodesyPort implementation (default SphericalGeodesy)
        coordinator: Broadcast coordinator shared with sibling circles
            (default: the process-wide one, looked up on attach)
        quirks: Host quirks strategy (default NullQuirks)
        settings: Interaction settings (default get_settings())
        **option_kwargs: Individual options, e.g. editable=True
    """

    VERSION = __version__

    def __init__(self, center: CenterInput, radius: float,
                 options: Union[CircleOptions, Mapping[str, Any], None] = None,
                 geodesy: Optional[GeodesyPort] = None,
                 coordinator: Optional[BroadcastCoordinator] = None,
                 quirks: Optional[HostQuirks] = None,
                 settings: Optional[Settings] = None,
                 **option_kwargs):
        if isinstance(options, CircleOptions):
            options = options.merged(option_kwargs) if option_kwargs else options
        else:
            options = CircleOptions.from_mapping(options, **option_kwargs)
        self.options: CircleOptions = options

        self.settings = settings or get_settings()
        self.geodesy = geodesy or SphericalGeodesy()
        self.quirks = quirks or NullQuirks()
        self._coordinator_override = coordinator
        self._coordinator: Optional[BroadcastCoordinator] = None

        self.model = CircleModel(parse_center(center), radius, options.min_radius, options.max_radius)
        self._geometry = CircleGeometry(self.geodesy)
        self.shape: Optional[CircleShape] = None

        self.map: Optional[HostMap] = None
        self._pending_map: Optional[HostMap] = None
        self._before: Any = _DEFAULT
        self._instance_id: Optional[int] = None
        self._events = EventEmitter()
        self._fill_bound = False
        self._context_click_pending = False
        self._stop_watching: Optional[Callable[[], None]] = None
        self._reattach: Optional[Tuple[HostMap, Callable[..., None]]] = None
        self._update_count = 0

        self._controllers: Dict[HandleKind, HandleDragController] = {
            HandleKind.CENTER: CenterHandleController(self),
            HandleKind.RADIUS: RadiusHandleController(self),
        }
        self._broadcast_handlers = {
            SUSPEND_CENTER_HANDLE: self._controllers[HandleKind.CENTER].on_suspend,
            RESUME_CENTER_HANDLE: self._controllers[HandleKind.CENTER].on_resume,
            SUSPEND_RADIUS_HANDLES: self._controllers[HandleKind.RADIUS].on_suspend,
            RESUME_RADIUS_HANDLES: self._controllers[HandleKind.RADIUS].on_resume,
            SUSPEND_CIRCLE_FILL: self._on_fill_suspend,
            RESUME_CIRCLE_FILL: self._on_fill_resume,
        }
        self._fill_handlers = {
            'click': self._on_fill_click,
            'contextmenu': self._on_fill_context_menu,
            'mousemove': self._on_fill_mouse_move,
            'mouseleave': self._on_fill_mouse_leave,
        }

        self._update_geometry()

    def __repr__(self) -> str:
        center = self.get_center()
        return (f"EditableCircle(id={self.instance_id}, center=({center.lat}, {center.lng}), "
                f"radius={self.get_radius()}, editable={self.options.editable})")

    # --- Identity ---

    @property
    def instance_id(self) -> int:
        """Process-unique id, assigned on first access."""
        if self._instance_id is None:
            self._instance_id = next_instance_id()
        return self._instance_id

    @property
    def ids(self) -> LayerIds:
        return LayerIds(self.instance_id)

    @property
    def coordinator(self) -> BroadcastCoordinator:
        if self._coordinator is None:
            self._coordinator = self._coordinator_override or get_default_coordinator()
        return self._coordinator

    @property
    def attached(self) -> bool:
        return self.map is not None

    def handle_layer_ids(self) -> List[str]:
        return [self.ids.center_handle, self.ids.radius_handles]

    def controller(self, kind: HandleKind) -> HandleDragController:
        return self._controllers[kind]

    # --- Events ---

    def on(self, event: str, handler: Listener, once: bool = False) -> 'EditableCircle':
        """
        Subscribe to a circle event.

        Args:
            event: 'click', 'contextmenu', 'centerchanged' or 'radiuschanged'
            handler: Called with the circle on 'centerchanged'/'radiuschanged',
                or with the MapMouseEvent on 'click'/'contextmenu'
            once: Remove the handler after its first call
        """
        self._events.on(event, handler, once=once)
        return self

    def once(self, event: str, handler: Listener) -> 'EditableCircle':
        return self.on(event, handler, once=True)

    def off(self, event: str, handler: Listener) -> 'EditableCircle':
        self._events.off(event, handler)
        return self

    def notify_changed(self, kind: HandleKind) -> None:
        """Snapshot the committed value and emit its change event."""
        if kind is HandleKind.CENTER:
            self.model.mark_center_committed()
        else:
            self.model.mark_radius_committed()
        self._events.emit(_CHANGE_EVENTS[kind], self)

    # --- Lifecycle ---

    def add_to(self, map: HostMap, before: Any = _DEFAULT) -> 'EditableCircle':
        """
        Add the circle's sources, layers and listeners to a map.

        Assets are created once the map is loaded and its style is ready.
        If the map style is later reloaded, the circle re-attaches itself.

        Args:
            map: Target host map
            before: Layer id to insert the circle layers before. When omitted,
                the configured default layer is used if the map has it; pass
                None explicitly to append the layers at the end.

        Raises:
            TypeError: map is None
            CircleStateError: the circle is attached to a different map
        """
        if map is None:
            raise TypeError('Map is undefined.')

        current = self.map or self._pending_map
        if current is map:
            return self
        if current is not None:
            raise CircleStateError(
                f"Circle {self.instance_id} is already attached to another map; remove() it first",
                self.instance_id,
            )

        self._pending_map = map
        self._before = before

        if map.loaded():
            if map.is_style_loaded():
                self._add_assets()
            else:
                map.once('idle', self._add_assets)
        else:
            map.once('load', self._add_assets)
        return self

    def remove(self) -> 'EditableCircle':
        """Remove source data, layers and listeners from the map. Safe to call repeatedly."""
        self._cancel_reattach()
        if self._pending_map is not None:
            self._pending_map.off('load', self._add_assets)
            self._pending_map.off('idle', self._add_assets)
            self._pending_map = None

        map = self.map
        if map is None:
            return self

        map.off('styledataloading', self._on_style_data_loading)
        if self._stop_watching is not None:
            self._stop_watching()
            self._stop_watching = None

        ids = self.ids
        if self.options.editable:
            for controller in self._controllers.values():
                controller.cancel()
            self._unbind_broadcast_listeners()
            self.coordinator.unregister(self)

            for controller, layer_id in (
                (self._controllers[HandleKind.RADIUS], ids.radius_handles),
                (self._controllers[HandleKind.CENTER], ids.center_handle),
            ):
                controller.unbind()
                if map.get_layer(layer_id) is not None:
                    map.remove_layer(layer_id)

            for source_id in (ids.radius_handles_source, ids.center_handle_source):
                if map.get_source(source_id) is not None:
                    map.remove_source(source_id)

        map.off('zoomend', self._on_zoom_end)
        self._unbind_fill_listeners()
        for layer_id in (ids.fill, ids.stroke):
            if map.get_layer(layer_id) is not None:
                map.remove_layer(layer_id)
        if map.get_source(ids.circle_source) is not None:
            map.remove_source(ids.circle_source)

        self.map = None
        logger.info(f"Circle {self.instance_id} removed from map")
        return self

    def _resolve_before(self, map: HostMap) -> Optional[str]:
        if self._before is not _DEFAULT:
            return self._before
        default = self.settings.default_before_layer
        if default and map.get_layer(default) is not None:
            return default
        return None

    def _add_assets(self, *args) -> None:
        map = self._pending_map
        if map is None:
            return
        self._pending_map = None
        self.map = map
        ids = self.ids
        before = self._resolve_before(map)

        self._update_geometry()
        map.add_source(ids.circle_source, geojson_source(circle_collection(self.shape)))
        map.add_layer(stroke_layer(ids, self.options), before)
        map.add_layer(fill_layer(ids, self.options), before)
        self._bind_fill_listeners()
        map.on('zoomend', self._on_zoom_end)

        if self.options.editable:
            map.add_source(ids.center_handle_source,
                           geojson_source(center_handle_collection(self.shape)))
            map.add_source(ids.radius_handles_source,
                           geojson_source(radius_handles_collection(self.shape)))

            map.add_layer(center_handle_layer(ids, self.options))
            self._controllers[HandleKind.CENTER].bind()

            map.add_layer(radius_handles_layer(ids, self.options))
            self._controllers[HandleKind.RADIUS].bind()

            self.coordinator.register(self)
            self._bind_broadcast_listeners()

        map.on('styledataloading', self._on_style_data_loading)
        self._stop_watching = self.quirks.watch_container_removal(map, self._on_container_removed)
        self._set_zoom(map.get_zoom())

        logger.info(f"Circle {self.instance_id} added to map (before={before!r})")
        self._events.emit(RENDERED, self)

    def _on_style_data_loading(self, *args) -> None:
        """Remove the circle when the map style changes and add it back once the new style is in."""
        map = self.map
        if map is None:
            return
        before = self._before

        def reattach(*_):
            self._reattach = None
            self.add_to(map, before)

        logger.info(f"Map style reloading, re-attaching circle {self.instance_id}")
        self.remove()
        map.once('styledata', reattach)
        self._reattach = (map, reattach)

    def _cancel_reattach(self) -> None:
        if self._reattach is not None:
            map, reattach = self._reattach
            map.off('styledata', reattach)
            self._reattach = None

    def _on_container_removed(self) -> None:
        logger.info(f"Map container removed, detaching circle {self.instance_id}")
        self.remove()

    def _when_rendered(self, apply: Callable[[], None]) -> None:
        """Run apply now if attached, else once the circle is first rendered on a map."""
        if self.map is not None:
            apply()
        else:
            self.once(RENDERED, lambda _circle: apply())

    # --- Center, radius, bounds ---

    def get_center(self) -> LatLng:
        lng, lat = self.model.committed_center
        return LatLng(lat=lat, lng=lng)

    def set_center(self, position: CenterInput) -> 'EditableCircle':
        center = parse_center(position)

        def apply():
            self.model.set_center(center)
            self.refresh()
            if self.model.center_changed():
                self.notify_changed(HandleKind.CENTER)

        self._when_rendered(apply)
        return self

    def get_radius(self) -> float:
        """Current radius, in meters."""
        return self.model.committed_radius

    def set_radius(self, radius: float) -> 'EditableCircle':
        """Set the radius in meters, rounded and clamped to [min_radius, max_radius]."""
        def apply():
            self.model.set_radius(radius)
            self.refresh()
            if self.model.radius_changed():
                self.notify_changed(HandleKind.RADIUS)

        self._when_rendered(apply)
        return self

    def get_bounds(self) -> Bounds:
        """Southwestern/northeastern bounds of the circle polygon."""
        geodesy = self.geodesy
        bbox_polygon = geodesy.truncate(
            geodesy.bbox_polygon(geodesy.bbox(self.shape.polygon)),
            self.settings.coordinate_precision,
        )
        ring = bbox_polygon['geometry']['coordinates'][0]
        return Bounds(
            sw=LatLng(lat=ring[0][1], lng=ring[0][0]),
            ne=LatLng(lat=ring[2][1], lng=ring[2][0]),
        )

    # --- Options ---

    def get_options(self) -> CircleOptions:
        return self.options

    def set_options(self, options: Optional[Mapping[str, Any]] = None, **changes) -> 'EditableCircle':
        """
        Merge option changes into the circle's options.

        New radius limits re-clamp the radius; a clamped radius fires
        'radiuschanged' like set_radius does.

        Raises:
            CircleStateError: 'editable' is toggled while the circle is attached
        """
        merged = self.options.merged({**(options or {}), **changes})
        if merged.editable != self.options.editable and (self.map or self._pending_map):
            raise CircleStateError(
                f"Cannot toggle editable on attached circle {self.instance_id}", self.instance_id
            )

        self.options = merged
        self.model.set_limits(merged.min_radius, merged.max_radius)
        if self.map is not None:
            self._apply_paint()
        self.refresh()
        if self.model.radius_changed() and not self.model.editing_radius:
            self.notify_changed(HandleKind.RADIUS)
        return self

    def _apply_paint(self) -> None:
        ids = self.ids
        paints = [
            (ids.stroke, stroke_layer(ids, self.options)['paint']),
            (ids.fill, fill_layer(ids, self.options)['paint']),
        ]
        if self.options.editable:
            paints.append((ids.center_handle, handle_paint(self.options)))
            paints.append((ids.radius_handles, handle_paint(self.options)))
        for layer_id, paint in paints:
            if self.map.get_layer(layer_id) is None:
                continue
            for name, value in paint.items():
                self.map.set_paint_property(layer_id, name, value)

    # --- Geometry and rendering ---

    @property
    def small_radius_drag(self) -> bool:
        """True while a center drag of a small circle renders a screen-space stand-in."""
        return (self.model.editing_center
                and self.model.active_radius() < self.settings.small_radius_threshold_m)

    def refresh(self) -> None:
        """Recompute geometry from the active center/radius and push it to the map."""
        self._update_geometry()
        self._animate()

    def _update_geometry(self) -> None:
        previous = self.shape if self.small_radius_drag else None
        self.shape = self._geometry.recompute(
            self.model.active_center(), self.model.active_radius(),
            self.model.zoom, self.options, previous,
        )
        if self.options.debug_el is not None or logger.isEnabledFor(logging.DEBUG):
            self._write_debug()

    def _write_debug(self) -> None:
        self._update_count += 1
        lng, lat = self.model.active_center()
        bounds = self.get_bounds()
        zoom = self.model.zoom or 0.0
        text = (
            f"Center: {json.dumps({'lat': lat, 'lng': lng})}"
            f" / Radius: {self.shape.radius}"
            f" / Bounds: {json.dumps({'sw': vars(bounds.sw), 'ne': vars(bounds.ne)})}"
            f" / Steps: {self.shape.steps}"
            f" / Zoom: {zoom:.2f}"
            f" / ID: {self.instance_id}"
            f" / #: {self._update_count}"
        )
        logger.debug(text)
        if self.options.debug_el is not None:
            self.options.debug_el.set_text(text)

    def _geojson_source(self, source_id: str) -> Optional[GeoJSONSource]:
        source = self.map.get_source(source_id)
        if source is None:
            return None
        if getattr(source, 'type', None) != 'geojson':
            raise TypeError(f"Map source {source_id} is not a GeoJSON source")
        return source

    def _animate(self) -> None:
        if self.map is None:
            return
        ids = self.ids
        model = self.model
        source = self._geojson_source(ids.circle_source)
        if source is None:
            return

        if not model.is_dragging:
            source.set_data(circle_collection(self.shape))

        if self.options.editable:
            if not model.editing_radius:
                center_source = self._geojson_source(ids.center_handle_source)
                if center_source is not None:
                    center_source.set_data(center_handle_collection(self.shape, point_only=self.small_radius_drag))
            if not model.editing_center:
                radius_source = self._geojson_source(ids.radius_handles_source)
                if radius_source is not None:
                    radius_source.set_data(radius_handles_collection(self.shape))

    def _set_zoom(self, zoom: float) -> None:
        self.model.zoom = zoom
        if self.options.refine_stroke:
            self.refresh()

    def _on_zoom_end(self, *args) -> None:
        self._set_zoom(self.map.get_zoom())

    # --- Fill listeners ---

    def _bind_fill_listeners(self) -> None:
        if self._fill_bound or self.map is None:
            return
        for event, handler in self._fill_handlers.items():
            self.map.on(event, handler, self.ids.fill)
        self._fill_bound = True

    def _unbind_fill_listeners(self) -> None:
        if not self._fill_bound or self.map is None:
            return
        for event, handler in self._fill_handlers.items():
            self.map.off(event, handler, self.ids.fill)
        self._fill_bound = False

    def _on_fill_suspend(self, instance_id: int, kind: HandleKind) -> None:
        self._unbind_fill_listeners()

    def _on_fill_resume(self, instance_id: int, kind: HandleKind) -> None:
        self._bind_fill_listeners()

    def point_on_handle(self, point: Point) -> bool:
        """True if a screen point is over any editable circle's center/radius handle."""
        layers = [layer_id for layer_id in self.coordinator.handle_layer_ids()
                  if self.map.get_layer(layer_id) is not None]
        if not layers:
            return False
        return len(self.map.query_rendered_features(point, layers)) > 0

    def _on_fill_mouse_move(self, event: MapMouseEvent) -> None:
        if self._events.listener_count(CLICK) > 0 and not self.point_on_handle(event.point):
            self.map.set_cursor(POINTER_CURSOR)

    def _on_fill_mouse_leave(self, event: MapMouseEvent) -> None:
        if self._events.listener_count(CLICK) > 0 and not self.point_on_handle(event.point):
            self.map.set_cursor('')

    def _on_fill_context_menu(self, event: MapMouseEvent) -> None:
        if self.point_on_handle(event.point):
            return
        if self.quirks.is_context_click(event):
            # A click follows; report that one as the context menu instead
            self._context_click_pending = True
        else:
            self._events.emit(CONTEXTMENU, event)

    def _on_fill_click(self, event: MapMouseEvent) -> None:
        if self.point_on_handle(event.point):
            return
        if self._context_click_pending:
            self._context_click_pending = False
            self._events.emit(CONTEXTMENU, event)
        else:
            self._events.emit(CLICK, event)

    # --- Broadcast listeners ---

    def _bind_broadcast_listeners(self) -> None:
        for event, handler in self._broadcast_handlers.items():
            self.coordinator.subscribe(event, handler)

    def _unbind_broadcast_listeners(self) -> None:
        for event, handler in self._broadcast_handlers.items():
            self.coordinator.unsubscribe(event, handler)
