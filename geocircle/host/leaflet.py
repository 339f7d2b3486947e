"""
LeafletHost - HostMap adapter for NiceGUI's leaflet element.

Leaflet has no style layers, GeoJSON sources or layer-scoped pointer
events, so this adapter keeps sources and layers in Python, draws them as
leaflet vector layers (polygon, circleMarker), and does hit-testing itself
to deliver mouseenter/mouseleave/mousedown/click/contextmenu per layer.

Screen points are projected with spherical Web Mercator from the element's
current center, zoom and container size.

Usage:
    from nicegui import ui
    from geocircle import EditableCircle
    from geocircle.host.leaflet import LeafletHost

    m = ui.leaflet(center=(39.984, -75.343), zoom=12)
    host = LeafletHost(m)
    EditableCircle({'lat': 39.984, 'lng': -75.343}, 3000, editable=True).add_to(host)
"""

import asyncio
import logging
import math
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import shape

from geocircle.config import get_settings
from geocircle.host.protocol import Coordinate, Handler, MapMouseEvent, Point

logger = logging.getLogger(__name__)

TILE_SIZE = 256
MAX_LATITUDE = 85.0511287798

# Leaflet map events forwarded as host pointer events
POINTER_EVENTS = ('mousedown', 'mouseup', 'mousemove', 'mouseout', 'click', 'contextmenu')
# Events that can be scoped to a layer
LAYER_EVENTS = ('mousedown', 'mousemove', 'click', 'contextmenu')


class LeafletSource:
    """GeoJSON source kept on the Python side."""
    type = 'geojson'

    def __init__(self, host: 'LeafletHost', source_id: str, data: Dict[str, Any]):
        self._host = host
        self.id = source_id
        self.data = data

    def set_data(self, data: Dict[str, Any]) -> None:
        self.data = data
        self._host._source_changed(self.id)


def _features(data: Dict[str, Any], geometry_type: str) -> List[Dict[str, Any]]:
    if data.get('type') == 'FeatureCollection':
        features = data.get('features', [])
    elif data.get('type') == 'Feature':
        features = [data]
    else:
        features = [{'type': 'Feature', 'properties': {}, 'geometry': data}]
    return [f for f in features if (f.get('geometry') or {}).get('type') == geometry_type]


def _filter_type(layer: Dict[str, Any]) -> str:
    if layer.get('type') == 'circle':
        return 'Point'
    return 'Polygon'


def _latlngs(polygon: Dict[str, Any]) -> List[List[List[float]]]:
    return [[[lat, lng] for lng, lat in ring] for ring in polygon['geometry']['coordinates']]


def _style(layer: Dict[str, Any]) -> Dict[str, Any]:
    """Translate a style layer's paint into leaflet path options."""
    paint = layer.get('paint', {})
    kind = layer.get('type')
    if kind == 'fill':
        return {
            'stroke': False,
            'fillColor': paint.get('fill-color'),
            'fillOpacity': paint.get('fill-opacity', 1),
        }
    if kind == 'line':
        return {
            'fill': False,
            'color': paint.get('line-color'),
            'opacity': paint.get('line-opacity', 1),
            'weight': paint.get('line-width', 1),
        }
    return {
        'radius': paint.get('circle-radius', 5),
        'fillColor': paint.get('circle-color'),
        'fillOpacity': paint.get('circle-opacity', 1),
        'color': paint.get('circle-stroke-color'),
        'opacity': paint.get('circle-stroke-opacity', 1),
        'weight': paint.get('circle-stroke-width', 1),
    }


class LeafletHost:
    """
    HostMap implementation on top of a NiceGUI ui.leaflet element.

    Args:
        leaflet: The ui.leaflet element
        size: Container size in pixels, updated from resize events. Pointer
            events that carry a latlng are re-projected, so only events
            without one depend on this value
        frame_interval: Seconds between animation frames for request_frame
            (default Settings.frame_interval_s)
    """

    def __init__(self, leaflet: Any, size: Tuple[float, float] = (800, 600),
                 frame_interval: Optional[float] = None):
        self._leaflet = leaflet
        self._size = size
        if frame_interval is None:
            frame_interval = get_settings().frame_interval_s
        self._frame_interval = frame_interval
        self._loaded = False
        self._cursor = ''
        self._drag_pan = True

        # (event, layer_id) -> [(handler, once)]
        self._listeners: Dict[Tuple[str, Optional[str]], List[Tuple[Handler, bool]]] = {}
        self._sources: Dict[str, LeafletSource] = {}
        self._layers: List[Dict[str, Any]] = []
        self._rendered: Dict[str, List[Any]] = {}
        self._hovered: Set[str] = set()

        leaflet.on('init', self._on_init)
        leaflet.on('map-zoomend', self._on_zoom_end)
        leaflet.on('map-resize', self._on_resize)
        leaflet.on('map-unload', self._on_unload)
        for event in POINTER_EVENTS:
            leaflet.on(f'map-{event}', partial(self._on_pointer, event))

    # --- State ---

    def loaded(self) -> bool:
        return self._loaded

    def is_style_loaded(self) -> bool:
        return self._loaded

    def get_zoom(self) -> float:
        return float(self._leaflet.zoom)

    def container_size(self) -> Tuple[float, float]:
        return self._size

    @property
    def drag_pan_enabled(self) -> bool:
        return self._drag_pan

    # --- Events ---

    def on(self, event: str, handler: Handler, layer_id: Optional[str] = None) -> None:
        self._listeners.setdefault((event, layer_id), []).append((handler, False))

    def once(self, event: str, handler: Handler) -> None:
        self._listeners.setdefault((event, None), []).append((handler, True))

    def off(self, event: str, handler: Handler, layer_id: Optional[str] = None) -> None:
        entries = self._listeners.get((event, layer_id), [])
        for i, (registered, _) in enumerate(entries):
            if registered == handler:
                del entries[i]
                break

    def fire(self, event: str, payload: Any = None, layer_id: Optional[str] = None) -> None:
        """Call the listeners registered for event (and layer)."""
        key = (event, layer_id)
        entries = list(self._listeners.get(key, []))
        for entry in entries:
            if entry[1] and entry in self._listeners.get(key, []):
                self._listeners[key].remove(entry)
        for handler, _ in entries:
            if payload is None:
                handler()
            else:
                handler(payload)

    def _on_init(self, *args) -> None:
        self._loaded = True
        logger.info("Leaflet map initialized")
        self.fire('load')
        self.fire('idle')

    def _on_zoom_end(self, *args) -> None:
        self.fire('zoomend')

    def _on_unload(self, *args) -> None:
        logger.info("Leaflet map unloaded")
        self._loaded = False
        self.fire('remove')

    def _on_resize(self, e: Any) -> None:
        size = (getattr(e, 'args', None) or {}).get('newSize') or {}
        if 'x' in size and 'y' in size:
            self._size = (float(size['x']), float(size['y']))

    def _on_pointer(self, event_type: str, e: Any) -> None:
        args = getattr(e, 'args', None) or {}
        latlng = args.get('latlng')
        if latlng:
            # Same frame as project/unproject, whatever the real container size
            lng_lat = (float(latlng['lng']), float(latlng['lat']))
            point = self.project(lng_lat)
        else:
            point_args = args.get('containerPoint') or {}
            point = (float(point_args.get('x', 0.0)), float(point_args.get('y', 0.0)))
            lng_lat = self.unproject(point)
        original = args.get('originalEvent') or {}
        event = MapMouseEvent(
            type=event_type,
            point=point,
            lng_lat=lng_lat,
            ctrl_key=bool(original.get('ctrlKey', False)),
            original=args,
        )
        self.dispatch(event)

    def dispatch(self, event: MapMouseEvent) -> None:
        """Deliver a pointer event to map-wide and layer-scoped listeners."""
        if event.type == 'mousemove':
            self._update_hover(event)

        if event.type in LAYER_EVENTS:
            scoped = {layer_id for (name, layer_id) in self._listeners
                      if name == event.type and layer_id is not None}
            for layer_id in self._hit_layers(event.point, scoped):
                self.fire(event.type, event, layer_id)

        if event.type == 'mouseout':
            for layer_id in list(self._hovered):
                self.fire('mouseleave', event, layer_id)
            self._hovered.clear()

        self.fire(event.type, event)

    def _update_hover(self, event: MapMouseEvent) -> None:
        watched = {layer_id for (name, layer_id) in self._listeners
                   if name in ('mouseenter', 'mouseleave') and layer_id is not None}
        hits = set(self._hit_layers(event.point, watched))
        for layer_id in self._hovered - hits:
            self.fire('mouseleave', MapMouseEvent('mouseleave', event.point, event.lng_lat), layer_id)
        for layer_id in hits - self._hovered:
            self.fire('mouseenter', MapMouseEvent('mouseenter', event.point, event.lng_lat), layer_id)
        self._hovered = hits

    def _hit_layers(self, point: Point, layer_ids: Set[str]) -> List[str]:
        if not layer_ids:
            return []
        features = self.query_rendered_features(point, [l for l in layer_ids if self.get_layer(l)])
        hits: List[str] = []
        for f in features:
            if f['layer'] not in hits:
                hits.append(f['layer'])
        return hits

    # --- Sources and layers ---

    def add_source(self, source_id: str, source: Dict[str, Any]) -> None:
        if source_id in self._sources:
            raise ValueError(f"Source {source_id} already exists")
        self._sources[source_id] = LeafletSource(self, source_id, source.get('data', {}))

    def get_source(self, source_id: str) -> Optional[LeafletSource]:
        return self._sources.get(source_id)

    def remove_source(self, source_id: str) -> None:
        self._sources.pop(source_id, None)

    def add_layer(self, layer: Dict[str, Any], before: Optional[str] = None) -> None:
        if self.get_layer(layer['id']) is not None:
            raise ValueError(f"Layer {layer['id']} already exists")
        layer = {**layer, 'paint': dict(layer.get('paint', {}))}
        index = len(self._layers)
        if before is not None:
            ids = [l['id'] for l in self._layers]
            if before in ids:
                index = ids.index(before)
        self._layers.insert(index, layer)
        # Leaflet draws in insertion order; redraw everything stacked above
        self._render_from(index)

    def get_layer(self, layer_id: str) -> Optional[Dict[str, Any]]:
        for layer in self._layers:
            if layer['id'] == layer_id:
                return layer
        return None

    def remove_layer(self, layer_id: str) -> None:
        layer = self.get_layer(layer_id)
        if layer is None:
            return
        self._clear(layer_id)
        self._layers.remove(layer)
        self._hovered.discard(layer_id)

    def set_paint_property(self, layer_id: str, name: str, value: Any) -> None:
        layer = self.get_layer(layer_id)
        if layer is None:
            return
        layer['paint'][name] = value
        style = _style(layer)
        for rendered in self._rendered.get(layer_id, []):
            rendered.run_method('setStyle', style)

    def _clear(self, layer_id: str) -> None:
        for rendered in self._rendered.pop(layer_id, []):
            self._leaflet.remove_layer(rendered)

    def _draw(self, layer: Dict[str, Any]) -> None:
        source = self._sources.get(layer.get('source'))
        if source is None:
            return
        style = _style(layer)
        rendered = []
        for f in _features(source.data, _filter_type(layer)):
            if layer.get('type') == 'circle':
                lng, lat = f['geometry']['coordinates'][:2]
                rendered.append(self._leaflet.generic_layer(name='circleMarker', args=[[lat, lng], style]))
            else:
                rendered.append(self._leaflet.generic_layer(name='polygon', args=[_latlngs(f), style]))
        self._rendered[layer['id']] = rendered

    def _render_from(self, index: int) -> None:
        for layer in self._layers[index:]:
            self._clear(layer['id'])
        for layer in self._layers[index:]:
            self._draw(layer)

    def _source_changed(self, source_id: str) -> None:
        for index, layer in enumerate(self._layers):
            if layer.get('source') != source_id:
                continue
            features = _features(self._sources[source_id].data, _filter_type(layer))
            rendered = self._rendered.get(layer['id'], [])
            if len(features) != len(rendered):
                self._render_from(index)
                continue
            for f, item in zip(features, rendered):
                if layer.get('type') == 'circle':
                    lng, lat = f['geometry']['coordinates'][:2]
                    item.run_method('setLatLng', [lat, lng])
                else:
                    item.run_method('setLatLngs', _latlngs(f))

    # --- Interaction ---

    def _run_map_js(self, code: str) -> None:
        self._leaflet.client.run_javascript(f'getElement({self._leaflet.id}).map.{code}')

    def set_cursor(self, cursor: str) -> None:
        self._cursor = cursor
        self._run_map_js(f'getContainer().style.cursor = "{cursor}"')

    def get_cursor(self) -> str:
        return self._cursor

    def disable_drag_pan(self) -> None:
        if self._drag_pan:
            self._drag_pan = False
            self._run_map_js('dragging.disable()')

    def enable_drag_pan(self) -> None:
        if not self._drag_pan:
            self._drag_pan = True
            self._run_map_js('dragging.enable()')

    # --- Projection ---

    def _world_size(self) -> float:
        return TILE_SIZE * 2 ** self.get_zoom()

    def _to_world(self, lng: float, lat: float) -> Tuple[float, float]:
        size = self._world_size()
        lat = max(min(lat, MAX_LATITUDE), -MAX_LATITUDE)
        x = (lng + 180.0) / 360.0 * size
        sin_lat = math.sin(math.radians(lat))
        y = (0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi)) * size
        return x, y

    def _center_world(self) -> Tuple[float, float]:
        lat, lng = self._leaflet.center
        return self._to_world(lng, lat)

    def project(self, coord: Coordinate) -> Point:
        """Convert (lng, lat) to a screen point."""
        cx, cy = self._center_world()
        x, y = self._to_world(coord[0], coord[1])
        width, height = self._size
        return (x - cx + width / 2, y - cy + height / 2)

    def unproject(self, point: Point) -> Coordinate:
        cx, cy = self._center_world()
        width, height = self._size
        size = self._world_size()
        x = point[0] - width / 2 + cx
        y = point[1] - height / 2 + cy
        lng = x / size * 360.0 - 180.0
        lat = math.degrees(math.atan(math.sinh(math.pi * (1 - 2 * y / size))))
        return (lng, lat)

    def query_rendered_features(self, point: Point, layers: Sequence[str]) -> List[Dict[str, Any]]:
        """Features of the given layers under a screen point; fill polygons and circle markers are hit-testable."""
        hits: List[Dict[str, Any]] = []
        wanted = set(layers)
        for layer in reversed(self._layers):
            if layer['id'] not in wanted:
                continue
            source = self._sources.get(layer.get('source'))
            if source is None:
                continue
            kind = layer.get('type')
            for f in _features(source.data, _filter_type(layer)):
                if kind == 'circle' and self._hits_marker(point, layer, f):
                    hits.append({**f, 'layer': layer['id']})
                elif kind == 'fill' and self._hits_polygon(point, f):
                    hits.append({**f, 'layer': layer['id']})
        return hits

    def _hits_marker(self, point: Point, layer: Dict[str, Any], f: Dict[str, Any]) -> bool:
        paint = layer.get('paint', {})
        reach = paint.get('circle-radius', 5) + paint.get('circle-stroke-width', 0)
        x, y = self.project(tuple(f['geometry']['coordinates'][:2]))
        return math.hypot(point[0] - x, point[1] - y) <= reach

    def _hits_polygon(self, point: Point, f: Dict[str, Any]) -> bool:
        lng, lat = self.unproject(point)
        return shape(f['geometry']).intersects(ShapelyPoint(lng, lat))

    # --- Scheduling ---

    def request_frame(self, callback: Callable[[], Any]) -> None:
        asyncio.get_event_loop().call_later(self._frame_interval, callback)

    def call_later(self, delay: float, callback: Callable[[], Any]) -> None:
        asyncio.get_event_loop().call_later(delay, callback)
