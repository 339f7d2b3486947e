"""
Map source and style layer definitions for a circle.

Every circle owns up to three GeoJSON sources (polygon, center handle,
radius handles) and the layers drawing them. Ids embed the circle's
instance id so several circles can share one map.
"""

from dataclasses import dataclass
from typing import Any, Dict

from geocircle.options import CircleOptions

HANDLE_COLOR = '#ffffff'
HANDLE_RADIUS = 3.75

POLYGON_FILTER = ['==', '$type', 'Polygon']
POINT_FILTER = ['==', '$type', 'Point']


@dataclass(frozen=True)
class LayerIds:
    """Source and layer ids for one circle instance."""
    instance_id: int

    @property
    def circle_source(self) -> str:
        return f'circle-source-{self.instance_id}'

    @property
    def center_handle_source(self) -> str:
        return f'circle-center-handle-source-{self.instance_id}'

    @property
    def radius_handles_source(self) -> str:
        return f'circle-radius-handles-source-{self.instance_id}'

    @property
    def stroke(self) -> str:
        return f'circle-stroke-{self.instance_id}'

    @property
    def fill(self) -> str:
        return f'circle-fill-{self.instance_id}'

    @property
    def center_handle(self) -> str:
        return f'circle-center-handle-{self.instance_id}'

    @property
    def radius_handles(self) -> str:
        return f'circle-radius-handles-{self.instance_id}'

    @property
    def center_handle_stroke(self) -> str:
        return f'circle-center-handle-stroke-{self.instance_id}'

    @property
    def radius_handles_stroke(self) -> str:
        return f'circle-radius-handles-stroke-{self.instance_id}'


def geojson_source(data: Dict[str, Any]) -> Dict[str, Any]:
    return {'type': 'geojson', 'buffer': 1, 'data': data}


def stroke_layer(ids: LayerIds, options: CircleOptions) -> Dict[str, Any]:
    return {
        'id': ids.stroke,
        'type': 'line',
        'source': ids.circle_source,
        'filter': POLYGON_FILTER,
        'paint': {
            'line-color': options.stroke_color,
            'line-opacity': options.stroke_opacity,
            'line-width': options.stroke_weight,
        },
    }


def fill_layer(ids: LayerIds, options: CircleOptions) -> Dict[str, Any]:
    return {
        'id': ids.fill,
        'type': 'fill',
        'source': ids.circle_source,
        'filter': POLYGON_FILTER,
        'paint': {
            'fill-color': options.fill_color,
            'fill-opacity': options.fill_opacity,
        },
    }


def handle_paint(options: CircleOptions) -> Dict[str, Any]:
    return {
        'circle-color': HANDLE_COLOR,
        'circle-radius': HANDLE_RADIUS,
        'circle-stroke-color': options.stroke_color,
        'circle-stroke-opacity': options.stroke_opacity,
        'circle-stroke-width': options.stroke_weight,
    }


def center_handle_layer(ids: LayerIds, options: CircleOptions) -> Dict[str, Any]:
    return {
        'id': ids.center_handle,
        'type': 'circle',
        'source': ids.center_handle_source,
        'filter': POINT_FILTER,
        'paint': handle_paint(options),
    }


def radius_handles_layer(ids: LayerIds, options: CircleOptions) -> Dict[str, Any]:
    return {
        'id': ids.radius_handles,
        'type': 'circle',
        'source': ids.radius_handles_source,
        'filter': POINT_FILTER,
        'paint': handle_paint(options),
    }


def drag_stroke_layer(layer_id: str, source_id: str, options: CircleOptions) -> Dict[str, Any]:
    """Faded polygon outline shown while a handle is dragged."""
    return {
        'id': layer_id,
        'type': 'line',
        'source': source_id,
        'filter': POLYGON_FILTER,
        'paint': {
            'line-color': options.stroke_color,
            'line-opacity': options.stroke_opacity * 0.5,
            'line-width': options.stroke_weight,
        },
    }


def screen_stroke_layer(layer_id: str, source_id: str, options: CircleOptions,
                        pixel_radius: float) -> Dict[str, Any]:
    """Screen-space ring around the center point, standing in for the polygon of small circles."""
    return {
        'id': layer_id,
        'type': 'circle',
        'source': source_id,
        'filter': POINT_FILTER,
        'paint': {
            'circle-opacity': 0,
            'circle-radius': pixel_radius,
            'circle-stroke-color': options.stroke_color,
            'circle-stroke-opacity': options.stroke_opacity * 0.5,
            'circle-stroke-width': options.stroke_weight,
        },
    }
