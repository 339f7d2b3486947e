"""
Geodesy primitives for circle geometry.

The circle core only talks to a GeodesyPort. SphericalGeodesy is the default
implementation: great-circle math on a sphere through pyproj.Geod, and
bounding boxes through shapely.
"""

import math
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple, runtime_checkable

from pyproj import Geod
from shapely.geometry import box, mapping, shape

# Mean Earth radius in meters
EARTH_RADIUS_M = 6371008.8

Coordinate = Tuple[float, float]  # (lng, lat)
BBox = Tuple[float, float, float, float]  # (west, south, east, north)


@runtime_checkable
class GeodesyPort(Protocol):
    """
    Geodesy operations the circle core depends on.

    All functions are pure and synchronous. Coordinates are (lng, lat)
    pairs and distances are meters.
    """

    def destination(self, point: Coordinate, distance: float, bearing: float) -> Coordinate:
        ...

    def bearing(self, start: Coordinate, end: Coordinate, final: bool = False) -> float:
        ...

    def distance(self, start: Coordinate, end: Coordinate) -> float:
        ...

    def circle(self, center: Coordinate, radius: float, steps: int,
               properties: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        ...

    def bbox(self, geometry: Dict[str, Any]) -> BBox:
        ...

    def bbox_polygon(self, bbox: BBox) -> Dict[str, Any]:
        ...

    def truncate(self, coords: Any, precision: int = 6) -> Any:
        ...


def feature(geometry: Dict[str, Any], properties: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Wrap a GeoJSON geometry into a Feature."""
    return {
        'type': 'Feature',
        'properties': dict(properties or {}),
        'geometry': geometry,
    }


def point(coords: Coordinate, properties: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build a GeoJSON Point feature."""
    return feature({'type': 'Point', 'coordinates': [coords[0], coords[1]]}, properties)


def feature_collection(features: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    return {'type': 'FeatureCollection', 'features': list(features)}


def _round_half_up(value: float, factor: float) -> float:
    return math.floor(value * factor + 0.5) / factor


class SphericalGeodesy:
    """
    GeodesyPort backed by pyproj on a spherical earth.

    Using a sphere (f=0) keeps destination/bearing/distance consistent with
    the haversine-style math web maps use for circles, so the rendered
    polygon and the handle positions agree with what users measure.
    """

    def __init__(self, radius: float = EARTH_RADIUS_M):
        self._geod = Geod(a=radius, f=0)

    def destination(self, point: Coordinate, distance: float, bearing: float) -> Coordinate:
        lng, lat, _ = self._geod.fwd(point[0], point[1], bearing, distance)
        return (lng, lat)

    def bearing(self, start: Coordinate, end: Coordinate, final: bool = False) -> float:
        """
        Bearing from start to end in degrees.

        Args:
            start: Origin (lng, lat)
            end: Target (lng, lat)
            final: Return the course on arrival at end instead of the initial one

        Returns:
            Initial bearing in (-180, 180], or final bearing in [0, 360)
        """
        forward, back, _ = self._geod.inv(start[0], start[1], end[0], end[1])
        if final:
            return (back + 180.0) % 360.0
        return forward

    def distance(self, start: Coordinate, end: Coordinate) -> float:
        _, _, dist = self._geod.inv(start[0], start[1], end[0], end[1])
        return dist

    def circle(self, center: Coordinate, radius: float, steps: int,
               properties: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Approximate a geodesic circle with a closed polygon ring.

        Args:
            center: Circle center (lng, lat)
            radius: Radius in meters
            steps: Number of ring vertices (the closing vertex is extra)
            properties: Feature properties to carry on the polygon

        Returns:
            GeoJSON Feature with a Polygon geometry
        """
        steps = max(int(steps), 3)
        lngs = [center[0]] * steps
        lats = [center[1]] * steps
        azimuths = [-360.0 * i / steps for i in range(steps)]
        distances = [radius] * steps
        ring_lngs, ring_lats, _ = self._geod.fwd(lngs, lats, azimuths, distances)

        ring = [[lng, lat] for lng, lat in zip(ring_lngs, ring_lats)]
        ring.append(list(ring[0]))
        return feature({'type': 'Polygon', 'coordinates': [ring]}, properties)

    def bbox(self, geometry: Dict[str, Any]) -> BBox:
        if geometry.get('type') == 'Feature':
            geometry = geometry['geometry']
        elif geometry.get('type') == 'FeatureCollection':
            boxes = [self.bbox(f) for f in geometry['features']]
            return (
                min(b[0] for b in boxes), min(b[1] for b in boxes),
                max(b[2] for b in boxes), max(b[3] for b in boxes),
            )
        return tuple(shape(geometry).bounds)

    def bbox_polygon(self, bbox: BBox) -> Dict[str, Any]:
        """
        Polygon feature for a bounding box.

        The ring starts at the southwest corner and runs counter-clockwise,
        so vertex 0 is southwest and vertex 2 is northeast.
        """
        west, south, east, north = bbox
        polygon = box(west, south, east, north, ccw=True)
        geometry = mapping(polygon)
        coords = [[x, y] for x, y in geometry['coordinates'][0]]
        # shapely starts the ring at the southeast corner
        start = coords.index([west, south])
        ring = coords[start:-1] + coords[:start]
        ring.append(list(ring[0]))
        return feature({'type': 'Polygon', 'coordinates': [ring]})

    def truncate(self, coords: Any, precision: int = 6) -> Any:
        """
        Round coordinates (or nested coordinate arrays) to a fixed precision.

        Accepts a bare coordinate pair, nested lists of them, or a GeoJSON
        geometry/feature; returns the same shape with rounded values.
        """
        factor = 10 ** precision
        if isinstance(coords, dict):
            result = dict(coords)
            if 'geometry' in result:
                result['geometry'] = self.truncate(result['geometry'], precision)
            if 'coordinates' in result:
                result['coordinates'] = self.truncate(result['coordinates'], precision)
            return result
        if isinstance(coords, (list, tuple)) and coords and isinstance(coords[0], (int, float)):
            rounded = [_round_half_up(float(c), factor) for c in coords]
            return tuple(rounded) if isinstance(coords, tuple) else rounded
        if isinstance(coords, (list, tuple)):
            return [self.truncate(c, precision) for c in coords]
        return coords
