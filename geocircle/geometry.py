"""
Circle geometry derivation.

Turns a center/radius into the polygon drawn on the map and the four
cardinal edit handles. Nothing here renders; callers own the map sources.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from geocircle.geodesy import Coordinate, GeodesyPort, feature_collection, point
from geocircle.options import CircleOptions
from geocircle.precision import polygon_steps

# North, east, south, west
HANDLE_BEARINGS = (0, 90, 180, -90)


@dataclass(frozen=True)
class CircleShape:
    """Derived geometry for one center/radius."""
    center: Coordinate
    radius: float
    steps: int
    polygon: Dict[str, Any]
    handle_points: List[Coordinate] = field(default_factory=list)


class CircleGeometry:
    """Derives polygon and handle points through a GeodesyPort."""

    def __init__(self, geodesy: GeodesyPort):
        self.geodesy = geodesy

    def recompute(self, center: Coordinate, radius: float, zoom: Optional[float],
                  options: CircleOptions, previous: Optional[CircleShape] = None) -> CircleShape:
        """
        Derive polygon and handles for a center/radius.

        Args:
            center: Circle center (lng, lat)
            radius: Radius in meters
            zoom: Last known map zoom
            options: Circle options (precision, properties, editable)
            previous: When given, its polygon is reused instead of recomputed

        Returns:
            CircleShape with the polygon and, for editable circles, the
            handle points at bearings 0, 90, 180, -90
        """
        steps = polygon_steps(radius, zoom, options.refine_stroke)
        if previous is not None:
            polygon = previous.polygon
        else:
            polygon = self.geodesy.circle(center, radius, steps, options.properties)

        handles: List[Coordinate] = []
        if options.editable:
            handles = [self.geodesy.destination(center, radius, b) for b in HANDLE_BEARINGS]

        return CircleShape(center=center, radius=radius, steps=steps,
                           polygon=polygon, handle_points=handles)


def circle_collection(shape: CircleShape) -> Dict[str, Any]:
    return feature_collection([shape.polygon])


def center_handle_collection(shape: CircleShape, point_only: bool = False) -> Dict[str, Any]:
    """Center handle point, plus the polygon unless only the point is wanted."""
    features = [point(shape.center)]
    if not point_only:
        features.append(shape.polygon)
    return feature_collection(features)


def radius_handles_collection(shape: CircleShape) -> Dict[str, Any]:
    return feature_collection([point(p) for p in shape.handle_points] + [shape.polygon])
