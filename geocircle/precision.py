"""
Polygon precision policy.

Decides how many vertices the circle polygon gets. Coarse circles are cheap;
refined circles grow smoother with radius and zoom.
"""

import math
from typing import Optional

MIN_STEPS = 64
MIN_ZOOM = 0.1


def effective_zoom(zoom: Optional[float]) -> float:
    """Zoom level used for step calculations, never below MIN_ZOOM."""
    if zoom is None or zoom <= MIN_ZOOM:
        return MIN_ZOOM
    return zoom


def polygon_steps(radius: float, zoom: Optional[float], refine: bool) -> int:
    """
    Number of polygon vertices for a circle.

    Args:
        radius: Circle radius in meters
        zoom: Last known map zoom, or None before the circle is attached
        refine: Whether precision should follow radius and zoom

    Returns:
        Step count, at least MIN_STEPS. Monotonically non-decreasing in both
        radius and zoom when refine is set.
    """
    if not refine:
        return MIN_STEPS
    scaled = math.sqrt(math.trunc(max(radius, 0) * 0.25)) * effective_zoom(zoom)
    return max(int(scaled), MIN_STEPS)
