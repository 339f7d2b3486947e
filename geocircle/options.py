"""
Circle options: styling and behavioral flags.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional

# camelCase keys accepted for compatibility with map-plugin style option objects
_ALIASES = {
    'minRadius': 'min_radius',
    'maxRadius': 'max_radius',
    'strokeColor': 'stroke_color',
    'strokeWeight': 'stroke_weight',
    'strokeOpacity': 'stroke_opacity',
    'fillColor': 'fill_color',
    'fillOpacity': 'fill_opacity',
    'refineStroke': 'refine_stroke',
    'debugEl': 'debug_el',
}


@dataclass(frozen=True)
class CircleOptions:
    """
    Options for an EditableCircle.

    Attributes:
        editable: Enable handles for changing center and radius
        min_radius: Minimum radius in meters
        max_radius: Maximum radius in meters
        stroke_color: Stroke color
        stroke_weight: Stroke weight
        stroke_opacity: Stroke opacity
        fill_color: Fill color, also used to highlight active handles
        fill_opacity: Fill opacity
        refine_stroke: Adjust polygon precision to radius and zoom
        properties: GeoJSON properties carried by the circle polygon
        debug_el: Optional object with set_text(str) receiving debug output
    """
    editable: bool = False
    min_radius: float = 10
    max_radius: float = 1.1e6
    stroke_color: str = '#000000'
    stroke_weight: float = 0.5
    stroke_opacity: float = 0.75
    fill_color: str = '#FB6A4A'
    fill_opacity: float = 0.25
    refine_stroke: bool = False
    properties: Dict[str, Any] = field(default_factory=dict)
    debug_el: Optional[Any] = None

    def __post_init__(self):
        if self.min_radius > self.max_radius:
            raise ValueError(
                f"min_radius ({self.min_radius}) must not exceed max_radius ({self.max_radius})"
            )

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]] = None, **kwargs) -> 'CircleOptions':
        """Build options from a mapping and/or keyword args, accepting camelCase keys."""
        return cls(**normalize_keys({**(options or {}), **kwargs}))

    def merged(self, changes: Mapping[str, Any]) -> 'CircleOptions':
        """Return a copy with the given changes applied."""
        return replace(self, **normalize_keys(changes))


def normalize_keys(options: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate aliases and reject unknown option names."""
    known = {f.name for f in fields(CircleOptions)}
    normalized = {}
    for key, value in options.items():
        name = _ALIASES.get(key, key)
        if name not in known:
            raise TypeError(f"Unknown circle option: {key}")
        normalized[name] = value
    return normalized
