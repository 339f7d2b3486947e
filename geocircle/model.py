"""
Editable circle state.

CircleModel is the single source of truth for a circle's center and radius.
It keeps three versions of each value:

- committed: what callers observe through getters
- edit: the provisional value while a drag is in progress
- last committed: snapshot taken when a change event fired, used to
  suppress duplicate no-op events

The drag state is a small tagged enum instead of boolean flags, so at most
one of center/radius can be under edit at any time.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

Coordinate = Tuple[float, float]  # (lng, lat)


class HandleKind(str, Enum):
    CENTER = 'center'
    RADIUS = 'radius'


class DragState(Enum):
    IDLE = 'idle'
    EDITING_CENTER = 'editing_center'
    EDITING_RADIUS = 'editing_radius'


_EDIT_STATES = {
    HandleKind.CENTER: DragState.EDITING_CENTER,
    HandleKind.RADIUS: DragState.EDITING_RADIUS,
}


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float

    def to_coordinate(self) -> Coordinate:
        return (self.lng, self.lat)


@dataclass(frozen=True)
class Bounds:
    """Southwestern/northeastern corners of an axis-aligned bounding box."""
    sw: LatLng
    ne: LatLng


CenterInput = Union[LatLng, Mapping[str, Any], Sequence[float]]


def parse_center(center: CenterInput) -> Coordinate:
    """
    Normalize a center argument to a (lng, lat) pair.

    Accepts a LatLng, a mapping with 'lat'/'lng' keys, or a [lng, lat]
    sequence (GeoJSON order).
    """
    if isinstance(center, LatLng):
        return center.to_coordinate()
    if isinstance(center, Mapping):
        try:
            return (float(center['lng']), float(center['lat']))
        except KeyError as e:
            raise ValueError(f"Center mapping is missing key {e}") from e
    if isinstance(center, (list, tuple)) and len(center) >= 2:
        return (float(center[0]), float(center[1]))
    raise TypeError(f"Unsupported center value: {center!r}")


def round_meters(value: float) -> int:
    """Round half up to whole meters."""
    return int(math.floor(value + 0.5))


def clamp(value: float, lower: float, upper: float) -> float:
    return min(max(lower, value), upper)


class CircleModel:
    """Committed and edit values for one circle, plus drag state."""

    def __init__(self, center: Coordinate, radius: float, min_radius: float, max_radius: float):
        self.min_radius = min_radius
        self.max_radius = max_radius

        radius = self.clamp_radius(round_meters(radius))
        self.committed_center: Coordinate = center
        self.edit_center: Coordinate = center
        self.last_committed_center: Coordinate = center
        self.committed_radius: float = radius
        self.edit_radius: float = radius
        self.last_committed_radius: float = radius

        self.zoom: Optional[float] = None
        self._state = DragState.IDLE

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state is not DragState.IDLE

    @property
    def editing_center(self) -> bool:
        return self._state is DragState.EDITING_CENTER

    @property
    def editing_radius(self) -> bool:
        return self._state is DragState.EDITING_RADIUS

    def clamp_radius(self, radius: float) -> float:
        return clamp(radius, self.min_radius, self.max_radius)

    def set_limits(self, min_radius: float, max_radius: float) -> None:
        """Apply new radius limits and re-clamp current values."""
        self.min_radius = min_radius
        self.max_radius = max_radius
        self.committed_radius = self.clamp_radius(self.committed_radius)
        self.edit_radius = self.clamp_radius(self.edit_radius)

    def active_center(self) -> Coordinate:
        return self.edit_center if self.editing_center else self.committed_center

    def active_radius(self) -> float:
        return self.edit_radius if self.editing_radius else self.committed_radius

    def begin_edit(self, kind: HandleKind) -> None:
        """Enter a drag for the given handle kind; edit value starts at the committed one."""
        if self.is_dragging:
            raise RuntimeError(f"Cannot begin {kind.value} edit while {self._state.value}")
        self._state = _EDIT_STATES[kind]
        if kind is HandleKind.CENTER:
            self.edit_center = self.committed_center
        else:
            self.edit_radius = self.committed_radius

    def update_edit_center(self, center: Coordinate) -> None:
        if self.editing_center:
            self.edit_center = center

    def update_edit_radius(self, radius: float) -> None:
        if self.editing_radius:
            self.edit_radius = self.clamp_radius(round_meters(radius))

    def commit(self) -> bool:
        """
        Leave the drag state, moving the edit value into the committed value.

        Returns:
            True if the committed value now differs from the last committed
            snapshot, i.e. a change event is due.
        """
        state = self._state
        self._state = DragState.IDLE
        if state is DragState.EDITING_CENTER:
            self.committed_center = self.edit_center
            return self.center_changed()
        if state is DragState.EDITING_RADIUS:
            self.committed_radius = self.edit_radius
            return self.radius_changed()
        return False

    def abort_edit(self) -> None:
        """Leave the drag state, discarding the edit value."""
        self._state = DragState.IDLE
        self.edit_center = self.committed_center
        self.edit_radius = self.committed_radius

    def set_center(self, center: Coordinate) -> None:
        self.committed_center = center
        if not self.editing_center:
            self.edit_center = center

    def set_radius(self, radius: float) -> None:
        self.committed_radius = self.clamp_radius(round_meters(radius))
        if not self.editing_radius:
            self.edit_radius = self.committed_radius

    def center_changed(self) -> bool:
        return self.committed_center != self.last_committed_center

    def radius_changed(self) -> bool:
        return self.committed_radius != self.last_committed_radius

    def mark_center_committed(self) -> None:
        self.last_committed_center = self.committed_center

    def mark_radius_committed(self) -> None:
        self.last_committed_radius = self.committed_radius
