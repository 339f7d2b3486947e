"""
Handle Drag Controller - pointer interaction for one kind of edit handle.

Each editable circle owns two controllers: one for the center handle and one
for the four radius handles. A controller is either idle or dragging; the
drag itself is recorded in the circle's CircleModel so that at most one
handle kind per circle can be dragging at a time.

Idle -> Dragging on mousedown over the handle layer, if the cursor shows the
affordance set on mouseenter. Dragging -> Idle on mouseup, or when the
pointer leaves the map canvas. Both exits share one release path, which
commits the edit value and emits a change event when the value moved.
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, FrozenSet, Optional

from geocircle.edit.constants import (
    CENTER_CURSOR,
    HANDLE_COLOR_PROPERTY,
    HANDLE_RESET_COLOR,
    RADIUS_CURSORS,
    RESIZE_EW_CURSOR,
    RESIZE_NS_CURSOR,
)
from geocircle.edit.throttle import FrameThrottle
from geocircle.host.protocol import HostMap, MapMouseEvent
from geocircle.layers import drag_stroke_layer, screen_stroke_layer
from geocircle.model import Coordinate, HandleKind

if TYPE_CHECKING:
    from geocircle.circle import EditableCircle

logger = logging.getLogger(__name__)


class HandleDragController(ABC):
    """Drag state machine shared by center and radius handles."""

    kind: HandleKind

    def __init__(self, circle: 'EditableCircle'):
        self.circle = circle
        self._bound = False
        self._throttle: Optional[FrameThrottle] = None
        self._handlers = {
            'mouseenter': self.on_mouse_enter,
            'mousedown': self.on_mouse_down,
            'mouseleave': self.on_mouse_leave,
        }

    # --- Circle-specific parts ---

    @property
    @abstractmethod
    def layer_id(self) -> str:
        ...

    @property
    @abstractmethod
    def stroke_layer_id(self) -> str:
        ...

    @property
    @abstractmethod
    def expected_cursors(self) -> FrozenSet[str]:
        ...

    @abstractmethod
    def cursor_for(self, event: MapMouseEvent) -> str:
        ...

    @abstractmethod
    def build_stroke_layer(self) -> dict:
        ...

    @abstractmethod
    def apply_move(self, event: MapMouseEvent) -> None:
        ...

    # --- State ---

    @property
    def map(self) -> HostMap:
        return self.circle.map

    @property
    def dragging(self) -> bool:
        model = self.circle.model
        if self.kind is HandleKind.CENTER:
            return model.editing_center
        return model.editing_radius

    @property
    def bound(self) -> bool:
        return self._bound

    # --- Listener binding ---

    def bind(self) -> None:
        """Add the static listeners for the handle layer; binding twice is a no-op."""
        if self._bound or self.map is None:
            return
        for event, handler in self._handlers.items():
            self.map.on(event, handler, self.layer_id)
        self._bound = True

    def unbind(self) -> None:
        if not self._bound or self.map is None:
            return
        for event, handler in self._handlers.items():
            self.map.off(event, handler, self.layer_id)
        self._bound = False

    def on_suspend(self, instance_id: int, kind: HandleKind) -> None:
        """Stop listening, unless this is the handle the requesting circle is dragging."""
        if instance_id != self.circle.instance_id or kind is not self.kind:
            self.unbind()

    def on_resume(self, instance_id: int, kind: HandleKind) -> None:
        if instance_id != self.circle.instance_id or kind is not self.kind:
            self.bind()

    # --- Hover feedback ---

    def highlight(self, cursor: str) -> None:
        """Disable panning, set the cursor and recolor the handle."""
        self.map.disable_drag_pan()
        self.map.set_paint_property(self.layer_id, HANDLE_COLOR_PROPERTY, self.circle.options.fill_color)
        self.map.set_cursor(cursor)

    def reset(self) -> None:
        """Re-enable panning, reset the cursor and restore the handle color."""
        if self.map is None:
            return
        self.map.enable_drag_pan()
        if self.map.get_layer(self.layer_id) is not None:
            self.map.set_paint_property(self.layer_id, HANDLE_COLOR_PROPERTY, HANDLE_RESET_COLOR)
        self.map.set_cursor('')

    def on_mouse_enter(self, event: MapMouseEvent) -> None:
        self.highlight(self.cursor_for(event))

    def on_mouse_leave(self, event: MapMouseEvent) -> None:
        if self.dragging:
            # Wait a bit in case the drag just stopped
            self.map.call_later(self.circle.settings.hover_reset_delay_s, self._reset_if_idle)
        else:
            self.reset()

    def _reset_if_idle(self) -> None:
        if not self.dragging:
            self.reset()

    # --- Drag ---

    def on_mouse_down(self, event: MapMouseEvent) -> None:
        if self.circle.model.is_dragging:
            return
        if self.map.get_cursor() not in self.expected_cursors:
            logger.debug(f"Ignoring {self.kind.value} mousedown on circle "
                         f"{self.circle.instance_id}: cursor is '{self.map.get_cursor()}'")
            return
        self.begin(event)

    def begin(self, event: MapMouseEvent) -> None:
        circle = self.circle
        circle.model.begin_edit(self.kind)
        logger.debug(f"Circle {circle.instance_id}: {self.kind.value} drag started")

        self._throttle = FrameThrottle(self.map.request_frame, self.on_mouse_move)
        self.map.on('mousemove', self._throttle)
        self.map.add_layer(self.build_stroke_layer(), self.layer_id)
        circle.coordinator.suspend(circle.instance_id, self.kind)
        self.map.once('mouseup', self.on_release)
        # Deactivate drag if the pointer leaves the canvas
        self.map.once('mouseout', self.on_release)
        self.highlight(self.cursor_for(event))

    def on_mouse_move(self, event: MapMouseEvent) -> None:
        if not self.dragging or self.map is None:
            return
        self.apply_move(event)
        self.circle.refresh()

    def on_release(self, event: MapMouseEvent) -> None:
        """Finish the drag on mouseup or on the pointer leaving the canvas."""
        if not self.dragging:
            return
        if event.type == 'mouseout' and self.circle.quirks.is_marker_crossing(event):
            # Pointer only moved onto/off a marker overlay; keep dragging
            self.map.once('mouseout', self.on_release)
            return

        self._stop_listening(event.type)
        changed = self.circle.model.commit()
        self._finish()
        logger.debug(f"Circle {self.circle.instance_id}: {self.kind.value} drag ended "
                     f"({'changed' if changed else 'unchanged'})")
        if changed:
            self.circle.notify_changed(self.kind)

    def cancel(self) -> None:
        """Abort an active drag, discarding the edit value."""
        if not self.dragging:
            return
        self._stop_listening(None)
        self.circle.model.abort_edit()
        self._finish()
        logger.debug(f"Circle {self.circle.instance_id}: {self.kind.value} drag aborted")

    def _stop_listening(self, ended_by: Optional[str]) -> None:
        if self._throttle is not None:
            self.map.off('mousemove', self._throttle)
            self._throttle.cancel()
            self._throttle = None
        if ended_by != 'mouseup':
            self.map.off('mouseup', self.on_release)
        if ended_by != 'mouseout':
            self.map.off('mouseout', self.on_release)

    def _finish(self) -> None:
        circle = self.circle
        circle.coordinator.resume(circle.instance_id, self.kind)
        if self.map.get_layer(self.stroke_layer_id) is not None:
            self.map.remove_layer(self.stroke_layer_id)
        self.reset()
        circle.refresh()


class CenterHandleController(HandleDragController):
    kind = HandleKind.CENTER

    @property
    def layer_id(self) -> str:
        return self.circle.ids.center_handle

    @property
    def stroke_layer_id(self) -> str:
        return self.circle.ids.center_handle_stroke

    @property
    def expected_cursors(self) -> FrozenSet[str]:
        return frozenset({CENTER_CURSOR})

    def cursor_for(self, event: MapMouseEvent) -> str:
        return CENTER_CURSOR

    def build_stroke_layer(self) -> dict:
        circle = self.circle
        ids = circle.ids
        if circle.small_radius_drag:
            return screen_stroke_layer(ids.center_handle_stroke, ids.center_handle_source,
                                       circle.options, self._pixels_per_meter() * circle.model.active_radius())
        return drag_stroke_layer(ids.center_handle_stroke, ids.center_handle_source, circle.options)

    def _pixels_per_meter(self) -> float:
        """Horizontal pixels per meter across the middle of the map container."""
        width, height = self.map.container_size()
        y = height / 2
        meters = self.circle.geodesy.distance(self.map.unproject((0, y)), self.map.unproject((width, y)))
        if meters <= 0:
            return 0.0
        return width / meters

    def apply_move(self, event: MapMouseEvent) -> None:
        circle = self.circle
        position = circle.geodesy.truncate(self.map.unproject(event.point),
                                           circle.settings.coordinate_precision)
        circle.model.update_edit_center((position[0], position[1]))


class RadiusHandleController(HandleDragController):
    kind = HandleKind.RADIUS

    @property
    def layer_id(self) -> str:
        return self.circle.ids.radius_handles

    @property
    def stroke_layer_id(self) -> str:
        return self.circle.ids.radius_handles_stroke

    @property
    def expected_cursors(self) -> FrozenSet[str]:
        return RADIUS_CURSORS

    def cursor_for(self, event: MapMouseEvent) -> str:
        """
        Vertical or horizontal resize arrow depending on which handle the pointer is at.

        The final bearing from the pointer to the center tells which side of
        the circle the pointer is on.
        """
        pointer = self._pointer_position(event)
        bearing = self.circle.geodesy.bearing(pointer, self.circle.model.committed_center, final=True)
        if bearing > 315 or bearing <= 45:
            return RESIZE_NS_CURSOR  # south handle
        if bearing <= 135:
            return RESIZE_EW_CURSOR  # west handle
        if bearing <= 225:
            return RESIZE_NS_CURSOR  # north handle
        return RESIZE_EW_CURSOR  # east handle

    def build_stroke_layer(self) -> dict:
        ids = self.circle.ids
        return drag_stroke_layer(ids.radius_handles_stroke, ids.radius_handles_source, self.circle.options)

    def _pointer_position(self, event: MapMouseEvent) -> Coordinate:
        if event.lng_lat is not None:
            return event.lng_lat
        return self.map.unproject(event.point)

    def apply_move(self, event: MapMouseEvent) -> None:
        model = self.circle.model
        pointer = self.map.unproject(event.point)
        model.update_edit_radius(self.circle.geodesy.distance(model.active_center(), pointer))

