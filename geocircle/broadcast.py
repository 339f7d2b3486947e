"""
Broadcast coordination between editable circles.

Several editable circles may overlap on one map. While one circle's handle
is dragged, every other circle must stop reacting to pointer events, or the
drag gets hijacked by a sibling's handles. The coordinator keeps a registry
of attached editable circles and a publish/subscribe bus carrying
suspend/resume notifications.

This is a logical mutual-exclusion protocol, not a lock: listeners are
simply unbound on suspend and rebound on resume, synchronously.
"""

import itertools
import logging
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

from geocircle.events import EventEmitter, Listener
from geocircle.model import HandleKind

if TYPE_CHECKING:
    from geocircle.circle import EditableCircle

logger = logging.getLogger(__name__)

SUSPEND_CENTER_HANDLE = 'suspend_center_handle_listeners'
RESUME_CENTER_HANDLE = 'resume_center_handle_listeners'
SUSPEND_RADIUS_HANDLES = 'suspend_radius_handles_listeners'
RESUME_RADIUS_HANDLES = 'resume_radius_handles_listeners'
SUSPEND_CIRCLE_FILL = 'suspend_circle_fill_listeners'
RESUME_CIRCLE_FILL = 'resume_circle_fill_listeners'

SUSPEND_EVENTS = (SUSPEND_CENTER_HANDLE, SUSPEND_RADIUS_HANDLES, SUSPEND_CIRCLE_FILL)
RESUME_EVENTS = (RESUME_CENTER_HANDLE, RESUME_RADIUS_HANDLES, RESUME_CIRCLE_FILL)

# Shared by every coordinator: ids stay unique for the whole process
_instance_ids: Iterator[int] = itertools.count()


def next_instance_id() -> int:
    """Allocate a process-unique circle instance id. Ids are never reused."""
    return next(_instance_ids)


class BroadcastCoordinator:
    """Registry of attached editable circles plus the suspend/resume bus."""

    def __init__(self):
        self._circles: List['EditableCircle'] = []
        self._bus = EventEmitter(max_listeners=0)

    @property
    def circles(self) -> Tuple['EditableCircle', ...]:
        return tuple(self._circles)

    def __len__(self) -> int:
        return len(self._circles)

    def __contains__(self, circle: 'EditableCircle') -> bool:
        return circle in self._circles

    def register(self, circle: 'EditableCircle') -> None:
        """Add an editable circle to the registry; registering twice is a no-op."""
        if circle in self._circles:
            return
        self._circles.append(circle)
        self._bus.set_max_listeners(len(self._circles))
        logger.debug(f"Registered circle {circle.instance_id} ({len(self._circles)} active)")

    def unregister(self, circle: 'EditableCircle') -> None:
        if circle not in self._circles:
            return
        self._circles.remove(circle)
        self._bus.set_max_listeners(len(self._circles))
        logger.debug(f"Unregistered circle {circle.instance_id} ({len(self._circles)} active)")

    @property
    def max_listeners(self) -> int:
        return self._bus.max_listeners

    def subscribe(self, event: str, listener: Listener) -> None:
        self._bus.on(event, listener)

    def unsubscribe(self, event: str, listener: Listener) -> None:
        self._bus.off(event, listener)

    def listener_count(self, event: str) -> int:
        return self._bus.listener_count(event)

    def suspend(self, instance_id: int, kind: HandleKind) -> None:
        """Tell registered circles to stop listening while instance_id drags a kind handle."""
        logger.debug(f"Suspend broadcast from circle {instance_id} ({kind.value} drag)")
        for event in SUSPEND_EVENTS:
            self._bus.emit(event, instance_id, kind)

    def resume(self, instance_id: int, kind: HandleKind) -> None:
        """Tell registered circles to start listening again after a drag."""
        logger.debug(f"Resume broadcast from circle {instance_id} ({kind.value} drag)")
        for event in RESUME_EVENTS:
            self._bus.emit(event, instance_id, kind)

    def handle_layer_ids(self) -> List[str]:
        """Center/radius handle layer ids of every registered circle."""
        layer_ids: List[str] = []
        for circle in self._circles:
            layer_ids.extend(circle.handle_layer_ids())
        return layer_ids


_default_coordinator: Optional[BroadcastCoordinator] = None


def get_default_coordinator() -> BroadcastCoordinator:
    """Coordinator used by circles that were not given one explicitly."""
    global _default_coordinator
    if _default_coordinator is None:
        _default_coordinator = BroadcastCoordinator()
    return _default_coordinator
