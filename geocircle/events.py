"""
Synchronous observer/listener abstraction.

Used twice, as two independent channels: each circle's public events
(click, contextmenu, centerchanged, radiuschanged, rendered) and the
coordinator's internal suspend/resume bus.
"""

import logging
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventEmitter:
    """
    Minimal synchronous event emitter.

    Listeners run in registration order. A listener that raises is logged
    and the remaining listeners still run.
    """

    def __init__(self, max_listeners: int = 10):
        # event -> [(listener, once)]
        self._listeners: Dict[str, List[Tuple[Listener, bool]]] = {}
        self._max_listeners = max_listeners

    @property
    def max_listeners(self) -> int:
        return self._max_listeners

    def set_max_listeners(self, count: int) -> None:
        """Set the per-event listener count above which a warning is logged (0 = unlimited)."""
        self._max_listeners = max(0, count)

    def on(self, event: str, listener: Listener, once: bool = False) -> None:
        entries = self._listeners.setdefault(event, [])
        entries.append((listener, once))
        if self._max_listeners and len(entries) > self._max_listeners:
            logger.warning(
                f"Possible listener leak: {len(entries)} listeners for '{event}' "
                f"(max {self._max_listeners})"
            )

    def once(self, event: str, listener: Listener) -> None:
        self.on(event, listener, once=True)

    def off(self, event: str, listener: Listener) -> None:
        """Remove the most recently added registration of listener for event."""
        entries = self._listeners.get(event, [])
        for i in range(len(entries) - 1, -1, -1):
            if entries[i][0] == listener:
                del entries[i]
                break
        if not entries:
            self._listeners.pop(event, None)

    def listeners(self, event: str) -> List[Listener]:
        return [listener for listener, _ in self._listeners.get(event, [])]

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        """
        Call every listener for event with args.

        Returns:
            True if the event had listeners
        """
        entries = list(self._listeners.get(event, []))
        if not entries:
            return False

        for entry in entries:
            if entry[1]:
                remaining = self._listeners.get(event, [])
                if entry in remaining:
                    remaining.remove(entry)
                if not remaining:
                    self._listeners.pop(event, None)

        for listener, _ in entries:
            try:
                listener(*args)
            except Exception as e:
                logger.error(f"Error in listener for {event}: {e}", exc_info=True)
        return True
