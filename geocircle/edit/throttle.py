"""
Per-frame coalescing of pointer-move events.
"""

from typing import Any, Callable, Optional


class FrameThrottle:
    """
    Wraps a handler so it runs at most once per animation frame.

    The first event in a frame schedules a frame callback; later events in
    the same frame only replace the pending event. When the frame fires, the
    handler receives the most recent event and earlier ones are dropped.
    """

    def __init__(self, request_frame: Callable[[Callable[[], Any]], Any],
                 handler: Callable[[Any], Any]):
        self._request_frame = request_frame
        self._handler = handler
        self._pending: Optional[Any] = None
        self._scheduled = False
        self._cancelled = False

    @property
    def scheduled(self) -> bool:
        return self._scheduled

    def __call__(self, event: Any) -> None:
        if self._cancelled:
            return
        self._pending = event
        if not self._scheduled:
            self._scheduled = True
            self._request_frame(self._flush)

    def _flush(self) -> None:
        event, self._pending = self._pending, None
        self._scheduled = False
        if self._cancelled or event is None:
            return
        self._handler(event)

    def cancel(self) -> None:
        """Drop any pending event; later calls are ignored."""
        self._cancelled = True
        self._pending = None
