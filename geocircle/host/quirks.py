"""
Host quirks strategies.

Some behaviors are properties of the rendering host rather than of the
circle: spurious pointer-out events when crossing marker elements, an extra
click raised by ctrl-click context menus on Safari, and detecting that the
map container was removed from the page. Circles query a HostQuirks object
instead of hard-coding these checks.
"""

from typing import Callable, Optional, Protocol, runtime_checkable

from geocircle.host.protocol import HostMap, MapMouseEvent

Unsubscribe = Callable[[], None]


def _noop() -> None:
    return None


@runtime_checkable
class HostQuirks(Protocol):

    def is_marker_crossing(self, event: MapMouseEvent) -> bool:
        """True if a mouseout only crossed between the canvas and a marker overlay."""
        ...

    def is_context_click(self, event: MapMouseEvent) -> bool:
        """True if a contextmenu gesture will be followed by a spurious click."""
        ...

    def watch_container_removal(self, host: HostMap, callback: Callable[[], None]) -> Unsubscribe:
        """Invoke callback when the host's container goes away; returns an unsubscribe function."""
        ...


class NullQuirks:
    """Host without quirks."""

    def is_marker_crossing(self, event: MapMouseEvent) -> bool:
        return False

    def is_context_click(self, event: MapMouseEvent) -> bool:
        return False

    def watch_container_removal(self, host: HostMap, callback: Callable[[], None]) -> Unsubscribe:
        return _noop


class BrowserQuirks(NullQuirks):
    """
    Quirks of browser-hosted web maps.

    Args:
        user_agent: Browser user agent string, if known
        marker_class: CSS class of marker overlay elements
        canvas_class: CSS class of the map canvas
    """

    def __init__(self, user_agent: Optional[str] = None,
                 marker_class: str = 'mapboxgl-marker',
                 canvas_class: str = 'mapboxgl-canvas'):
        self.user_agent = user_agent or ''
        self.marker_class = marker_class
        self.canvas_class = canvas_class

    @property
    def is_safari(self) -> bool:
        return 'Chrome' not in self.user_agent and 'Safari' in self.user_agent

    def is_marker_crossing(self, event: MapMouseEvent) -> bool:
        if event.type != 'mouseout':
            return False
        from_canvas = self.canvas_class in event.from_classes
        to_marker = self.marker_class in event.to_classes
        from_marker = self.marker_class in event.from_classes
        to_canvas = self.canvas_class in event.to_classes
        return (from_canvas and to_marker) or (from_marker and to_canvas)

    def is_context_click(self, event: MapMouseEvent) -> bool:
        return event.ctrl_key and self.is_safari

    def watch_container_removal(self, host: HostMap, callback: Callable[[], None]) -> Unsubscribe:
        """Detach on the host's 'remove' event, raised when the map and its container are torn down."""
        def on_remove(*args):
            callback()

        host.on('remove', on_remove)
        return lambda: host.off('remove', on_remove)
