"""
Host map abstraction for geocircle.

- HostMap: protocol every map engine adapter implements
- HostQuirks: pluggable host-specific behavior
- LeafletHost: adapter for NiceGUI's leaflet element (geocircle.host.leaflet)
"""

from geocircle.host.protocol import GeoJSONSource, HostMap, MapMouseEvent
from geocircle.host.quirks import BrowserQuirks, HostQuirks, NullQuirks

__all__ = [
    'HostMap',
    'GeoJSONSource',
    'MapMouseEvent',
    'HostQuirks',
    'NullQuirks',
    'BrowserQuirks',
]
