"""
geocircle - editable, geodesically correct circles for web maps.

Renders a spherical cap on a host map and lets users drag its center and
resize its radius through on-canvas handles. Several editable circles can
share one map; a broadcast coordinator keeps their handles from fighting
over pointer events.

Usage:
    from geocircle import EditableCircle, BroadcastCoordinator
"""

__version__ = '1.6.7'

from geocircle.broadcast import BroadcastCoordinator, get_default_coordinator
from geocircle.circle import EditableCircle
from geocircle.config import Settings, configure_logging, get_settings
from geocircle.errors import CircleStateError, GeoCircleError
from geocircle.geodesy import GeodesyPort, SphericalGeodesy
from geocircle.host.protocol import HostMap, MapMouseEvent
from geocircle.host.quirks import BrowserQuirks, HostQuirks, NullQuirks
from geocircle.model import Bounds, DragState, HandleKind, LatLng
from geocircle.options import CircleOptions
from geocircle.precision import polygon_steps

__all__ = [
    'EditableCircle',
    'CircleOptions',
    'BroadcastCoordinator',
    'get_default_coordinator',
    'GeodesyPort',
    'SphericalGeodesy',
    'HostMap',
    'MapMouseEvent',
    'HostQuirks',
    'NullQuirks',
    'BrowserQuirks',
    'LatLng',
    'Bounds',
    'DragState',
    'HandleKind',
    'Settings',
    'get_settings',
    'configure_logging',
    'GeoCircleError',
    'CircleStateError',
    'polygon_steps',
]
