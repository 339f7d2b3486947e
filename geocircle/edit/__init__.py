"""
Handle editing for geocircle.

- HandleDragController: drag state machine shared by both handle kinds
- CenterHandleController / RadiusHandleController: per-handle behavior
- FrameThrottle: per-frame coalescing of pointer moves
"""

from geocircle.edit.controller import CenterHandleController, HandleDragController, RadiusHandleController
from geocircle.edit.throttle import FrameThrottle

__all__ = [
    'HandleDragController',
    'CenterHandleController',
    'RadiusHandleController',
    'FrameThrottle',
]
