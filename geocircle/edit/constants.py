"""
Shared constants for handle interaction.
"""

# Cursor shown while hovering or dragging the center handle
CENTER_CURSOR = 'move'

# Cursors for radius handles: north/south vs east/west handles
RESIZE_NS_CURSOR = 'ns-resize'
RESIZE_EW_CURSOR = 'ew-resize'
RADIUS_CURSORS = frozenset({RESIZE_NS_CURSOR, RESIZE_EW_CURSOR})

# Cursor over a clickable circle fill
POINTER_CURSOR = 'pointer'

# Handle fill color when not highlighted
HANDLE_RESET_COLOR = '#ffffff'

# Paint property recolored on highlight
HANDLE_COLOR_PROPERTY = 'circle-color'
