"""
Shared constants for the editing system.

These values are used by hit-testing (gestures, controller) and by the SVG
renderer. Keep them in sync!
"""

# Radius of a drawn node circle; also the hit radius for clicks and link drops
NODE_RADIUS = 25

# Labels longer than this are cut to LABEL_MAX_LENGTH - 1 characters plus '...'
LABEL_MAX_LENGTH = 8

# Screen pixels the pointer may travel before a press on a node becomes a drag
DRAG_THRESHOLD = 3

# Zoom extents and wheel sensitivity (scale *= 2 ** (-deltaY * factor))
MIN_ZOOM = 0.1
MAX_ZOOM = 4.0
WHEEL_ZOOM_FACTOR = 0.002

# Pointer buttons as reported by the browser
PRIMARY_BUTTON = 0
SECONDARY_BUTTON = 2

# Bit of MouseEvent.buttons for each MouseEvent.button value
BUTTON_MASKS = {0: 1, 1: 4, 2: 2}

# Arrowhead offset so the tip sits on the target circle's rim
ARROW_REF_X = 30
