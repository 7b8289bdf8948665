"""Input handling primitives: events, viewport, geometry and styles.

The controller lives in visio.interaction.controller.
"""

from visio.interaction.events import Button, Gesture, KeyEvent, PointerEvent, WheelEvent
from visio.interaction.viewport import MAX_SCALE, MIN_SCALE, Viewport

__all__ = [
    "Button",
    "Gesture",
    "KeyEvent",
    "PointerEvent",
    "WheelEvent",
    "MAX_SCALE",
    "MIN_SCALE",
    "Viewport",
]
