"""Input events fed to the interaction controller.

Pointer coordinates are screen coordinates; the controller maps them through
the viewport. Timestamps are seconds on any monotonic clock.
"""

import time
from dataclasses import dataclass, field
from enum import Enum


class Button(str, Enum):
    """Pointer buttons."""

    primary = "primary"
    middle = "middle"
    secondary = "secondary"


class Gesture(str, Enum):
    """What an input means to the state machine, after hit-testing."""

    node_press = "node_press"
    node_modifier_press = "node_modifier_press"  # ctrl/cmd + primary on a node
    canvas_press = "canvas_press"
    pan_press = "pan_press"  # middle button, or shift + primary
    move = "move"
    release = "release"
    toggle_connect = "toggle_connect"  # the connection-mode control
    cancel = "cancel"


CANCEL_KEYS = frozenset({"Escape"})
DELETE_KEYS = frozenset({"Delete", "Backspace"})


@dataclass(frozen=True)
class PointerEvent:
    x: float
    y: float
    button: Button = Button.primary
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    timestamp: float = field(default_factory=time.monotonic)

    @property
    def modifier(self) -> bool:
        """ctrl on most platforms, cmd (meta) on macOS."""
        return self.ctrl or self.meta


@dataclass(frozen=True)
class WheelEvent:
    x: float
    y: float
    delta_y: float


@dataclass(frozen=True)
class KeyEvent:
    key: str
