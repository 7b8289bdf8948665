"""Visual constants for node borders, connection highlight and cursors."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BorderStyle:
    color: str
    width: int


DEFAULT_BORDER = BorderStyle("#333333", 2)
SELECTED_BORDER = BorderStyle("#1abc9c", 3)
CONNECTION_SOURCE_BORDER = BorderStyle("#f39c12", 4)

SELECTED_CONNECTION_COLOR = "#ff6b35"
SELECTED_CONNECTION_EXTRA_WIDTH = 4

NODE_TEXT_COLOR = "#111111"

CURSOR_GRAB = "grab"
CURSOR_GRABBING = "grabbing"
CURSOR_CONNECT_SOURCE = "crosshair"
CURSOR_CONNECT_TARGET = "pointer"


def border_for(is_selected: bool, is_connection_source: bool) -> BorderStyle:
    """Selection wins over the connection-source marker."""
    if is_selected:
        return SELECTED_BORDER
    if is_connection_source:
        return CONNECTION_SOURCE_BORDER
    return DEFAULT_BORDER
