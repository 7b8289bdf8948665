"""Pan/zoom transform between screen and world coordinates."""

from dataclasses import dataclass


MIN_SCALE = 0.1
MAX_SCALE = 5.0

WHEEL_OUT_FACTOR = 0.9
WHEEL_IN_FACTOR = 1.1
BUTTON_IN_FACTOR = 1.2
BUTTON_OUT_FACTOR = 0.8


@dataclass
class Viewport:
    """screen = world * scale + offset (uniform scale)."""

    width: float = 800.0
    height: float = 600.0
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def to_world(self, sx: float, sy: float) -> tuple[float, float]:
        return ((sx - self.offset_x) / self.scale, (sy - self.offset_y) / self.scale)

    def to_screen(self, wx: float, wy: float) -> tuple[float, float]:
        return (wx * self.scale + self.offset_x, wy * self.scale + self.offset_y)

    def zoom_at(self, factor: float, sx: float, sy: float) -> float:
        """Rescale by factor, keeping the world point under (sx, sy) in place.

        Returns the new scale, clamped to [MIN_SCALE, MAX_SCALE].
        """
        wx, wy = self.to_world(sx, sy)
        self.scale = max(MIN_SCALE, min(MAX_SCALE, self.scale * factor))
        self.offset_x = sx - wx * self.scale
        self.offset_y = sy - wy * self.scale
        return self.scale

    def wheel(self, delta_y: float, sx: float, sy: float) -> float:
        """Scroll down zooms out, scroll up zooms in, anchored at the pointer."""
        factor = WHEEL_OUT_FACTOR if delta_y > 0 else WHEEL_IN_FACTOR
        return self.zoom_at(factor, sx, sy)

    def zoom_in(self) -> float:
        return self.zoom_at(BUTTON_IN_FACTOR, self.width / 2, self.height / 2)

    def zoom_out(self) -> float:
        return self.zoom_at(BUTTON_OUT_FACTOR, self.width / 2, self.height / 2)

    def reset(self) -> None:
        self.scale = 1.0
        self.offset_x = 0.0
        self.offset_y = 0.0

    def pan_to(self, offset_x: float, offset_y: float) -> None:
        self.offset_x = offset_x
        self.offset_y = offset_y

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def is_box_visible(self, x: float, y: float, box_width: float, box_height: float) -> bool:
        """True if a world-space box overlaps the screen."""
        sx, sy = self.to_screen(x, y)
        return (
            sx + box_width * self.scale > 0
            and sx < self.width
            and sy + box_height * self.scale > 0
            and sy < self.height
        )
