"""Box and line geometry used for drawing and hit-testing connections.

All coordinates are world (scene) coordinates.
"""

import math
from dataclasses import dataclass

from visio.models.diagram import Connection, Node


BOX_WIDTH = 200.0
BOX_HEIGHT = 60.0
BOX_RADIUS = 8.0

ARROW_LENGTH = 12.0
ARROW_ANGLE = math.pi / 6  # 30 degrees either side of the reversed line

HIT_THRESHOLD = 15.0

Point = tuple[float, float]
Segment = tuple[Point, Point]


@dataclass(frozen=True)
class ConnectionGeometry:
    """where a connection is drawn: main line plus two arrowhead strokes."""

    connection_id: str
    start: Point
    end: Point
    arrow: tuple[Segment, Segment]


def node_contains(node: Node, point: Point) -> bool:
    px, py = point
    return node.x <= px <= node.x + BOX_WIDTH and node.y <= py <= node.y + BOX_HEIGHT


def connection_anchors(from_node: Node, to_node: Node) -> tuple[Point, Point]:
    """Line endpoints: right-edge midpoint of the source, left-edge midpoint of the target."""
    start = (from_node.x + BOX_WIDTH, from_node.y + BOX_HEIGHT / 2)
    end = (to_node.x, to_node.y + BOX_HEIGHT / 2)
    return start, end


def arrowhead(start: Point, end: Point, length: float = ARROW_LENGTH) -> tuple[Segment, Segment]:
    """Two short strokes from the tip, angled back along the line."""
    angle = math.atan2(end[1] - start[1], end[0] - start[0])
    tip_x, tip_y = end
    left = (
        tip_x - length * math.cos(angle - ARROW_ANGLE),
        tip_y - length * math.sin(angle - ARROW_ANGLE),
    )
    right = (
        tip_x - length * math.cos(angle + ARROW_ANGLE),
        tip_y - length * math.sin(angle + ARROW_ANGLE),
    )
    return (end, left), (end, right)


def distance_to_segment(point: Point, a: Point, b: Point) -> float:
    """Shortest distance from point to the segment a-b.

    The projection is clamped to the segment, so points beyond either end
    measure to that endpoint. A zero-length segment measures to a.
    """
    px, py = point
    ax, ay = a
    dx = b[0] - ax
    dy = b[1] - ay
    length_sq = dx * dx + dy * dy
    t = -1.0
    if length_sq != 0:
        t = ((px - ax) * dx + (py - ay) * dy) / length_sq
    if t < 0:
        cx, cy = ax, ay
    elif t > 1:
        cx, cy = b
    else:
        cx, cy = ax + t * dx, ay + t * dy
    return math.hypot(px - cx, py - cy)


def build_connection_geometry(connection: Connection, from_node: Node, to_node: Node) -> ConnectionGeometry:
    start, end = connection_anchors(from_node, to_node)
    return ConnectionGeometry(
        connection_id=connection.id,
        start=start,
        end=end,
        arrow=arrowhead(start, end),
    )


def hit_test_connections(
    point: Point,
    geometries: list[ConnectionGeometry],
    threshold: float = HIT_THRESHOLD,
) -> str | None:
    """Return the id of the closest line strictly within threshold.

    Ties go to the first geometry in iteration order.
    """
    closest: str | None = None
    best = math.inf
    for geometry in geometries:
        distance = distance_to_segment(point, geometry.start, geometry.end)
        if distance < threshold and distance < best:
            best = distance
            closest = geometry.connection_id
    return closest
