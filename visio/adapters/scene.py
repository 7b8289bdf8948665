"""Scene adapter protocol and an in-memory implementation.

The controller pushes plain values (entities, geometry, styles) to the scene.
The scene owns whatever visual objects it creates and keys them by entity id;
entities never point back at visuals.
"""

from collections import deque
from dataclasses import dataclass
from typing import Iterable, Protocol

from visio.interaction.geometry import ConnectionGeometry
from visio.interaction.styles import BorderStyle
from visio.interaction.viewport import Viewport
from visio.models.diagram import Node


@dataclass(frozen=True)
class ConnectionVisual:
    """one connection ready to draw: geometry plus resolved stroke."""

    geometry: ConnectionGeometry
    color: str
    width: int
    style: str
    label: str
    selected: bool = False


@dataclass(frozen=True)
class EditForm:
    """label and colour of the selected node, as shown in the side panel."""

    node_id: str
    label: str
    color: str


class SceneAdapter(Protocol):
    """What the controller needs from a rendering surface."""

    def draw_node(self, node: Node, border: BorderStyle, cursor: str) -> None:
        """Create or update the visual for node.id."""
        ...

    def remove_node(self, node_id: str) -> None:
        """Drop the visual for a node that no longer exists."""
        ...

    def draw_connections(self, connections: list[ConnectionVisual]) -> None:
        """Replace the connection layer."""
        ...

    def set_transform(self, viewport: Viewport) -> None:
        """Apply the current pan/zoom."""
        ...

    def show_form(self, form: EditForm | None) -> None:
        """Show (or clear) the selected node's edit form."""
        ...

    def prompt_label(self, current: str) -> str | None:
        """Ask the user for a new label; None means cancelled."""
        ...

    def notify(self, message: str) -> None:
        """Show a short message to the user."""
        ...


@dataclass
class NodeVisual:
    """what RecordingScene last drew for one node."""

    node_id: str
    x: float
    y: float
    label: str
    fill_color: str
    border: BorderStyle
    cursor: str


class RecordingScene:
    """Headless scene that keeps the latest visual state in memory.

    Prompt answers are queued up front with reply_to_prompts(); an empty
    queue answers None (cancelled).
    """

    def __init__(self, prompt_replies: Iterable[str | None] = ()) -> None:
        self.nodes: dict[str, NodeVisual] = {}
        self.connections: list[ConnectionVisual] = []
        self.transform: tuple[float, float, float] = (1.0, 0.0, 0.0)
        self.form: EditForm | None = None
        self.prompts: list[str] = []
        self.notifications: list[str] = []
        self.frames = 0
        self._replies: deque[str | None] = deque(prompt_replies)

    def reply_to_prompts(self, *replies: str | None) -> None:
        self._replies.extend(replies)

    def draw_node(self, node: Node, border: BorderStyle, cursor: str) -> None:
        visual = self.nodes.get(node.id)
        if visual is None:
            self.nodes[node.id] = NodeVisual(
                node_id=node.id,
                x=node.x,
                y=node.y,
                label=node.label,
                fill_color=node.fill_color,
                border=border,
                cursor=cursor,
            )
            return
        visual.x, visual.y = node.x, node.y
        visual.label = node.label
        visual.fill_color = node.fill_color
        visual.border = border
        visual.cursor = cursor

    def remove_node(self, node_id: str) -> None:
        self.nodes.pop(node_id, None)

    def draw_connections(self, connections: list[ConnectionVisual]) -> None:
        self.connections = list(connections)
        self.frames += 1

    def set_transform(self, viewport: Viewport) -> None:
        self.transform = (viewport.scale, viewport.offset_x, viewport.offset_y)

    def show_form(self, form: EditForm | None) -> None:
        self.form = form

    def prompt_label(self, current: str) -> str | None:
        self.prompts.append(current)
        if not self._replies:
            return None
        return self._replies.popleft()

    def notify(self, message: str) -> None:
        self.notifications.append(message)

    def connection_visual(self, connection_id: str) -> ConnectionVisual | None:
        for visual in self.connections:
            if visual.geometry.connection_id == connection_id:
                return visual
        return None
