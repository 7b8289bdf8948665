"""Pointer and keyboard interpretation over the diagram model.

The controller is a small state machine. Every pointer press is first
classified into a Gesture (after hit-testing nodes), then looked up in
TRANSITIONS by (current mode, gesture). The handler found there performs the
model mutation and returns the next mode. Pairs that are not in the table are
ignored, so for example a canvas release while idle does nothing.

Modes:
    idle             nothing in progress
    connect_armed    connection mode switched on, no source picked yet
    connect_pending  a source node is picked, waiting for the target
    dragging         a node follows the pointer
    panning          the view follows the pointer

After each transition the scene is redrawn. Mutations arm the sync engine's
debounced save; renames and form edits save immediately.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from visio.adapters.scene import ConnectionVisual, EditForm, SceneAdapter
from visio.diagram import DiagramModel
from visio.interaction.events import (
    CANCEL_KEYS,
    DELETE_KEYS,
    Button,
    Gesture,
    KeyEvent,
    PointerEvent,
    WheelEvent,
)
from visio.interaction.geometry import (
    BOX_HEIGHT,
    BOX_WIDTH,
    ConnectionGeometry,
    build_connection_geometry,
    hit_test_connections,
    node_contains,
)
from visio.interaction.styles import (
    CURSOR_CONNECT_SOURCE,
    CURSOR_CONNECT_TARGET,
    CURSOR_GRAB,
    CURSOR_GRABBING,
    SELECTED_CONNECTION_COLOR,
    SELECTED_CONNECTION_EXTRA_WIDTH,
    border_for,
)
from visio.interaction.viewport import Viewport
from visio.models.diagram import Node
from visio.sdk.sync import SyncEngine


logger = logging.getLogger(__name__)

DOUBLE_TAP_WINDOW = 0.3  # seconds

ADD_NODE_ORIGIN = (100.0, 100.0)
ADD_NODE_STEP = (40.0, 30.0)

# placed when a model is opened and the store has nothing for it
SEED_NODES = (
    ("Control server", (50.0, 50.0)),
    ("Engineering station", (300.0, 50.0)),
    ("PLC", (50.0, 180.0)),
)


class Mode(str, Enum):
    """States of the interaction controller."""

    idle = "idle"
    connect_armed = "connect_armed"
    connect_pending = "connect_pending"
    dragging = "dragging"
    panning = "panning"


TRANSITIONS: dict[tuple[Mode, Gesture], str] = {
    (Mode.idle, Gesture.node_press): "_press_node",
    (Mode.idle, Gesture.node_modifier_press): "_pick_source",
    (Mode.idle, Gesture.canvas_press): "_press_canvas",
    (Mode.idle, Gesture.pan_press): "_start_pan",
    (Mode.idle, Gesture.toggle_connect): "_arm",
    (Mode.connect_armed, Gesture.node_press): "_pick_source",
    (Mode.connect_armed, Gesture.node_modifier_press): "_pick_source",
    (Mode.connect_armed, Gesture.canvas_press): "_press_canvas",
    (Mode.connect_armed, Gesture.pan_press): "_start_pan",
    (Mode.connect_armed, Gesture.toggle_connect): "_cancel",
    (Mode.connect_pending, Gesture.node_press): "_pick_target",
    (Mode.connect_pending, Gesture.node_modifier_press): "_pick_target",
    (Mode.connect_pending, Gesture.canvas_press): "_press_canvas",
    (Mode.connect_pending, Gesture.pan_press): "_start_pan",
    (Mode.connect_pending, Gesture.toggle_connect): "_cancel",
    (Mode.dragging, Gesture.move): "_move_drag",
    (Mode.dragging, Gesture.release): "_end_drag",
    (Mode.panning, Gesture.move): "_move_pan",
    (Mode.panning, Gesture.release): "_end_pan",
}
for _mode in Mode:
    TRANSITIONS[(_mode, Gesture.cancel)] = "_cancel"


@dataclass
class _Drag:
    node_id: str
    offset: tuple[float, float]  # pointer minus node origin, world units
    moved: bool = False


@dataclass
class _Pan:
    start: tuple[float, float]  # screen position of the press
    origin: tuple[float, float]  # viewport offset at the press
    resume: Mode


class InteractionController:
    """Turns input events into diagram edits, redraws and saves."""

    def __init__(
        self,
        model: DiagramModel,
        sync: SyncEngine,
        scene: SceneAdapter,
        viewport: Viewport | None = None,
    ) -> None:
        self.model = model
        self.sync = sync
        self.scene = scene
        self.viewport = viewport or Viewport()
        self.mode = Mode.idle
        self.selected_node_id: str | None = None
        self.selected_connection_id: str | None = None
        self.form: EditForm | None = None
        self.pending_from: str | None = None
        self._drag: _Drag | None = None
        self._pan: _Pan | None = None
        self._last_tap: dict[str, float] = {}
        self._added = 0
        self._raised: str | None = None
        self._drawn: set[str] = set()

    @property
    def connection_mode_active(self) -> bool:
        return self.mode in (Mode.connect_armed, Mode.connect_pending) or (
            self._pan is not None
            and self._pan.resume in (Mode.connect_armed, Mode.connect_pending)
        )

    # -- lifecycle --------------------------------------------------------

    async def open(self) -> bool:
        """Load the model, seeding example nodes if the store has none.

        Returns whether stored nodes were found.
        """
        found = await self.sync.load()
        if not found:
            logger.info("Model %r is empty, seeding example nodes", self.sync.model_id)
            self.seed_defaults()
            await self.sync.save()
        self._reset_after_load()
        return found

    def seed_defaults(self) -> list[str]:
        return [self.model.add_node(position, label=label) for label, position in SEED_NODES]

    def close(self) -> None:
        self.sync.close()

    # -- input ------------------------------------------------------------

    def pointer_down(self, event: PointerEvent) -> None:
        gesture, node_id = self._classify_press(event)
        if gesture is not None:
            self._dispatch(gesture, event, node_id)

    def pointer_move(self, event: PointerEvent) -> None:
        self._dispatch(Gesture.move, event)

    def pointer_up(self, event: PointerEvent) -> None:
        self._dispatch(Gesture.release, event)

    def wheel(self, event: WheelEvent) -> float:
        scale = self.viewport.wheel(event.delta_y, event.x, event.y)
        self.scene.set_transform(self.viewport)
        return scale

    def key_down(self, event: KeyEvent) -> None:
        if event.key in CANCEL_KEYS:
            self._dispatch(Gesture.cancel)
        elif event.key in DELETE_KEYS:
            self.delete_selected()

    def toggle_connection_mode(self) -> bool:
        """The connection-mode control. Returns whether the mode is now on."""
        self._dispatch(Gesture.toggle_connect)
        return self.connection_mode_active

    # -- commands ---------------------------------------------------------

    def add_node(self) -> str:
        """Add a box, each one offset a little from the previous."""
        k = self._added
        self._added += 1
        node_id = self.model.add_node(
            (ADD_NODE_ORIGIN[0] + k * ADD_NODE_STEP[0], ADD_NODE_ORIGIN[1] + k * ADD_NODE_STEP[1]),
            label=f"Node {k + 1}",
        )
        self.redraw()
        self.sync.debounced_save()
        return node_id

    def select_node(self, node_id: str | None) -> None:
        self._select_node(node_id)
        self.redraw()

    def apply_form(self, label: str | None = None, color: str | None = None) -> bool:
        """Write the edit form back to the selected node and save right away.

        Raises:
            ValueError: if color is not a #rgb or #rrggbb string.
        """
        if self.selected_node_id is None:
            return False
        if not self.model.update_node(self.selected_node_id, label=label, fill_color=color):
            return False
        self._refresh_form()
        self.redraw()
        self.sync.save_soon()
        return True

    def rename(self, node_id: str) -> bool:
        """Prompt for a new label; an accepted label is saved immediately."""
        node = self.model.get_node(node_id)
        if node is None:
            return False
        new_label = self.scene.prompt_label(node.label)
        if new_label is None:
            return False
        self.model.update_node(node_id, label=new_label)
        if self.selected_node_id == node_id:
            self._refresh_form()
        self.redraw()
        self.sync.save_soon()
        return True

    def delete_selected(self) -> bool:
        """Delete the selected node (with its connections), else the selected connection."""
        if self.selected_node_id is not None:
            node_id = self.selected_node_id
            self.model.remove_node(node_id)
            self._forget_node(node_id)
            self._select_node(None)
        elif self.selected_connection_id is not None:
            self.model.remove_connection(self.selected_connection_id)
            self._select_connection(None)
        else:
            return False
        self.redraw()
        self.sync.debounced_save()
        return True

    def delete_connection(self, connection_id: str) -> bool:
        if not self.model.remove_connection(connection_id):
            return False
        if self.selected_connection_id == connection_id:
            self._select_connection(None)
        self.redraw()
        self.sync.debounced_save()
        return True

    def clear_connections(self) -> None:
        self.model.clear_connections()
        self._select_connection(None)
        self.redraw()
        self.sync.debounced_save()

    def zoom_in(self) -> float:
        scale = self.viewport.zoom_in()
        self.scene.set_transform(self.viewport)
        return scale

    def zoom_out(self) -> float:
        scale = self.viewport.zoom_out()
        self.scene.set_transform(self.viewport)
        return scale

    def reset_zoom(self) -> None:
        self.viewport.reset()
        self.scene.set_transform(self.viewport)

    async def save_clicked(self) -> bool:
        """The explicit Save button: unlike autosave, it tells the user."""
        ok = await self.sync.save()
        self.scene.notify("Saved" if ok else "Save failed")
        return ok

    async def load_clicked(self) -> bool:
        found = await self.sync.load()
        if self.sync.last_error is not None:
            self.scene.notify("Load failed")
        self._reset_after_load()
        return found

    # -- queries ----------------------------------------------------------

    def node_at(self, sx: float, sy: float) -> str | None:
        """Topmost node under a screen point."""
        point = self.viewport.to_world(sx, sy)
        for node in reversed(self._stacking()):
            if node_contains(node, point):
                return node.id
        return None

    def connection_geometries(self) -> list[ConnectionGeometry]:
        return [
            build_connection_geometry(connection, a, b)
            for connection, a, b in self.model.resolved_connections()
        ]

    def visible_node_ids(self) -> list[str]:
        return [
            node.id
            for node in self.model.nodes
            if self.viewport.is_box_visible(node.x, node.y, BOX_WIDTH, BOX_HEIGHT)
        ]

    # -- drawing ----------------------------------------------------------

    def redraw(self) -> None:
        drawn: set[str] = set()
        for node in self._stacking():
            border = border_for(
                is_selected=node.id == self.selected_node_id,
                is_connection_source=node.id == self.pending_from,
            )
            self.scene.draw_node(node, border, self._cursor_for(node.id))
            drawn.add(node.id)
        for stale in self._drawn - drawn:
            self.scene.remove_node(stale)
        self._drawn = drawn

        visuals = []
        for connection, a, b in self.model.resolved_connections():
            selected = connection.id == self.selected_connection_id
            visuals.append(
                ConnectionVisual(
                    geometry=build_connection_geometry(connection, a, b),
                    color=SELECTED_CONNECTION_COLOR if selected else connection.color,
                    width=connection.width + SELECTED_CONNECTION_EXTRA_WIDTH if selected else connection.width,
                    style=connection.style,
                    label=connection.label,
                    selected=selected,
                )
            )
        self.scene.draw_connections(visuals)
        self.scene.set_transform(self.viewport)

    def _cursor_for(self, node_id: str) -> str:
        if self.pending_from is not None:
            return CURSOR_CONNECT_SOURCE if node_id == self.pending_from else CURSOR_CONNECT_TARGET
        if self.mode is Mode.connect_armed:
            return CURSOR_CONNECT_TARGET
        if self._drag is not None and self._drag.node_id == node_id:
            return CURSOR_GRABBING
        return CURSOR_GRAB

    def _stacking(self) -> list[Node]:
        """Nodes bottom to top; the last selected node is raised above the rest."""
        nodes = list(self.model.nodes)
        if self._raised is not None:
            raised = [n for n in nodes if n.id == self._raised]
            nodes = [n for n in nodes if n.id != self._raised] + raised
        return nodes

    # -- state machine ----------------------------------------------------

    def _classify_press(self, event: PointerEvent) -> tuple[Gesture | None, str | None]:
        if event.button is Button.middle or (event.button is Button.primary and event.shift):
            return Gesture.pan_press, None
        if event.button is not Button.primary:
            return None, None
        node_id = self.node_at(event.x, event.y)
        if node_id is None:
            return Gesture.canvas_press, None
        if event.modifier:
            return Gesture.node_modifier_press, node_id
        return Gesture.node_press, node_id

    def _dispatch(
        self,
        gesture: Gesture,
        event: PointerEvent | None = None,
        node_id: str | None = None,
    ) -> bool:
        handler_name = TRANSITIONS.get((self.mode, gesture))
        if handler_name is None:
            return False
        previous = self.mode
        self.mode = getattr(self, handler_name)(event, node_id)
        if self.mode is not previous:
            logger.debug("%s --%s--> %s", previous.value, gesture.value, self.mode.value)
        self.redraw()
        return True

    def _press_node(self, event: PointerEvent, node_id: str) -> Mode:
        node = self.model.get_node(node_id)
        self._select_node(node_id)
        wx, wy = self.viewport.to_world(event.x, event.y)
        self._drag = _Drag(node_id=node_id, offset=(wx - node.x, wy - node.y))
        return Mode.dragging

    def _move_drag(self, event: PointerEvent, _node_id: str | None) -> Mode:
        drag = self._drag
        node = self.model.get_node(drag.node_id)
        if node is None:
            self._drag = None
            return Mode.idle
        wx, wy = self.viewport.to_world(event.x, event.y)
        position = (wx - drag.offset[0], wy - drag.offset[1])
        if position != node.position:
            self.model.update_node(drag.node_id, position=position)
            drag.moved = True
        return Mode.dragging

    def _end_drag(self, event: PointerEvent, _node_id: str | None) -> Mode:
        drag = self._drag
        self._drag = None
        if drag.moved:
            self.sync.debounced_save()
        else:
            self._tap(drag.node_id, event.timestamp)
        return Mode.idle

    def _tap(self, node_id: str, timestamp: float) -> None:
        last = self._last_tap.get(node_id)
        self._last_tap[node_id] = timestamp
        if last is not None and timestamp - last < DOUBLE_TAP_WINDOW:
            # a third tap should start a new pair, not rename again
            del self._last_tap[node_id]
            self.rename(node_id)

    def _arm(self, _event: PointerEvent | None, _node_id: str | None) -> Mode:
        self.pending_from = None
        return Mode.connect_armed

    def _pick_source(self, _event: PointerEvent, node_id: str) -> Mode:
        self.pending_from = node_id
        return Mode.connect_pending

    def _pick_target(self, _event: PointerEvent, node_id: str) -> Mode:
        source = self.pending_from
        self.pending_from = None
        if node_id != source and self.model.add_connection(source, node_id) is not None:
            self.sync.debounced_save()
        return Mode.idle

    def _press_canvas(self, event: PointerEvent, _node_id: str | None) -> Mode:
        hit = hit_test_connections(
            self.viewport.to_world(event.x, event.y),
            self.connection_geometries(),
        )
        if hit is not None:
            self._select_connection(hit)
        else:
            self._select_node(None)
            self._select_connection(None)
        return self.mode

    def _start_pan(self, event: PointerEvent, _node_id: str | None) -> Mode:
        self._pan = _Pan(
            start=(event.x, event.y),
            origin=(self.viewport.offset_x, self.viewport.offset_y),
            resume=self.mode,
        )
        return Mode.panning

    def _move_pan(self, event: PointerEvent, _node_id: str | None) -> Mode:
        pan = self._pan
        self.viewport.pan_to(
            pan.origin[0] + event.x - pan.start[0],
            pan.origin[1] + event.y - pan.start[1],
        )
        return Mode.panning

    def _end_pan(self, _event: PointerEvent, _node_id: str | None) -> Mode:
        resume = self._pan.resume
        self._pan = None
        return resume

    def _cancel(self, _event: PointerEvent | None, _node_id: str | None) -> Mode:
        if self._drag is not None:
            if self._drag.moved:
                self.sync.debounced_save()
            self._drag = None
        self._pan = None
        self.pending_from = None
        return Mode.idle

    # -- selection --------------------------------------------------------

    def _select_node(self, node_id: str | None) -> None:
        self.selected_node_id = node_id
        if node_id is not None:
            self.selected_connection_id = None
            self._raised = node_id
        self._refresh_form()

    def _select_connection(self, connection_id: str | None) -> None:
        self.selected_connection_id = connection_id
        if connection_id is not None and self.selected_node_id is not None:
            self.selected_node_id = None
            self._refresh_form()

    def _refresh_form(self) -> None:
        node = self.model.get_node(self.selected_node_id) if self.selected_node_id else None
        self.form = EditForm(node.id, node.label, node.fill_color) if node else None
        self.scene.show_form(self.form)

    def _forget_node(self, node_id: str) -> None:
        self._last_tap.pop(node_id, None)
        if self._raised == node_id:
            self._raised = None
        if self.pending_from == node_id:
            self.pending_from = None
            if self.mode is Mode.connect_pending:
                self.mode = Mode.idle
            if self._pan is not None and self._pan.resume is Mode.connect_pending:
                self._pan.resume = Mode.idle
        if self._drag is not None and self._drag.node_id == node_id:
            self._drag = None
            self.mode = Mode.idle

    def _reset_after_load(self) -> None:
        self._drag = None
        self._pan = None
        self.pending_from = None
        self.mode = Mode.idle
        self._last_tap.clear()
        if self.selected_node_id is not None and self.selected_node_id not in self.model:
            self._select_node(None)
        if (
            self.selected_connection_id is not None
            and self.model.get_connection(self.selected_connection_id) is None
        ):
            self._select_connection(None)
        if self._raised is not None and self._raised not in self.model:
            self._raised = None
        self.redraw()
