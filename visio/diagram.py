"""In-memory source of truth for the diagram that is currently open.

The model owns its Node and Connection entities. Callers get frozen entities
or snapshots back, never a handle into the internal dicts. Nothing here knows
about rendering; the controller redraws after mutating the model.
"""

from collections.abc import Iterable, Iterator

from visio.models.diagram import (
    Connection,
    DiagramSnapshot,
    Node,
)
from visio.utils.identifiers import generate_connection_id, generate_node_id


class DiagramModel:
    """Nodes and connections of one diagram, in insertion order."""

    def __init__(self) -> None:
        self._nodes: dict[str, Node] = {}
        self._connections: dict[str, Connection] = {}
        # drives the "Node N" default label; never decremented
        self._created = 0
        # ids deleted this session; explicit ids may not bring them back
        self._retired: set[str] = set()

    # -- reads ----------------------------------------------------------

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes.values())

    @property
    def connections(self) -> tuple[Connection, ...]:
        return tuple(self._connections.values())

    def get_node(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def get_connection(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    def find_connection(self, a: str, b: str) -> Connection | None:
        """Find the connection between a and b, in either direction."""
        for connection in self._connections.values():
            if connection.joins(a, b):
                return connection
        return None

    def resolved_connections(self) -> Iterator[tuple[Connection, Node, Node]]:
        """Yield (connection, from_node, to_node), skipping dangling references."""
        for connection in self._connections.values():
            from_node = self._nodes.get(connection.from_node_id)
            to_node = self._nodes.get(connection.to_node_id)
            if from_node is None or to_node is None:
                continue
            yield connection, from_node, to_node

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    # -- nodes ----------------------------------------------------------

    def add_node(
        self,
        position: tuple[float, float],
        label: str | None = None,
        fill_color: str | None = None,
        node_id: str | None = None,
    ) -> str:
        """Insert a node and return its id.

        Args:
            position: (x, y) of the box's top-left corner
            label: defaults to "Node N" with N the creation counter
            fill_color: #rgb or #rrggbb, defaults to the standard box fill
            node_id: explicit id; generated when omitted

        Raises:
            ValueError: if node_id is taken, was deleted earlier, or a color
                is malformed.
        """
        if node_id is not None and node_id in self._nodes:
            raise ValueError(f"Node id already in use: {node_id}")
        if node_id is not None and node_id in self._retired:
            raise ValueError(f"Node id was deleted and cannot be reused: {node_id}")
        self._created += 1
        node = Node(
            id=node_id or self._fresh_node_id(),
            x=position[0],
            y=position[1],
            label=f"Node {self._created}" if label is None else label,
            fill_color=fill_color,
        )
        self._nodes[node.id] = node
        return node.id

    def remove_node(self, node_id: str) -> bool:
        """Remove a node and every connection touching it."""
        if self._nodes.pop(node_id, None) is None:
            return False
        self._retired.add(node_id)
        kept = {}
        for cid, connection in self._connections.items():
            if connection.touches(node_id):
                self._retired.add(cid)
            else:
                kept[cid] = connection
        self._connections = kept
        return True

    def update_node(
        self,
        node_id: str,
        label: str | None = None,
        fill_color: str | None = None,
        position: tuple[float, float] | None = None,
    ) -> bool:
        """Apply a partial update. Returns False if the node does not exist."""
        node = self._nodes.get(node_id)
        if node is None:
            return False
        changes: dict = {}
        if label is not None:
            changes["label"] = label
        if fill_color is not None:
            changes["fill_color"] = fill_color
        if position is not None:
            changes["x"], changes["y"] = position
        if changes:
            # validate the copy so colors go through the same checks
            self._nodes[node_id] = Node.model_validate({**node.model_dump(), **changes})
        return True

    # -- connections ----------------------------------------------------

    def add_connection(
        self,
        from_id: str,
        to_id: str,
        style: str | None = None,
        color: str | None = None,
        width: int | None = None,
        label: str | None = None,
        connection_id: str | None = None,
    ) -> str | None:
        """Connect two nodes and return the new connection id.

        Returns None, leaving the model untouched, for self-loops, unknown
        endpoints, pairs that are already connected in either direction and
        explicit ids that are taken or were deleted earlier.
        """
        if from_id == to_id:
            return None
        if from_id not in self._nodes or to_id not in self._nodes:
            return None
        if self.find_connection(from_id, to_id) is not None:
            return None
        if connection_id is not None and (
            connection_id in self._connections or connection_id in self._retired
        ):
            return None
        connection = Connection(
            id=connection_id or self._fresh_connection_id(),
            from_node_id=from_id,
            to_node_id=to_id,
            style=style,
            color=color,
            width=width,
            label=label,
        )
        self._connections[connection.id] = connection
        return connection.id

    def remove_connection(self, connection_id: str) -> bool:
        if self._connections.pop(connection_id, None) is None:
            return False
        self._retired.add(connection_id)
        return True

    def clear_connections(self) -> None:
        self._retired.update(self._connections)
        self._connections = {}

    # -- bulk -----------------------------------------------------------

    def export_snapshot(self) -> DiagramSnapshot:
        """Copy the current state for serialization.

        Connections whose endpoints are missing are left out.
        """
        return DiagramSnapshot(
            nodes=[n.model_copy() for n in self._nodes.values()],
            connections=[c.model_copy() for c, _, _ in self.resolved_connections()],
        )

    def replace_all(self, nodes: Iterable[Node], connections: Iterable[Connection]) -> None:
        """Swap in a complete node and connection set.

        References are not checked here; dangling connections are kept and
        skipped when drawing or exporting. The loaded state starts a new
        session, so previously deleted ids are forgotten.
        """
        new_nodes = {n.id: n for n in nodes}
        new_connections = {c.id: c for c in connections}
        self._nodes = new_nodes
        self._connections = new_connections
        self._created = max(self._created, len(new_nodes))
        self._retired.clear()

    # -- internals ------------------------------------------------------

    def _fresh_node_id(self) -> str:
        node_id = generate_node_id()
        while node_id in self._nodes or node_id in self._retired:
            node_id = generate_node_id()
        return node_id

    def _fresh_connection_id(self) -> str:
        connection_id = generate_connection_id()
        while connection_id in self._connections or connection_id in self._retired:
            connection_id = generate_connection_id()
        return connection_id
