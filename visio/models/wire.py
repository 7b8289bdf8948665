"""Request and response bodies of the diagram store HTTP API.

Field names are camelCase on the wire and snake_case in Python.
"""

from typing import Any

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

from visio.models.diagram import (
    Connection,
    DiagramSnapshot,
    Node,
    coerce_width,
    check_color,
)
from visio.utils.identifiers import generate_connection_id, generate_node_id, is_blank


class WireModel(BaseModel):
    """base for camelCase payloads; accepts either spelling on input."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


def _optional_color(value: Any) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, str):
        return check_color(value.strip())
    return value


class NodePayload(WireModel):
    """node as sent to and returned by the store."""

    id: str | None = None
    x: float
    y: float
    text: str = ""
    color: str | None = None

    @field_validator("color", mode="before")
    @classmethod
    def _color(cls, value: Any) -> Any:
        return _optional_color(value)

    @field_validator("text", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_node(cls, node: Node) -> "NodePayload":
        return cls(id=node.id, x=node.x, y=node.y, text=node.label, color=node.fill_color)

    def to_node(self) -> Node:
        """Build the entity, generating an id when none was sent."""
        return Node(
            id=generate_node_id() if is_blank(self.id) else self.id,
            x=self.x,
            y=self.y,
            label=self.text,
            fill_color=self.color,
        )


class ConnectionPayload(WireModel):
    """connection as sent to and returned by the store."""

    id: str | None = None
    from_node_id: str
    to_node_id: str
    style: str | None = None
    color: str | None = None
    width: int | None = None
    label: str | None = None

    @field_validator("color", mode="before")
    @classmethod
    def _color(cls, value: Any) -> Any:
        return _optional_color(value)

    @classmethod
    def from_connection(cls, connection: Connection) -> "ConnectionPayload":
        return cls(
            id=connection.id,
            from_node_id=connection.from_node_id,
            to_node_id=connection.to_node_id,
            style=connection.style,
            color=connection.color,
            width=connection.width,
            label=connection.label,
        )

    def to_connection(self) -> Connection:
        """Build the entity, applying defaults and generating a missing id."""
        return Connection(
            id=generate_connection_id() if is_blank(self.id) else self.id,
            from_node_id=self.from_node_id,
            to_node_id=self.to_node_id,
            style=self.style,
            color=self.color,
            width=coerce_width(self.width),
            label=self.label,
        )


class SaveRequest(WireModel):
    """full-replace save: the complete desired state of one model."""

    model_id: str | None = None
    nodes: list[NodePayload]
    connections: list[ConnectionPayload] = []

    @field_validator("connections", mode="before")
    @classmethod
    def _connections(cls, value: Any) -> Any:
        return [] if value is None else value

    @classmethod
    def from_snapshot(cls, model_id: str, snapshot: DiagramSnapshot) -> "SaveRequest":
        return cls(
            model_id=model_id,
            nodes=[NodePayload.from_node(n) for n in snapshot.nodes],
            connections=[ConnectionPayload.from_connection(c) for c in snapshot.connections],
        )


class SaveResponse(WireModel):
    saved: bool
    model_id: str


class LoadResponse(WireModel):
    """everything stored for one model id."""

    nodes: list[NodePayload] = []
    connections: list[ConnectionPayload] = []
    model_id: str

    def to_entities(self) -> tuple[list[Node], list[Connection]]:
        return (
            [n.to_node() for n in self.nodes],
            [c.to_connection() for c in self.connections],
        )


class ConnectionCreate(ConnectionPayload):
    """request body for adding a single connection to a stored model."""

    model_id: str | None = None


class DeleteResponse(WireModel):
    deleted: bool


class HealthResponse(WireModel):
    status: str
