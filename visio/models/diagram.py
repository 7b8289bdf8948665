"""Diagram entities: nodes, connections and point-in-time snapshots.

Entities are frozen pydantic models. The DiagramModel replaces an entity with
an updated copy instead of mutating it, so a snapshot can never be changed
from under the model (or the other way round). Entities hold no rendering
state; the scene adapter keys its visuals by entity id.
"""

import re
from typing import Any

from pydantic import BaseModel, field_validator


DEFAULT_MODEL_ID = "default"
DEFAULT_NODE_COLOR = "#f4f4f4"
DEFAULT_CONNECTION_STYLE = "solid"
DEFAULT_CONNECTION_COLOR = "#333333"
DEFAULT_CONNECTION_WIDTH = 3

_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")


def check_color(value: str) -> str:
    """Validate a #rgb or #rrggbb color. The string is kept exactly as given."""
    if not _COLOR_RE.match(value):
        raise ValueError(f"expected a #rgb or #rrggbb color, got {value!r}")
    return value


def coerce_width(value: int | None) -> int:
    """Missing or non-positive stroke widths fall back to the default."""
    if value is None or value <= 0:
        return DEFAULT_CONNECTION_WIDTH
    return value


def resolve_model_id(model_id: str | None) -> str:
    """Blank model ids address the default diagram."""
    if model_id is None or not model_id.strip():
        return DEFAULT_MODEL_ID
    return model_id


def _color_or_default(value: Any, default: str) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, str):
        return check_color(value.strip())
    return value


class Node(BaseModel):
    """a labeled box on the canvas. x/y is the top-left corner."""

    model_config = {"frozen": True}

    id: str
    x: float
    y: float
    label: str = ""
    fill_color: str = DEFAULT_NODE_COLOR

    @field_validator("fill_color", mode="before")
    @classmethod
    def _fill_color(cls, value: Any) -> Any:
        return _color_or_default(value, DEFAULT_NODE_COLOR)

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)


class Connection(BaseModel):
    """a directed link drawn from one node's box into another's."""

    model_config = {"frozen": True}

    id: str
    from_node_id: str
    to_node_id: str
    style: str = DEFAULT_CONNECTION_STYLE
    color: str = DEFAULT_CONNECTION_COLOR
    width: int = DEFAULT_CONNECTION_WIDTH
    label: str = ""

    @field_validator("style", mode="before")
    @classmethod
    def _style(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_CONNECTION_STYLE
        return value

    @field_validator("color", mode="before")
    @classmethod
    def _color(cls, value: Any) -> Any:
        return _color_or_default(value, DEFAULT_CONNECTION_COLOR)

    @field_validator("width", mode="before")
    @classmethod
    def _width_missing(cls, value: Any) -> Any:
        return DEFAULT_CONNECTION_WIDTH if value is None else value

    @field_validator("width")
    @classmethod
    def _width(cls, value: int) -> int:
        return coerce_width(value)

    @field_validator("label", mode="before")
    @classmethod
    def _label(cls, value: Any) -> Any:
        return "" if value is None else value

    def joins(self, a: str, b: str) -> bool:
        """True if this connection links a and b in either direction."""
        return {self.from_node_id, self.to_node_id} == {a, b}

    def touches(self, node_id: str) -> bool:
        return node_id in (self.from_node_id, self.to_node_id)


class DiagramSnapshot(BaseModel):
    """a consistent copy of a diagram's nodes and connections."""

    nodes: list[Node] = []
    connections: list[Connection] = []
