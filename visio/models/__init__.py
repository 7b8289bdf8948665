"""Data models for diagrams and the store API."""

from visio.models.diagram import (
    DEFAULT_CONNECTION_COLOR,
    DEFAULT_CONNECTION_STYLE,
    DEFAULT_CONNECTION_WIDTH,
    DEFAULT_MODEL_ID,
    DEFAULT_NODE_COLOR,
    Connection,
    DiagramSnapshot,
    Node,
)
from visio.models.wire import (
    ConnectionCreate,
    ConnectionPayload,
    DeleteResponse,
    HealthResponse,
    LoadResponse,
    NodePayload,
    SaveRequest,
    SaveResponse,
)

__all__ = [
    # Entities
    "Connection",
    "DiagramSnapshot",
    "Node",
    # Defaults
    "DEFAULT_CONNECTION_COLOR",
    "DEFAULT_CONNECTION_STYLE",
    "DEFAULT_CONNECTION_WIDTH",
    "DEFAULT_MODEL_ID",
    "DEFAULT_NODE_COLOR",
    # Store API bodies
    "ConnectionCreate",
    "ConnectionPayload",
    "DeleteResponse",
    "HealthResponse",
    "LoadResponse",
    "NodePayload",
    "SaveRequest",
    "SaveResponse",
]
