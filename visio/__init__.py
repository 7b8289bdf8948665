"""PixieVisio - diagram editing core: model, interaction and store sync."""

from visio.diagram import DiagramModel
from visio.interaction.controller import InteractionController, Mode
from visio.models.diagram import Connection, DiagramSnapshot, Node
from visio.adapters.scene import RecordingScene, SceneAdapter
from visio.sdk.client import DiagramClient, DiagramStoreError
from visio.sdk.sync import SyncEngine
from visio.sdk.session import DiagramSession, open_diagram

__all__ = [
    # Entities
    "Connection",
    "DiagramSnapshot",
    "Node",
    # Core
    "DiagramModel",
    "InteractionController",
    "Mode",
    "SyncEngine",
    # Rendering
    "RecordingScene",
    "SceneAdapter",
    # Store access
    "DiagramClient",
    "DiagramStoreError",
    "DiagramSession",
    "open_diagram",
]
