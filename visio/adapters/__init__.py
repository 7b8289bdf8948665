"""Rendering adapters for the interaction controller."""

from visio.adapters.scene import (
    ConnectionVisual,
    EditForm,
    NodeVisual,
    RecordingScene,
    SceneAdapter,
)

__all__ = [
    "ConnectionVisual",
    "EditForm",
    "NodeVisual",
    "RecordingScene",
    "SceneAdapter",
]
