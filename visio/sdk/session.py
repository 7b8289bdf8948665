"""Session SDK - single entry point for opening a diagram.

Wires the model, store client, sync engine, scene and controller together,
opens the model (seeding example nodes when the store has none) and tears
everything down on exit.

Example:
    async with open_diagram("plant-a") as session:
        session.controller.add_node()
        await session.controller.save_clicked()
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx

from visio.adapters.scene import RecordingScene, SceneAdapter
from visio.diagram import DiagramModel
from visio.interaction.controller import InteractionController
from visio.interaction.viewport import Viewport
from visio.models.diagram import DEFAULT_MODEL_ID
from visio.sdk.client import DiagramClient
from visio.sdk.sync import DEFAULT_SAVE_DELAY_MS, SyncEngine


logger = logging.getLogger(__name__)


@dataclass
class DiagramSession:
    """Everything that belongs to one open diagram."""

    model: DiagramModel
    client: DiagramClient
    sync: SyncEngine
    scene: SceneAdapter
    controller: InteractionController
    found_existing: bool = False

    @property
    def model_id(self) -> str:
        return self.sync.model_id


@asynccontextmanager
async def open_diagram(
    model_id: str = DEFAULT_MODEL_ID,
    scene: SceneAdapter | None = None,
    base_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    save_delay_ms: float = DEFAULT_SAVE_DELAY_MS,
    viewport: Viewport | None = None,
) -> AsyncIterator[DiagramSession]:
    """Open a diagram for editing.

    Args:
        model_id: which stored diagram to open
        scene: rendering surface; a RecordingScene when omitted
        base_url: store root URL (see DiagramClient)
        transport: custom httpx transport, e.g. httpx.ASGITransport(app)
        save_delay_ms: quiet period before an autosave fires
        viewport: initial pan/zoom and screen size

    On exit the pending autosave and any in-flight requests are abandoned.
    """
    client = DiagramClient(base_url=base_url, transport=transport)
    model = DiagramModel()
    sync = SyncEngine(model, client, model_id=model_id, save_delay_ms=save_delay_ms)
    scene = scene if scene is not None else RecordingScene()
    controller = InteractionController(model, sync, scene, viewport=viewport)
    session = DiagramSession(
        model=model,
        client=client,
        sync=sync,
        scene=scene,
        controller=controller,
    )
    try:
        session.found_existing = await controller.open()
        logger.info("Opened diagram %r (%d nodes)", sync.model_id, len(model))
        yield session
    finally:
        controller.close()
        await client.aclose()
