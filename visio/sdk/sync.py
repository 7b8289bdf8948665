"""Keeps the in-memory diagram and the diagram store in step.

Everything runs on one asyncio loop. Saves always send the complete state
(the store replaces a model wholesale), so there is nothing to merge: the
last save to arrive wins.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from visio.diagram import DiagramModel
from visio.models.diagram import DEFAULT_MODEL_ID, resolve_model_id
from visio.models.wire import SaveRequest
from visio.sdk.client import DiagramClient, DiagramStoreError


logger = logging.getLogger(__name__)

DEFAULT_SAVE_DELAY_MS = 400


class Debouncer:
    """Trailing-edge debounce around a single timer handle.

    Each trigger cancels the scheduled call and schedules a new one, so at
    most one call is ever pending and it fires delay_ms after the last
    trigger.
    """

    def __init__(self, callback: Callable[[], Any], delay_ms: float = DEFAULT_SAVE_DELAY_MS) -> None:
        self.callback = callback
        self.delay_ms = delay_ms
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, delay_ms: float | None = None) -> None:
        """(Re)arm the timer. Must be called from the running loop."""
        self.cancel()
        delay = self.delay_ms if delay_ms is None else delay_ms
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(delay / 1000, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self.callback()


class SyncEngine:
    """Load, save and debounced autosave for one open diagram."""

    def __init__(
        self,
        model: DiagramModel,
        client: DiagramClient,
        model_id: str = DEFAULT_MODEL_ID,
        save_delay_ms: float = DEFAULT_SAVE_DELAY_MS,
    ) -> None:
        self.model = model
        self.client = client
        self.model_id = resolve_model_id(model_id)
        self.last_error: DiagramStoreError | None = None
        self._debouncer = Debouncer(self.save_soon, save_delay_ms)
        self._in_flight: set[asyncio.Task] = set()
        self._closed = False

    @property
    def save_pending(self) -> bool:
        return self._debouncer.pending

    @property
    def closed(self) -> bool:
        return self._closed

    async def load(self, model_id: str | None = None) -> bool:
        """Replace the model with what the store holds for model_id.

        Returns True if at least one node was found. Store and parse
        failures are logged and reported as False, leaving the model as it
        was.
        """
        if model_id is not None:
            self.model_id = resolve_model_id(model_id)
        target = self.model_id
        try:
            response = await self.client.load(target)
            nodes, connections = response.to_entities()
        except DiagramStoreError as e:
            self.last_error = e
            logger.warning("Loading model %r failed: %s", target, e)
            return False
        if self._closed:
            logger.debug("Discarding load of %r that finished after close", target)
            return False
        self.last_error = None
        self.model.replace_all(nodes, connections)
        logger.info(
            "Loaded model %r: %d nodes, %d connections",
            target,
            len(nodes),
            len(connections),
        )
        return bool(nodes)

    async def save(self, model_id: str | None = None) -> bool:
        """Send the full current state to the store.

        Returns False on failure; the failure is logged and the model is
        left untouched.
        """
        target = self.model_id if model_id is None else resolve_model_id(model_id)
        request = SaveRequest.from_snapshot(target, self.model.export_snapshot())
        try:
            await self.client.save(request)
        except DiagramStoreError as e:
            self.last_error = e
            logger.warning("Saving model %r failed: %s", target, e)
            return False
        self.last_error = None
        logger.debug(
            "Saved model %r (%d nodes, %d connections)",
            target,
            len(request.nodes),
            len(request.connections),
        )
        return True

    def debounced_save(self, delay_ms: float | None = None) -> None:
        """Save once things have been quiet for delay_ms."""
        if self._closed:
            return
        self._debouncer.trigger(delay_ms)

    def save_soon(self) -> None:
        """Start a save in the background without waiting for it."""
        self._spawn(self.save())

    async def drain(self) -> None:
        """Wait for every save that is currently in flight."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    def close(self) -> None:
        """Abandon the pending autosave and any in-flight requests."""
        self._closed = True
        self._debouncer.cancel()
        for task in list(self._in_flight):
            task.cancel()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        if self._closed:
            coro.close()
            return
        task = asyncio.get_running_loop().create_task(coro)
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
