"""Async HTTP client for the diagram store.

Usage:
    async with DiagramClient("http://localhost:5000") as client:
        stored = await client.load("default")
"""

from __future__ import annotations

import os
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from visio.models.diagram import Connection
from visio.models.wire import (
    ConnectionCreate,
    DeleteResponse,
    HealthResponse,
    LoadResponse,
    SaveRequest,
    SaveResponse,
)


DEFAULT_BASE_URL = "http://localhost:5000"

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)


class DiagramStoreError(Exception):
    """Raised when a store request fails or its response cannot be read."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DiagramClient:
    """Talks to the diagram store's /api endpoints.

    Every failure (connection refused, timeout, non-2xx status, malformed
    body) surfaces as DiagramStoreError.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: store root; falls back to $VISIO_API_URL, then localhost:5000
            timeout: per-request timeout in seconds
            transport: custom httpx transport (in-process app, mocks)
        """
        self.base_url = (base_url or os.getenv("VISIO_API_URL", DEFAULT_BASE_URL)).rstrip("/")
        self.timeout = timeout
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> DiagramClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise DiagramStoreError(
                f"Failed to reach diagram store at {self.base_url}: {e}"
            ) from e
        if response.is_error:
            raise DiagramStoreError(
                f"{method} {path} failed with {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return response

    def _parse(self, response: httpx.Response, model: type[ResponseModel]) -> ResponseModel:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise DiagramStoreError(
                f"Unreadable response from {response.request.url}: {e}",
                status_code=response.status_code,
            ) from e

    async def health(self) -> HealthResponse:
        response = await self._request("GET", "/api/health")
        return self._parse(response, HealthResponse)

    async def save(self, request: SaveRequest) -> SaveResponse:
        """Replace everything stored under request.model_id."""
        response = await self._request(
            "POST",
            "/api/save",
            json=request.model_dump(mode="json", by_alias=True),
        )
        return self._parse(response, SaveResponse)

    async def load(self, model_id: str) -> LoadResponse:
        """Fetch the stored nodes and connections of a model (possibly empty)."""
        response = await self._request("GET", "/api/load", params={"modelId": model_id})
        return self._parse(response, LoadResponse)

    async def create_connection(self, request: ConnectionCreate) -> Connection:
        """Add one connection to a stored model without a full save."""
        response = await self._request(
            "POST",
            "/api/connections",
            json=request.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        return self._parse(response, ConnectionCreate).to_connection()

    async def delete_connection(self, connection_id: str, model_id: str | None = None) -> bool:
        params = {"modelId": model_id} if model_id else None
        response = await self._request(
            "DELETE", f"/api/connections/{connection_id}", params=params
        )
        return self._parse(response, DeleteResponse).deleted
