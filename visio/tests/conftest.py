"""Shared fixtures: a throwaway SQLite store and an in-memory fake store."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from server import diagram_db
from server.app import app
from server.db import init_all


@pytest.fixture
def store_db(tmp_path, monkeypatch):
    """Point the diagram store at a fresh database file."""
    path = tmp_path / "visio.db"
    monkeypatch.setattr(diagram_db, "DIAGRAM_DB_PATH", path)
    init_all()
    return path


@pytest.fixture
def api(store_db):
    return TestClient(app)


@pytest.fixture
def asgi_transport(store_db):
    """httpx transport that calls the real app in-process."""
    return httpx.ASGITransport(app=app)


class FakeStore:
    """MockTransport handler that keeps saved diagrams in a dict.

    Set `offline` to raise connection errors, or `fail_with` to answer every
    request with that status code.
    """

    def __init__(self) -> None:
        self.models: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.offline = False
        self.fail_with: int | None = None
        self.load_body: str | None = None

    @property
    def saves(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.url.path == "/api/save"]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("store offline", request=request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, text="store exploded")
        if request.url.path == "/api/save":
            body = json.loads(request.content)
            model_id = body.get("modelId") or "default"
            self.models[model_id] = body
            return httpx.Response(200, json={"saved": True, "modelId": model_id})
        if request.url.path == "/api/load":
            if self.load_body is not None:
                return httpx.Response(200, text=self.load_body)
            model_id = request.url.params.get("modelId") or "default"
            stored = self.models.get(model_id, {})
            return httpx.Response(
                200,
                json={
                    "nodes": stored.get("nodes", []),
                    "connections": stored.get("connections", []),
                    "modelId": model_id,
                },
            )
        return httpx.Response(404, json={"detail": "Not Found"})


@pytest.fixture
def fake_store():
    return FakeStore()
