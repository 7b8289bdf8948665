"""API routes for saving and loading diagrams."""

import logging
import sqlite3

from fastapi import APIRouter, HTTPException, Query

from server.diagram_db import (
    delete_connection as db_delete_connection,
    insert_connection as db_insert_connection,
    load_model as db_load_model,
    node_exists as db_node_exists,
    replace_model as db_replace_model,
)
from visio.models.diagram import resolve_model_id
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

router = APIRouter()

logger = logging.getLogger(__name__)


def _store_failure(action: str, error: sqlite3.Error) -> HTTPException:
    logger.exception("Store failure while %s", action)
    return HTTPException(status_code=500, detail=str(error))


@router.get("/health")
def health() -> HealthResponse:
    """Liveness check."""
    return HealthResponse(status="ok")


@router.post("/save")
def save_model(request: SaveRequest) -> SaveResponse:
    """Replace the stored diagram with the supplied nodes and connections.

    Callers must always send the complete state; anything not in the
    request is gone afterwards.
    """
    model_id = resolve_model_id(request.model_id)
    nodes = [payload.to_node() for payload in request.nodes]
    connections = [payload.to_connection() for payload in request.connections]
    try:
        db_replace_model(model_id, nodes, connections)
    except sqlite3.Error as e:
        raise _store_failure(f"saving model {model_id!r}", e) from e
    logger.info(
        "Saved model %r: %d nodes, %d connections",
        model_id,
        len(nodes),
        len(connections),
    )
    return SaveResponse(saved=True, model_id=model_id)


@router.get("/load")
def load_model(model_id: str | None = Query(default=None, alias="modelId")) -> LoadResponse:
    """Return everything stored for a model; unknown models come back empty."""
    model_id = resolve_model_id(model_id)
    try:
        nodes, connections = db_load_model(model_id)
    except sqlite3.Error as e:
        raise _store_failure(f"loading model {model_id!r}", e) from e
    return LoadResponse(
        nodes=[NodePayload.from_node(n) for n in nodes],
        connections=[ConnectionPayload.from_connection(c) for c in connections],
        model_id=model_id,
    )


@router.post("/connections")
def create_connection(request: ConnectionCreate) -> ConnectionCreate:
    """Add one connection to a stored model.

    Both endpoints must already be stored in that model.
    """
    model_id = resolve_model_id(request.model_id)
    connection = request.to_connection()
    try:
        for node_id in (connection.from_node_id, connection.to_node_id):
            if not db_node_exists(model_id, node_id):
                raise HTTPException(
                    status_code=400,
                    detail=f"Node not found in model {model_id!r}: {node_id}",
                )
        db_insert_connection(model_id, connection)
    except sqlite3.Error as e:
        raise _store_failure(f"adding connection to {model_id!r}", e) from e
    created = ConnectionCreate.from_connection(connection)
    created.model_id = model_id
    return created


@router.delete("/connections/{connection_id}")
def delete_connection(
    connection_id: str,
    model_id: str | None = Query(default=None, alias="modelId"),
) -> DeleteResponse:
    """Delete a single connection, from any model unless modelId is given."""
    if model_id is not None:
        model_id = resolve_model_id(model_id)
    try:
        deleted = db_delete_connection(connection_id, model_id=model_id)
    except sqlite3.Error as e:
        raise _store_failure(f"deleting connection {connection_id!r}", e) from e
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Connection not found: {connection_id}")
    return DeleteResponse(deleted=True)
