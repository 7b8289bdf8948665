"""SQLite storage for diagram nodes and connections.

Both tables are partitioned by model_id. A save replaces a model's rows in
one transaction: delete everything for the model, insert the new set.
"""

import logging
import sqlite3

from server.config import DIAGRAM_DB_PATH
from visio.models.diagram import Connection, Node


logger = logging.getLogger(__name__)


def _connect() -> sqlite3.Connection:
    DIAGRAM_DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(DIAGRAM_DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def _columns(conn: sqlite3.Connection, table: str) -> set[str]:
    rows = conn.execute(f"pragma table_info('{table}')").fetchall()
    return {row["name"].lower() for row in rows}


def _ensure_column(conn: sqlite3.Connection, table: str, column: str, ddl: str) -> None:
    """Add a column to a table created by an older schema."""
    if column not in _columns(conn, table):
        logger.info("Adding missing column %s.%s", table, column)
        conn.execute(f"alter table {table} add column {column} {ddl}")


def init_db() -> None:
    with _connect() as conn:
        conn.execute(
            """
            create table if not exists nodes (
                model_id text not null default 'default',
                id text not null,
                x real not null,
                y real not null,
                text text not null default '',
                color text not null default '#f4f4f4',
                primary key (model_id, id)
            )
            """
        )
        conn.execute(
            """
            create table if not exists connections (
                model_id text not null default 'default',
                id text not null,
                from_node_id text not null,
                to_node_id text not null,
                style text not null default 'solid',
                color text not null default '#333333',
                width integer not null default 3,
                label text not null default '',
                primary key (model_id, id)
            )
            """
        )
        # databases created before diagrams were split by model
        _ensure_column(conn, "nodes", "model_id", "text not null default 'default'")
        _ensure_column(conn, "nodes", "color", "text not null default '#f4f4f4'")
        conn.execute(
            "create index if not exists idx_nodes_model_id on nodes(model_id)"
        )
        conn.execute(
            "create index if not exists idx_connections_model_id on connections(model_id)"
        )
        conn.commit()


def replace_model(model_id: str, nodes: list[Node], connections: list[Connection]) -> None:
    """Replace every node and connection stored for model_id."""
    with _connect() as conn:
        conn.execute("delete from connections where model_id = ?", (model_id,))
        conn.execute("delete from nodes where model_id = ?", (model_id,))
        conn.executemany(
            """
            insert into nodes (model_id, id, x, y, text, color)
            values (?, ?, ?, ?, ?, ?)
            """,
            [(model_id, n.id, n.x, n.y, n.label, n.fill_color) for n in nodes],
        )
        conn.executemany(
            """
            insert into connections (
                model_id,
                id,
                from_node_id,
                to_node_id,
                style,
                color,
                width,
                label
            )
            values (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [_connection_row(model_id, c) for c in connections],
        )
        conn.commit()


def load_model(model_id: str) -> tuple[list[Node], list[Connection]]:
    with _connect() as conn:
        node_rows = conn.execute(
            """
            select id, x, y, text, color
            from nodes
            where model_id = ?
            order by rowid asc
            """,
            (model_id,),
        ).fetchall()
        connection_rows = conn.execute(
            """
            select id, from_node_id, to_node_id, style, color, width, label
            from connections
            where model_id = ?
            order by rowid asc
            """,
            (model_id,),
        ).fetchall()
    nodes = [
        Node(
            id=row["id"],
            x=row["x"],
            y=row["y"],
            label=row["text"],
            fill_color=row["color"],
        )
        for row in node_rows
    ]
    connections = [
        Connection(
            id=row["id"],
            from_node_id=row["from_node_id"],
            to_node_id=row["to_node_id"],
            style=row["style"],
            color=row["color"],
            width=row["width"],
            label=row["label"],
        )
        for row in connection_rows
    ]
    return nodes, connections


def node_exists(model_id: str, node_id: str) -> bool:
    with _connect() as conn:
        row = conn.execute(
            "select 1 from nodes where model_id = ? and id = ?",
            (model_id, node_id),
        ).fetchone()
    return row is not None


def insert_connection(model_id: str, connection: Connection) -> None:
    with _connect() as conn:
        conn.execute(
            """
            insert into connections (
                model_id,
                id,
                from_node_id,
                to_node_id,
                style,
                color,
                width,
                label
            )
            values (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            _connection_row(model_id, connection),
        )
        conn.commit()


def delete_connection(connection_id: str, model_id: str | None = None) -> int:
    """Delete a connection by id, optionally only within one model.

    Returns the number of rows removed.
    """
    with _connect() as conn:
        if model_id is None:
            cursor = conn.execute(
                "delete from connections where id = ?",
                (connection_id,),
            )
        else:
            cursor = conn.execute(
                "delete from connections where id = ? and model_id = ?",
                (connection_id, model_id),
            )
        conn.commit()
    return cursor.rowcount


def _connection_row(model_id: str, connection: Connection) -> tuple:
    return (
        model_id,
        connection.id,
        connection.from_node_id,
        connection.to_node_id,
        connection.style,
        connection.color,
        connection.width,
        connection.label,
    )
