"""ID generation utilities."""

import uuid


def generate_node_id() -> str:
    """Generate a unique node ID ("n-" + 12 hex chars)."""
    return f"n-{uuid.uuid4().hex[:12]}"


def generate_connection_id() -> str:
    """Generate a unique connection ID ("c-" + 12 hex chars)."""
    return f"c-{uuid.uuid4().hex[:12]}"


def is_blank(value: str | None) -> bool:
    """True for None, empty, or whitespace-only ids."""
    return value is None or not value.strip()
