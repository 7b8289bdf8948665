"""Utility functions for the diagram client."""

from visio.utils.identifiers import (
    generate_connection_id,
    generate_node_id,
    is_blank,
)

__all__ = [
    "generate_connection_id",
    "generate_node_id",
    "is_blank",
]
