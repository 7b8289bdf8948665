"""Client SDK: store access and synchronization.

Sessions are opened with visio.sdk.session.open_diagram (also exported from
the top-level package).
"""

from visio.sdk.client import DiagramClient, DiagramStoreError
from visio.sdk.sync import Debouncer, SyncEngine

__all__ = [
    "Debouncer",
    "DiagramClient",
    "DiagramStoreError",
    "SyncEngine",
]
