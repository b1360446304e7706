from __future__ import annotations

from .bridge import DEFAULT_BLOB_KEY, DEFAULT_RETENTION_S, PersistenceBridge
from .task_store import StoreNotInitializedError, TaskStore

__all__ = [
    "DEFAULT_BLOB_KEY",
    "DEFAULT_RETENTION_S",
    "PersistenceBridge",
    "StoreNotInitializedError",
    "TaskStore",
]
