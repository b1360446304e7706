from __future__ import annotations

from collections.abc import Sequence

from pydantic import ValidationError

from taskpad.blobstore.interface import BlobStore, BlobStoreError
from taskpad.models.task import Task, deserialize_tasks, serialize_tasks
from taskpad.observability import get_json_logger, get_metrics

DEFAULT_BLOB_KEY = "todo-tasks"
DEFAULT_RETENTION_S = 365 * 24 * 60 * 60


class PersistenceBridge:
    """Keeps one blob in a BlobStore in sync with the task list.

    Availability wins over strictness: a missing, unreadable or corrupted blob
    yields an empty list, and failed writes are logged and dropped. The
    in-memory list stays authoritative for the running session either way.
    """

    def __init__(
        self,
        store: BlobStore,
        *,
        key: str = DEFAULT_BLOB_KEY,
        retention_s: int | None = DEFAULT_RETENTION_S,
    ) -> None:
        self._store = store
        self._key = key
        self._retention_s = retention_s
        self._logger = get_json_logger("taskpad.store.bridge")

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> list[Task]:
        metrics = get_metrics()
        try:
            blob = self._store.get(self._key)
        except BlobStoreError:
            self._logger.exception(
                "blob read failed; starting empty",
                extra={"event": "load_failed", "key": self._key},
            )
            metrics.increment("persist_errors", {"phase": "load"})
            return []
        if blob is None:
            self._logger.info(
                "no stored tasks", extra={"event": "load_missing", "key": self._key}
            )
            return []
        try:
            tasks = deserialize_tasks(blob)
        except (ValidationError, ValueError) as exc:
            self._logger.error(
                "stored tasks could not be parsed; starting empty",
                extra={
                    "event": "load_failed",
                    "key": self._key,
                    "metadata": {"error": str(exc)[:200]},
                },
            )
            metrics.increment("persist_errors", {"phase": "load"})
            return []
        self._logger.info(
            "tasks loaded", extra={"event": "loaded", "key": self._key, "count": len(tasks)}
        )
        return tasks

    def save(self, tasks: Sequence[Task]) -> bool:
        """Write the full list. Returns False (after logging) when the write failed."""
        metrics = get_metrics()
        blob = serialize_tasks(tasks)
        try:
            self._store.set(self._key, blob, retention_s=self._retention_s)
        except BlobStoreError as exc:
            self._logger.error(
                "task write failed; keeping in-memory state only",
                extra={
                    "event": "save_failed",
                    "key": self._key,
                    "count": len(tasks),
                    "metadata": {"error": str(exc)[:200]},
                },
            )
            metrics.increment("persist_errors", {"phase": "save"})
            return False
        self._logger.debug(
            "tasks saved",
            extra={"event": "saved", "key": self._key, "count": len(tasks), "bytes": len(blob)},
        )
        metrics.increment("persist_writes")
        return True


__all__ = ["DEFAULT_BLOB_KEY", "DEFAULT_RETENTION_S", "PersistenceBridge"]
