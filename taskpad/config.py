from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

BACKENDS = ("file", "redis")


@dataclass(slots=True)
class StoreConfig:
    backend: str
    redis_url: str
    key_prefix: str
    file_path: Path
    blob_key: str
    retention_days: int
    max_blob_bytes: int | None

    @property
    def retention_s(self) -> int:
        return self.retention_days * 24 * 60 * 60


def _read_int(raw: str | None, default: int) -> int:
    value = (raw or "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _read_backend(raw: str | None) -> str:
    value = (raw or "").strip().lower()
    return value if value in BACKENDS else "file"


def load_config(env: dict[str, str] | None = None) -> StoreConfig:
    e: dict[str, Any] = dict(os.environ)
    if env:
        e.update(env)
    file_raw = (e.get("TASKPAD_FILE") or "").strip()
    file_path = Path(file_raw) if file_raw else Path.home() / ".taskpad" / "store.json"
    max_bytes = _read_int(e.get("TASKPAD_MAX_BLOB_BYTES"), 0)
    return StoreConfig(
        backend=_read_backend(e.get("TASKPAD_BACKEND")),
        redis_url=e.get("REDIS_URL") or "redis://localhost:6379/0",
        key_prefix=(e.get("TASKPAD_KEY_PREFIX") or "").strip() or "taskpad",
        file_path=file_path.expanduser(),
        blob_key=(e.get("TASKPAD_BLOB_KEY") or "").strip() or "todo-tasks",
        retention_days=max(1, _read_int(e.get("TASKPAD_RETENTION_DAYS"), 365)),
        max_blob_bytes=max_bytes if max_bytes > 0 else None,
    )


__all__ = ["BACKENDS", "StoreConfig", "load_config"]
