from __future__ import annotations

import json
import os
import tempfile
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from taskpad.observability import get_json_logger

from .interface import BlobStore, BlobStoreError, check_blob_size


class CorruptDocumentError(BlobStoreError):
    pass


class FileBlobStore(BlobStore):
    """Blob store kept in a single local JSON document.

    Layout: `{"<key>": {"value": "<blob>", "expires_at": <epoch seconds> | null}}`.
    Expired entries read as absent and are dropped on the next write. A
    document that is not valid UTF-8 JSON fails reads and is replaced by the next
    write.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        max_bytes: int | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._path = Path(path).expanduser()
        self._max_bytes = max_bytes
        self._clock = clock or time.time
        self._logger = get_json_logger("taskpad.blobstore.file")

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict[str, Any]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise BlobStoreError(f"cannot read {self._path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise CorruptDocumentError(f"{self._path} is not valid UTF-8: {exc}") from exc
        if not raw.strip():
            return {}
        try:
            doc = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptDocumentError(f"{self._path} is not valid JSON: {exc}") from exc
        if not isinstance(doc, dict):
            raise CorruptDocumentError(f"{self._path} does not hold a JSON object")
        return doc

    def _is_live(self, entry: Any, now: float) -> bool:
        if not isinstance(entry, dict) or not isinstance(entry.get("value"), str):
            return False
        expires_at = entry.get("expires_at")
        if expires_at is None:
            return True
        # Entries with a malformed expiry are treated as expired
        if isinstance(expires_at, bool) or not isinstance(expires_at, int | float):
            return False
        return expires_at > now

    def get(self, key: str) -> str | None:
        entry = self._read_document().get(key)
        if not self._is_live(entry, self._clock()):
            return None
        return str(entry["value"])

    def set(self, key: str, value: str, *, retention_s: int | None = None) -> None:
        check_blob_size(key, value, self._max_bytes)
        now = self._clock()
        try:
            current = self._read_document()
        except CorruptDocumentError:
            self._logger.warning(
                "replacing unreadable store file",
                extra={
                    "event": "store_file_reset",
                    "key": key,
                    "metadata": {"path": str(self._path)},
                },
            )
            current = {}
        doc = {k: v for k, v in current.items() if self._is_live(v, now)}
        doc[key] = {
            "value": value,
            "expires_at": now + retention_s if retention_s is not None else None,
        }
        self._write_document(doc)

    def _write_document(self, doc: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(doc, f, ensure_ascii=False)
                os.replace(tmp_name, self._path)
            except BaseException:
                # Leave no partial temp file behind
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise BlobStoreError(f"cannot write {self._path}: {exc}") from exc


__all__ = ["CorruptDocumentError", "FileBlobStore"]
