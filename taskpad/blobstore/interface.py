from __future__ import annotations

from typing import Protocol


class BlobStoreError(Exception):
    """A backend could not read or write a blob."""


class BlobTooLargeError(BlobStoreError):
    def __init__(self, key: str, size: int, limit: int) -> None:
        super().__init__(f"blob for {key!r} is {size} bytes, limit is {limit}")
        self.key = key
        self.size = size
        self.limit = limit


class BlobStore(Protocol):
    """Minimal key/value blob storage.

    Values are opaque strings. Backends translate their native failures into
    BlobStoreError so callers only handle one exception family.
    """

    def get(self, key: str) -> str | None:
        """Return the stored value, or None when absent or expired."""

    def set(self, key: str, value: str, *, retention_s: int | None = None) -> None:
        """Store value under key; it expires after retention_s seconds when given."""


def check_blob_size(key: str, value: str, max_bytes: int | None) -> int:
    """Return the UTF-8 size of value, raising BlobTooLargeError past max_bytes."""
    size = len(value.encode("utf-8"))
    if max_bytes is not None and size > max_bytes:
        raise BlobTooLargeError(key, size, max_bytes)
    return size


__all__ = ["BlobStore", "BlobStoreError", "BlobTooLargeError", "check_blob_size"]
