from __future__ import annotations

import os
from typing import Any

import redis

from .interface import BlobStore, BlobStoreError, check_blob_size


class RedisBlobStore(BlobStore):
    """Redis-backed blob store.

    - get: GET `{prefix}:{key}`
    - set: SET `{prefix}:{key}` with EX=retention_s when a retention is given
    """

    def __init__(
        self,
        redis_url: str | None = None,
        *,
        key_prefix: str = "taskpad",
        max_bytes: int | None = None,
        client: Any | None = None,
    ) -> None:
        url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        if client is not None:
            self._redis = client
        else:
            # decode_responses=True returns str so blobs never need decoding here
            self._redis = redis.Redis.from_url(url, decode_responses=True)
        self._prefix = key_prefix.rstrip(":")
        self._max_bytes = max_bytes

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def get(self, key: str) -> str | None:
        try:
            raw = self._redis.get(self._key(key))
        except redis.exceptions.RedisError as exc:
            raise BlobStoreError(f"redis GET failed for {key!r}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise BlobStoreError(f"redis value for {key!r} is not valid UTF-8: {exc}") from exc
        if raw is None:
            return None
        if isinstance(raw, bytes):
            try:
                return raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise BlobStoreError(f"redis value for {key!r} is not valid UTF-8: {exc}") from exc
        return str(raw)

    def set(self, key: str, value: str, *, retention_s: int | None = None) -> None:
        check_blob_size(key, value, self._max_bytes)
        try:
            if retention_s is not None:
                self._redis.set(self._key(key), value, ex=int(retention_s))
            else:
                self._redis.set(self._key(key), value)
        except redis.exceptions.RedisError as exc:
            raise BlobStoreError(f"redis SET failed for {key!r}: {exc}") from exc


__all__ = ["RedisBlobStore"]
