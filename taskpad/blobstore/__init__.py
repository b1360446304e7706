from __future__ import annotations

from .file_adapter import CorruptDocumentError, FileBlobStore
from .interface import BlobStore, BlobStoreError, BlobTooLargeError, check_blob_size
from .redis_adapter import RedisBlobStore

__all__ = [
    "BlobStore",
    "BlobStoreError",
    "BlobTooLargeError",
    "CorruptDocumentError",
    "FileBlobStore",
    "RedisBlobStore",
    "check_blob_size",
]
