from __future__ import annotations

from taskpad.blobstore.file_adapter import FileBlobStore
from taskpad.blobstore.interface import BlobStore
from taskpad.blobstore.redis_adapter import RedisBlobStore
from taskpad.config import StoreConfig, load_config
from taskpad.models.ids import IdGenerator
from taskpad.observability import get_json_logger
from taskpad.store.bridge import PersistenceBridge
from taskpad.store.task_store import TaskStore


def build_blob_store(cfg: StoreConfig) -> BlobStore:
    logger = get_json_logger("taskpad")
    if cfg.backend == "redis":
        logger.info(
            "blob store selected",
            extra={"event": "backend_selected", "metadata": {"backend": "redis"}},
        )
        return RedisBlobStore(
            cfg.redis_url, key_prefix=cfg.key_prefix, max_bytes=cfg.max_blob_bytes
        )
    logger.info(
        "blob store selected",
        extra={
            "event": "backend_selected",
            "metadata": {"backend": "file", "path": str(cfg.file_path)},
        },
    )
    return FileBlobStore(cfg.file_path, max_bytes=cfg.max_blob_bytes)


def build_store(
    cfg: StoreConfig | None = None,
    *,
    blob_store: BlobStore | None = None,
    id_factory: IdGenerator | None = None,
) -> TaskStore:
    """Wire config -> blob store -> bridge -> TaskStore and load persisted tasks.

    The returned store is initialized and ready to hand to the UI layer.
    """
    cfg = cfg or load_config()
    bridge = PersistenceBridge(
        blob_store or build_blob_store(cfg), key=cfg.blob_key, retention_s=cfg.retention_s
    )
    store = TaskStore(bridge, id_factory=id_factory)
    store.init()
    return store


__all__ = ["build_blob_store", "build_store"]
