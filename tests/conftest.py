from __future__ import annotations

import datetime
import os
import time
from collections.abc import Callable, Generator

import pytest

from taskpad.models.ids import CounterIdGenerator
from taskpad.observability import reset_metrics
from taskpad.store.bridge import PersistenceBridge
from taskpad.store.task_store import TaskStore
from tests.helpers.blobstore import InMemoryBlobStore


def _wait_until(timeout_s: float, pause_s: float, check: Callable[[], bool]) -> bool:
    deadline = time.time() + timeout_s
    while time.time() < deadline:
        if check():
            return True
        time.sleep(pause_s)
    return False


def _redis_ping(url: str) -> bool:
    try:
        import redis

        r = redis.Redis.from_url(url)
        return bool(r.ping())
    except Exception:
        return False


@pytest.fixture(scope="session")
def redis_url() -> str:
    """Provide a reachable Redis URL or skip.

    Priority:
    1) REDIS_URL env if reachable
    2) localhost:6379
    """
    env_url = os.getenv("REDIS_URL")
    if env_url and _wait_until(5.0, 0.2, lambda: _redis_ping(env_url)):
        return env_url
    local_url = "redis://localhost:6379/0"
    if _wait_until(1.0, 0.2, lambda: _redis_ping(local_url)):
        return local_url
    pytest.skip("Redis not available; set REDIS_URL or start local Redis")


@pytest.fixture(autouse=True)
def _fresh_metrics() -> Generator[None, None, None]:
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture()
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture()
def bridge(blob_store: InMemoryBlobStore) -> PersistenceBridge:
    return PersistenceBridge(blob_store)


@pytest.fixture()
def fixed_clock() -> Callable[[], datetime.datetime]:
    start = datetime.datetime(2024, 5, 1, 9, 30, tzinfo=datetime.UTC)
    ticks = {"n": 0}

    def _now() -> datetime.datetime:
        ticks["n"] += 1
        return start + datetime.timedelta(seconds=ticks["n"])

    return _now


@pytest.fixture()
def store(
    bridge: PersistenceBridge, fixed_clock: Callable[[], datetime.datetime]
) -> TaskStore:
    s = TaskStore(bridge, id_factory=CounterIdGenerator(), clock=fixed_clock)
    s.init()
    return s
