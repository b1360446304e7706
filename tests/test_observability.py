from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable, Generator
from typing import Any

import pytest

from taskpad.observability import (
    ConsoleLogFormatter,
    JsonLogFormatter,
    Metrics,
    get_json_logger,
)
from taskpad.store.bridge import PersistenceBridge
from tests.helpers.blobstore import InMemoryBlobStore


def _parse_json_lines(output: str) -> list[dict[str, Any]]:
    return [json.loads(line) for line in output.strip().splitlines() if line.strip()]


def _drop_handlers(logger: logging.Logger) -> None:
    for h in list(logger.handlers):
        logger.removeHandler(h)


@pytest.fixture()
def fresh_logger() -> Generator[Callable[[str], logging.Logger], None, None]:
    """Build loggers bound to the current (captured) stdout; unbind them afterwards."""
    created: list[logging.Logger] = []

    def _make(name: str) -> logging.Logger:
        logger = logging.getLogger(name)
        _drop_handlers(logger)
        created.append(logger)
        return get_json_logger(name)

    yield _make
    for logger in created:
        _drop_handlers(logger)


def test_json_logger_formats_extras_and_redacts(
    capsys: Any, monkeypatch: pytest.MonkeyPatch, fresh_logger: Callable[[str], logging.Logger]
) -> None:
    monkeypatch.setenv("LOG_FORMAT", "json")
    logger = fresh_logger("obs-test")
    logger.setLevel(logging.INFO)
    logger.info(
        "hello",
        extra={
            "event": "task_added",
            "task_id": 3,
            "metadata": {"redis_url": "redis://:pw@host", "safe": "ok"},
        },
    )

    lines = _parse_json_lines(capsys.readouterr().out)
    assert len(lines) == 1
    rec = lines[0]
    assert rec["msg"] == "hello"
    assert rec["level"] == "info"
    assert rec["event"] == "task_added"
    assert rec["task_id"] == 3
    assert rec["metadata"] == {"redis_url": "[REDACTED]", "safe": "ok"}


def test_json_formatter_attaches_exception_fields() -> None:
    try:
        raise ValueError("bad blob")
    except ValueError:
        record = logging.getLogger("x").makeRecord(
            "x", logging.ERROR, __file__, 1, "failed", (), exc_info=sys.exc_info()
        )
    rec = json.loads(JsonLogFormatter().format(record))
    assert rec["err_type"] == "ValueError"
    assert rec["err"] == "bad blob"
    assert "Traceback" in rec["stack"]


def test_console_formatter_is_single_readable_line() -> None:
    record = logging.getLogger("taskpad.store").makeRecord(
        "taskpad.store", logging.INFO, __file__, 1, "task added", (), None
    )
    record.event = "task_added"
    record.task_id = 42
    line = ConsoleLogFormatter().format(record)
    assert "INFO taskpad.store task_added task=42 - task added" in line


def test_module_level_overrides(
    monkeypatch: pytest.MonkeyPatch, fresh_logger: Callable[[str], logging.Logger]
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("LOG_MODULE_LEVELS", "obs-mod.store=DEBUG")
    assert fresh_logger("obs-mod.store.bridge").level == logging.DEBUG
    assert fresh_logger("obs-mod.other").level == logging.WARNING


def test_load_failure_is_logged(
    capsys: Any, monkeypatch: pytest.MonkeyPatch, fresh_logger: Callable[[str], logging.Logger]
) -> None:
    monkeypatch.setenv("LOG_FORMAT", "json")
    fresh_logger("taskpad.store.bridge")
    PersistenceBridge(InMemoryBlobStore({"todo-tasks": "{oops"})).load()

    lines = _parse_json_lines(capsys.readouterr().out)
    failed = [rec for rec in lines if rec.get("event") == "load_failed"]
    assert len(failed) == 1
    assert failed[0]["level"] == "error"
    assert failed[0]["key"] == "todo-tasks"


def test_metrics_counters_increment_and_snapshot() -> None:
    metrics = Metrics()
    metrics.increment("mutations", {"op": "add"}, 2)
    metrics.increment("mutations", {"op": "add"})

    snap = metrics.snapshot()
    entry = next(e for e in snap if e["name"] == "mutations" and e["labels"].get("op") == "add")
    assert entry["value"] == 3
    assert metrics.value("mutations", {"op": "toggle"}) == 0
