from __future__ import annotations

from collections.abc import Callable
from typing import Any

from taskpad.models.task import Task
from taskpad.observability import get_json_logger, get_metrics
from taskpad.store.task_store import TaskStore

# Plain callables keyed by the command names the UI layer sends
Handler = Callable[[TaskStore, dict[str, Any]], dict[str, Any]]


def _serialize_task(task: Task) -> dict[str, Any]:
    return task.model_dump(mode="json", by_alias=True)


def _require_str(args: dict[str, Any], name: str) -> str:
    if name not in args:
        raise ValueError(f"{name} is required")
    value = args[name]
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    return value


def _require_id(args: dict[str, Any]) -> int | str:
    if "id" not in args:
        raise ValueError("id is required")
    value = args["id"]
    if isinstance(value, bool) or not isinstance(value, int | str):
        raise ValueError("id must be an int or a string")
    return value


def _add(store: TaskStore, args: dict[str, Any]) -> dict[str, Any]:
    t = store.add(_require_str(args, "text"))
    return {"task": _serialize_task(t) if t is not None else None}


def _toggle(store: TaskStore, args: dict[str, Any]) -> dict[str, Any]:
    t = store.toggle(_require_id(args))
    return {"task": _serialize_task(t) if t is not None else None}


def _begin_edit(store: TaskStore, args: dict[str, Any]) -> dict[str, Any]:
    store.begin_edit(_require_id(args))
    return _editing(store, args)


def _update_draft(store: TaskStore, args: dict[str, Any]) -> dict[str, Any]:
    store.update_draft(_require_str(args, "text"))
    return _editing(store, args)


def _commit_edit(store: TaskStore, args: dict[str, Any]) -> dict[str, Any]:
    t = store.commit_edit()
    return {"task": _serialize_task(t) if t is not None else None}


def _cancel_edit(store: TaskStore, args: dict[str, Any]) -> dict[str, Any]:
    store.cancel_edit()
    return {"editing": None}


def _delete(store: TaskStore, args: dict[str, Any]) -> dict[str, Any]:
    return {"ok": store.delete(_require_id(args))}


def _clear_completed(store: TaskStore, args: dict[str, Any]) -> dict[str, Any]:
    return {"removed": store.clear_completed()}


def _stats(store: TaskStore, args: dict[str, Any]) -> dict[str, Any]:
    return {"stats": store.stats().model_dump()}


def _get_all(store: TaskStore, args: dict[str, Any]) -> dict[str, Any]:
    return {"tasks": [_serialize_task(t) for t in store.get_all()]}


def _editing(store: TaskStore, args: dict[str, Any]) -> dict[str, Any]:
    session = store.edit_session
    if session is None:
        return {"editing": None}
    return {"editing": {"id": session.target_id, "draft": session.draft_text}}


COMMANDS: dict[str, Handler] = {
    "add": _add,
    "toggle": _toggle,
    "beginEdit": _begin_edit,
    "updateDraft": _update_draft,
    "commitEdit": _commit_edit,
    "cancelEdit": _cancel_edit,
    "delete": _delete,
    "clearCompleted": _clear_completed,
    "stats": _stats,
    "getAll": _get_all,
}


def run_command(store: TaskStore, name: str, **args: Any) -> dict[str, Any]:
    """Run one UI command against the store and return a JSON-safe result.

    Unknown command names and wrongly typed arguments raise ValueError; blank
    text and unknown ids are ordinary no-ops reported through the result.
    """
    handler = COMMANDS.get(name)
    if handler is None:
        raise ValueError(f"unknown command: {name}")
    get_json_logger("taskpad.commands").debug(
        "command", extra={"event": "command", "command": name}
    )
    get_metrics().increment("commands", {"command": name})
    return handler(store, args)


__all__ = ["COMMANDS", "run_command"]
