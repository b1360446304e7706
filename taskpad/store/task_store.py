from __future__ import annotations

import datetime
from collections.abc import Callable

from taskpad.models.ids import IdGenerator, MonotonicIdGenerator
from taskpad.models.task import EditSession, Task, TaskStats, compute_stats, normalize_text
from taskpad.observability import get_json_logger, get_metrics

from .bridge import PersistenceBridge


class StoreNotInitializedError(RuntimeError):
    pass


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def _same_id(a: int | str, b: object) -> bool:
    # 1, "1" and True are three different ids
    return type(a) is type(b) and a == b


class TaskStore:
    """Owns the ordered task list and the single edit session.

    Every committed mutation (add, toggle, commit_edit, delete,
    clear_completed) hands a full snapshot of the list to the bridge.
    Invalid input and unknown ids are no-ops, never errors:

    - blank text on add/commit_edit is rejected silently
    - ids that no longer exist (stale UI references) are ignored

    The store must be initialized with `init()` (one blob read) before any
    operation is accepted.
    """

    def __init__(
        self,
        bridge: PersistenceBridge,
        *,
        id_factory: IdGenerator | None = None,
        clock: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        self._bridge = bridge
        self._next_id: IdGenerator = id_factory or MonotonicIdGenerator()
        self._clock = clock or _utc_now
        self._tasks: list[Task] = []
        self._session: EditSession | None = None
        self._initialized = False
        self._logger = get_json_logger("taskpad.store")

    # ----------------------------
    # Lifecycle
    # ----------------------------
    def init(self) -> None:
        if self._initialized:
            self._logger.debug("store already initialized", extra={"event": "store_init"})
            return
        self._tasks = self._bridge.load()
        self._next_id.observe(t.id for t in self._tasks)
        self._initialized = True
        self._logger.info(
            "store ready", extra={"event": "store_init", "count": len(self._tasks)}
        )

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ----------------------------
    # Queries
    # ----------------------------
    def get_all(self) -> list[Task]:
        self._require_init()
        return [t.model_copy() for t in self._tasks]

    def get(self, task_id: int | str) -> Task | None:
        self._require_init()
        task = self._find(task_id)
        return task.model_copy() if task is not None else None

    def stats(self) -> TaskStats:
        self._require_init()
        return compute_stats(self._tasks)

    @property
    def edit_session(self) -> EditSession | None:
        if self._session is None:
            return None
        return EditSession(target_id=self._session.target_id, draft_text=self._session.draft_text)

    def is_editing(self, task_id: int | str | None = None) -> bool:
        if self._session is None:
            return False
        return task_id is None or _same_id(self._session.target_id, task_id)

    # ----------------------------
    # Mutations
    # ----------------------------
    def add(self, raw_text: str) -> Task | None:
        self._require_init()
        text = normalize_text(raw_text)
        if not text:
            return None
        task = Task(id=self._next_id(), text=text, completed=False, created_at=self._clock())
        self._tasks.append(task)
        self._logger.info("task added", extra={"event": "task_added", "task_id": task.id})
        self._persist("add")
        return task.model_copy()

    def toggle(self, task_id: int | str) -> Task | None:
        self._require_init()
        task = self._find(task_id)
        if task is None:
            return None
        task.completed = not task.completed
        self._logger.info(
            "task toggled",
            extra={
                "event": "task_toggled",
                "task_id": task.id,
                "metadata": {"completed": task.completed},
            },
        )
        self._persist("toggle")
        return task.model_copy()

    def delete(self, task_id: int | str) -> bool:
        self._require_init()
        index = self._index_of(task_id)
        if index is None:
            return False
        removed = self._tasks.pop(index)
        if self._session is not None and _same_id(self._session.target_id, removed.id):
            self._session = None
        self._logger.info("task deleted", extra={"event": "task_deleted", "task_id": removed.id})
        self._persist("delete")
        return True

    def clear_completed(self) -> int:
        self._require_init()
        survivors = [t for t in self._tasks if not t.completed]
        removed = len(self._tasks) - len(survivors)
        if removed == 0:
            return 0
        self._tasks = survivors
        if self._session is not None and self._find(self._session.target_id) is None:
            self._session = None
        self._logger.info(
            "completed tasks cleared", extra={"event": "completed_cleared", "count": removed}
        )
        self._persist("clear_completed")
        return removed

    # ----------------------------
    # Edit session
    # ----------------------------
    def begin_edit(self, task_id: int | str) -> EditSession | None:
        self._require_init()
        task = self._find(task_id)
        if task is None:
            return None
        # Starting a new edit drops any unsaved draft of the previous one
        self._session = EditSession(target_id=task.id, draft_text=task.text)
        self._logger.debug("edit started", extra={"event": "edit_begin", "task_id": task.id})
        return self.edit_session

    def update_draft(self, text: str) -> None:
        if self._session is None:
            return
        self._session.draft_text = text

    def commit_edit(self) -> Task | None:
        self._require_init()
        session = self._session
        if session is None:
            return None
        self._session = None
        text = normalize_text(session.draft_text)
        if not text:
            self._logger.debug(
                "blank rename rejected",
                extra={"event": "edit_rejected", "task_id": session.target_id},
            )
            return None
        task = self._find(session.target_id)
        if task is None:
            return None
        task.text = text
        self._logger.info("task renamed", extra={"event": "task_renamed", "task_id": task.id})
        self._persist("rename")
        return task.model_copy()

    def cancel_edit(self) -> None:
        self._session = None

    # ----------------------------
    # Internals
    # ----------------------------
    def _require_init(self) -> None:
        if not self._initialized:
            raise StoreNotInitializedError("TaskStore.init() must be called before use")

    def _find(self, task_id: int | str) -> Task | None:
        for task in self._tasks:
            if _same_id(task.id, task_id):
                return task
        return None

    def _index_of(self, task_id: int | str) -> int | None:
        for i, task in enumerate(self._tasks):
            if _same_id(task.id, task_id):
                return i
        return None

    def _persist(self, op: str) -> None:
        get_metrics().increment("mutations", {"op": op})
        self._bridge.save([t.model_copy() for t in self._tasks])


__all__ = ["StoreNotInitializedError", "TaskStore"]
