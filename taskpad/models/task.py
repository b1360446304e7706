from __future__ import annotations

import datetime
from collections.abc import Iterable
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, TypeAdapter, field_validator

TaskId = StrictInt | StrictStr


def normalize_text(raw: str) -> str:
    return raw.strip()


class Task(BaseModel):
    """One work item in the list.

    Serialized with the field names of the stored blob (`createdAt`), so the
    same model reads blobs written by older browser-based versions of the app.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: TaskId
    text: str
    completed: bool = False
    created_at: datetime.datetime = Field(
        default_factory=lambda: datetime.datetime.now(datetime.UTC), alias="createdAt"
    )

    @field_validator("text")
    @classmethod
    def _text_trimmed_not_blank(cls, value: str) -> str:
        text = normalize_text(value)
        if not text:
            raise ValueError("text must be non-empty")
        return text


class TaskStats(BaseModel):
    total: int
    pending: int
    completed: int


@dataclass(slots=True)
class EditSession:
    """An in-progress rename that has not been committed yet."""

    target_id: int | str
    draft_text: str


_COLLECTION = TypeAdapter(list[Task])


def serialize_tasks(tasks: Iterable[Task]) -> str:
    return _COLLECTION.dump_json(list(tasks), by_alias=True).decode("utf-8")


def deserialize_tasks(blob: str | bytes) -> list[Task]:
    """Parse a stored blob back into an ordered task list.

    Raises pydantic.ValidationError for malformed JSON or records, and
    ValueError when two records share an id.
    """
    tasks = _COLLECTION.validate_json(blob)
    seen: set[int | str] = set()
    for task in tasks:
        if task.id in seen:
            raise ValueError(f"duplicate task id: {task.id!r}")
        seen.add(task.id)
    return tasks


def compute_stats(tasks: Iterable[Task]) -> TaskStats:
    total = 0
    completed = 0
    for task in tasks:
        total += 1
        if task.completed:
            completed += 1
    return TaskStats(total=total, pending=total - completed, completed=completed)


__all__ = [
    "EditSession",
    "Task",
    "TaskId",
    "TaskStats",
    "compute_stats",
    "deserialize_tasks",
    "normalize_text",
    "serialize_tasks",
]
