from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from typing import Protocol


class IdGenerator(Protocol):
    """Source of task ids injected into the TaskStore.

    Implementations must never return the same id twice within a session and
    must skip past any id passed to `observe`.
    """

    def __call__(self) -> int | str:
        """Return a fresh id."""

    def observe(self, ids: Iterable[int | str]) -> None:
        """Record ids that already exist (e.g. loaded from storage)."""


def _wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


class MonotonicIdGenerator:
    """Epoch-millisecond ids that stay strictly increasing.

    Two calls in the same millisecond (or after the clock stepped back) get
    `last + 1` instead of a repeated timestamp.
    """

    def __init__(self, clock_ms: Callable[[], int] | None = None) -> None:
        self._clock_ms = clock_ms or _wall_clock_ms
        self._last = 0

    def __call__(self) -> int:
        candidate = max(int(self._clock_ms()), self._last + 1)
        self._last = candidate
        return candidate

    def observe(self, ids: Iterable[int | str]) -> None:
        for value in ids:
            if isinstance(value, int) and value > self._last:
                self._last = value


class CounterIdGenerator:
    def __init__(self, start: int = 1) -> None:
        self._next = start

    def __call__(self) -> int:
        value = self._next
        self._next += 1
        return value

    def observe(self, ids: Iterable[int | str]) -> None:
        for value in ids:
            if isinstance(value, int) and value >= self._next:
                self._next = value + 1


__all__ = ["CounterIdGenerator", "IdGenerator", "MonotonicIdGenerator"]
