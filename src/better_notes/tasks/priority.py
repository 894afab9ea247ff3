# src/better_notes/tasks/priority.py

from __future__ import annotations

"""
Priority escalation.

A task's current priority is a linear interpolation between start_priority and
end_priority over escalation_days, measured from created_at:

    elapsed >= escalation_days  -> end_priority
    otherwise                   -> round(start + (end - start) * elapsed / escalation_days)

Completed and static tasks keep their start_priority.

PriorityEngine adds an optional wall-clock TTL cache on top of the pure function.
The cache may serve values up to `ttl_seconds` old; callers must invalidate it
when the host resumes from suspension.
"""

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass

from .task_models import Task

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400.0
DEFAULT_CACHE_TTL_SECONDS = 60.0

Clock = Callable[[], float]


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; 50.5 must become 51.
    return int(math.floor(value + 0.5))


def elapsed_days(task: Task, now: float) -> float:
    """Days since creation, never negative (clock skew / future created_at counts as zero)."""
    return max(0.0, (float(now) - float(task.created_at)) / SECONDS_PER_DAY)


def compute_current_priority(task: Task, now: float) -> int:
    """
    Current effective priority of `task` at epoch time `now`.

    No validation is done here. Inverted bounds (end < start) de-escalate,
    and a non-positive escalation window counts as already elapsed. A NaN
    window behaves like a static task.
    """
    if task.completed:
        return task.start_priority

    if task.end_priority is None or task.escalation_days is None:
        return task.start_priority

    window = float(task.escalation_days)
    if math.isnan(window):
        return task.start_priority
    if window <= 0:
        return task.end_priority

    elapsed = elapsed_days(task, now)
    if elapsed >= window:
        return task.end_priority

    progress = elapsed / window
    diff = task.end_priority - task.start_priority
    return _round_half_up(task.start_priority + diff * progress)


def escalation_progress(task: Task, now: float) -> float | None:
    """Fraction of the escalation window already elapsed, capped at 1.0 (None for static tasks)."""
    if task.end_priority is None or task.escalation_days is None:
        return None

    window = float(task.escalation_days)
    if math.isnan(window):
        return None
    if window <= 0:
        return 1.0
    return min(elapsed_days(task, now) / window, 1.0)


@dataclass(slots=True, frozen=True)
class _CacheEntry:
    priority: int
    computed_at: float


class PriorityCache:
    """
    Task id -> (priority, computed_at) with a wall-clock TTL.

    Expired entries are evicted lazily on lookup.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS, clock: Clock = time.time) -> None:
        self._ttl = max(0.0, float(ttl_seconds))
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, task_id: str) -> int | None:
        entry = self._entries.get(task_id)
        if entry is None:
            return None

        age = self._clock() - entry.computed_at
        # A negative age means the wall clock went backwards; treat as stale.
        if age < 0 or age >= self._ttl:
            self._entries.pop(task_id, None)
            return None
        return entry.priority

    def put(self, task_id: str, priority: int) -> None:
        self._entries[task_id] = _CacheEntry(priority=int(priority), computed_at=self._clock())

    def invalidate(self, task_id: str) -> None:
        self._entries.pop(task_id, None)

    def invalidate_all(self) -> None:
        n = len(self._entries)
        self._entries.clear()
        logger.debug("Priority cache cleared (%d entries)", n)


class PriorityEngine:
    """
    Maps (task, now) to an integer priority, optionally memoized.

    The engine only reads tasks; it never reorders or mutates a collection.
    """

    def __init__(self, cache: PriorityCache | None = None) -> None:
        self._cache = cache

    @classmethod
    def with_ttl(cls, ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS, clock: Clock = time.time) -> PriorityEngine:
        return cls(cache=PriorityCache(ttl_seconds=ttl_seconds, clock=clock))

    @property
    def cache(self) -> PriorityCache | None:
        return self._cache

    def compute(self, task: Task, now: float | None = None) -> int:
        if now is None:
            now = time.time()

        if self._cache is None:
            return compute_current_priority(task, now)

        cached = self._cache.get(task.id)
        if cached is not None:
            return cached

        value = compute_current_priority(task, now)
        self._cache.put(task.id, value)
        return value

    def invalidate_cache(self) -> None:
        if self._cache is not None:
            self._cache.invalidate_all()

    def invalidate_task(self, task_id: str) -> None:
        if self._cache is not None:
            self._cache.invalidate(task_id)
