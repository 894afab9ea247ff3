# src/better_notes/tasks/ranking.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from .task_models import Task


class PrioritySource(Protocol):
    def compute(self, task: Task, now: float | None = None) -> int: ...


@dataclass(slots=True, frozen=True)
class RankedTask:
    task: Task
    priority: int


@dataclass(slots=True, frozen=True)
class TaskBoard:
    """
    What a task list renders:
    - active: highest current priority first (ties keep input order)
    - completed: most recently completed first
    """

    active: tuple[RankedTask, ...]
    completed: tuple[RankedTask, ...]

    def top(self) -> RankedTask | None:
        return self.active[0] if self.active else None


def rank_tasks(tasks: Iterable[Task], engine: PrioritySource, now: float) -> TaskBoard:
    """Build a TaskBoard. The input collection is copied, never reordered."""
    active: list[RankedTask] = []
    completed: list[RankedTask] = []

    for task in tasks:
        ranked = RankedTask(task=task, priority=engine.compute(task, now))
        if task.completed:
            completed.append(ranked)
        else:
            active.append(ranked)

    active.sort(key=lambda r: r.priority, reverse=True)
    completed.sort(key=lambda r: r.task.completed_at or 0.0, reverse=True)

    return TaskBoard(active=tuple(active), completed=tuple(completed))
