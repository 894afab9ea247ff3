# src/better_notes/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass

MIN_PRIORITY = 0
MAX_PRIORITY = 100


def new_task_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True, frozen=True)
class Task:
    """
    A task whose priority may escalate over time.

    Notes:
    - end_priority and escalation_days are both set (escalating task) or both None (static task).
    - created_at / completed_at are epoch seconds (UTC).
    - Tasks are never mutated in place; state transitions build a new Task via dataclasses.replace.
    """

    id: str
    title: str
    start_priority: int
    created_at: float

    end_priority: int | None = None
    escalation_days: float | None = None

    completed: bool = False
    completed_at: float | None = None

    @property
    def is_static(self) -> bool:
        return self.end_priority is None or self.escalation_days is None
