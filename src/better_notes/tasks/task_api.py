# src/better_notes/tasks/task_api.py

from __future__ import annotations

import logging
import math
import time

from ..core.state import AppState
from ..core.store import AddTask, CompleteTask, ReopenTask
from .ranking import TaskBoard, rank_tasks
from .task_models import MAX_PRIORITY, MIN_PRIORITY, Task, new_task_id

logger = logging.getLogger(__name__)

DEFAULT_START_PRIORITY = 50
DEFAULT_END_PRIORITY = 80
DEFAULT_ESCALATION_DAYS = 14.0


def _check_priority(name: str, value: int) -> None:
    if not MIN_PRIORITY <= value <= MAX_PRIORITY:
        raise ValueError(f"{name} must be in [{MIN_PRIORITY}, {MAX_PRIORITY}], got {value}")


def create_task(
    state: AppState,
    *,
    title: str,
    start_priority: int = DEFAULT_START_PRIORITY,
    end_priority: int | None = None,
    escalation_days: float | None = None,
    now_ts: float | None = None,
) -> Task:
    """
    Validate a task form and add the task to the store.

    Raises ValueError on invalid input; nothing is dispatched in that case.
    """
    title = (title or "").strip()
    if not title:
        raise ValueError("title is required")

    _check_priority("start_priority", start_priority)

    if (end_priority is None) != (escalation_days is None):
        raise ValueError("end_priority and escalation_days must be given together")

    if end_priority is not None and escalation_days is not None:
        _check_priority("end_priority", end_priority)
        if end_priority < start_priority:
            raise ValueError("end_priority must be >= start_priority")
        if not math.isfinite(escalation_days) or escalation_days <= 0:
            raise ValueError("escalation_days must be a positive number")

    task = Task(
        id=new_task_id(),
        title=title,
        start_priority=int(start_priority),
        end_priority=int(end_priority) if end_priority is not None else None,
        escalation_days=float(escalation_days) if escalation_days is not None else None,
        created_at=time.time() if now_ts is None else float(now_ts),
    )
    state.store.dispatch(AddTask(task=task))
    logger.info(
        "Task added id=%s start=%s end=%s days=%s",
        task.id,
        task.start_priority,
        task.end_priority,
        task.escalation_days,
    )
    return task


def resolve_task_id(state: AppState, prefix: str) -> str | None:
    """Accept a full id or a unique prefix of one (console users type short ids)."""
    prefix = (prefix or "").strip()
    if not prefix:
        return None
    matches = [t.id for t in state.store.snapshot.tasks if t.id.startswith(prefix)]
    return matches[0] if len(matches) == 1 else None


def complete_task(state: AppState, task_id: str, *, now_ts: float | None = None) -> bool:
    before = state.store.snapshot
    after = state.store.dispatch(CompleteTask(task_id=task_id, at=time.time() if now_ts is None else now_ts))
    if after is before:
        return False
    logger.info("Task %s -> completed", task_id)
    return True


def reopen_task(state: AppState, task_id: str) -> bool:
    before = state.store.snapshot
    after = state.store.dispatch(ReopenTask(task_id=task_id))
    if after is before:
        return False
    logger.info("Task %s -> reopened", task_id)
    return True


def current_board(state: AppState, *, now_ts: float | None = None) -> TaskBoard:
    now = time.time() if now_ts is None else now_ts
    return rank_tasks(state.store.snapshot.tasks, state.priority_engine, now)


def handle_app_resume(state: AppState) -> None:
    """
    Foreground hook: wall-clock time may have jumped while suspended, so cached
    priorities cannot be trusted even if they are younger than the TTL.
    """
    state.priority_engine.invalidate_cache()
    logger.info("App resumed; priority cache invalidated")
