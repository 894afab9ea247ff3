# src/better_notes/storage/gateway.py

from __future__ import annotations

"""
Persistence gateway.

Tasks and notes are stored as JSON arrays of camelCase records under
namespaced keys of a key-value store. There is no schema versioning.

Failure policy: every load/save catches and logs. Loads fall back to [],
saves drop the write. Nothing is surfaced to the caller.
"""

import json
import logging
import math
import time
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

from ..core.ports import KeyValueStore
from ..notes.note_models import Note
from ..tasks.priority import SECONDS_PER_DAY
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

TASKS_STORAGE_KEY = "@better_notes_tasks"
NOTES_STORAGE_KEY = "@better_notes_notes"

DEFAULT_COMPLETED_RETENTION_DAYS = 7


# ---- timestamp codec ----

def ts_to_iso(ts: float) -> str:
    dt = datetime.fromtimestamp(float(ts), UTC)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iso_to_ts(raw: str) -> float:
    dt = datetime.fromisoformat(raw.strip())
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.timestamp()


def _opt_ts(raw: Any) -> float | None:
    if raw is None or raw == "":
        return None
    return iso_to_ts(str(raw))


# ---- record codec ----

def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "startPriority": task.start_priority,
        "endPriority": task.end_priority,
        "escalationDays": task.escalation_days,
        "createdAt": ts_to_iso(task.created_at),
        "completed": task.completed,
        "completedAt": ts_to_iso(task.completed_at) if task.completed_at is not None else None,
    }


def record_to_task(rec: dict[str, Any]) -> Task:
    end_priority = rec.get("endPriority")
    escalation_days = rec.get("escalationDays")

    if escalation_days is not None and not math.isfinite(float(escalation_days)):
        logger.warning("Task %s has non-finite escalationDays=%r; treating as static", rec.get("id"), escalation_days)
        end_priority = None
        escalation_days = None

    if (end_priority is None) != (escalation_days is None):
        logger.warning(
            "Task %s has endPriority=%r escalationDays=%r; treating as static",
            rec.get("id"),
            end_priority,
            escalation_days,
        )
        end_priority = None
        escalation_days = None

    completed = bool(rec.get("completed", False))

    return Task(
        id=str(rec["id"]),
        title=str(rec.get("title") or ""),
        start_priority=int(rec["startPriority"]),
        end_priority=int(end_priority) if end_priority is not None else None,
        escalation_days=float(escalation_days) if escalation_days is not None else None,
        created_at=iso_to_ts(str(rec["createdAt"])),
        completed=completed,
        completed_at=_opt_ts(rec.get("completedAt")) if completed else None,
    )


def note_to_record(note: Note) -> dict[str, Any]:
    return {
        "id": note.id,
        "title": note.title,
        "content": note.content,
        "createdAt": ts_to_iso(note.created_at),
        "updatedAt": ts_to_iso(note.updated_at),
    }


def record_to_note(rec: dict[str, Any]) -> Note:
    created_at = iso_to_ts(str(rec["createdAt"]))
    updated_raw = rec.get("updatedAt")
    return Note(
        id=str(rec["id"]),
        title=str(rec.get("title") or ""),
        content=str(rec.get("content") or ""),
        created_at=created_at,
        updated_at=iso_to_ts(str(updated_raw)) if updated_raw else created_at,
    )


def _decode_records(raw: str | None, decode: Callable[[dict[str, Any]], Any], what: str) -> list[Any]:
    if not raw:
        return []

    data = json.loads(raw)
    if not isinstance(data, list):
        logger.warning("Stored %s is not a JSON array; ignoring", what)
        return []

    out: list[Any] = []
    for rec in data:
        if not isinstance(rec, dict):
            logger.warning("Skipping non-object %s record: %r", what, rec)
            continue
        try:
            out.append(decode(rec))
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed %s record id=%r", what, rec.get("id"), exc_info=True)
    return out


def prune_completed(tasks: Iterable[Task], *, now: float, retention_days: int) -> list[Task]:
    """
    Drop tasks completed more than `retention_days` whole days ago.
    Tasks without completed_at are always kept.
    """
    kept: list[Task] = []
    for task in tasks:
        if not task.completed or task.completed_at is None:
            kept.append(task)
            continue
        days_since = int((now - task.completed_at) // SECONDS_PER_DAY)
        if days_since <= retention_days:
            kept.append(task)
    return kept


class StorageGateway:
    """
    load/save of task and note collections over a KeyValueStore.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        completed_retention_days: int = DEFAULT_COMPLETED_RETENTION_DAYS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._kv = kv
        self._retention_days = int(completed_retention_days)
        self._clock = clock

    def load_tasks(self) -> list[Task]:
        try:
            tasks = _decode_records(self._kv.get_item(TASKS_STORAGE_KEY), record_to_task, "task")
        except Exception:
            logger.exception("Error loading tasks")
            return []
        logger.info("Loaded %d tasks", len(tasks))
        return tasks

    def save_tasks(self, tasks: Iterable[Task]) -> None:
        try:
            all_tasks = list(tasks)
            kept = prune_completed(all_tasks, now=self._clock(), retention_days=self._retention_days)
            if len(kept) != len(all_tasks):
                logger.info("Pruned %d completed tasks before save", len(all_tasks) - len(kept))
            payload = json.dumps([task_to_record(t) for t in kept], ensure_ascii=False)
            self._kv.set_item(TASKS_STORAGE_KEY, payload)
        except Exception:
            logger.exception("Error saving tasks")

    def load_notes(self) -> list[Note]:
        try:
            notes = _decode_records(self._kv.get_item(NOTES_STORAGE_KEY), record_to_note, "note")
        except Exception:
            logger.exception("Error loading notes")
            return []
        logger.info("Loaded %d notes", len(notes))
        return notes

    def save_notes(self, notes: Iterable[Note]) -> None:
        try:
            payload = json.dumps([note_to_record(n) for n in notes], ensure_ascii=False)
            self._kv.set_item(NOTES_STORAGE_KEY, payload)
        except Exception:
            logger.exception("Error saving notes")
