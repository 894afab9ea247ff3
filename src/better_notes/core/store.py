# src/better_notes/core/store.py

from __future__ import annotations

"""
Application state container.

Every mutation is an explicit command. `apply_command(snapshot, command)` is pure and
returns a new immutable Snapshot (or the same object when nothing changed).
AppStore keeps the current snapshot, a bounded command log, and hands each
transition to an injectable PersistencePolicy, which alone decides when the
storage gateway is written.
"""

import logging
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import ClassVar, Protocol

from ..notes.note_models import Note
from ..tasks.task_models import Task
from .ports import PersistenceGateway

logger = logging.getLogger(__name__)


class ThemeMode(StrEnum):
    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def parse(cls, raw: str | None, default: ThemeMode | None = None) -> ThemeMode:
        fallback = default or cls.DARK
        if not raw:
            return fallback
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return fallback


@dataclass(slots=True, frozen=True)
class Snapshot:
    tasks: tuple[Task, ...] = ()
    notes: tuple[Note, ...] = ()
    theme_mode: ThemeMode = ThemeMode.DARK

    def find_task(self, task_id: str) -> Task | None:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def find_note(self, note_id: str) -> Note | None:
        for n in self.notes:
            if n.id == note_id:
                return n
        return None


# ---- commands ----

@dataclass(slots=True, frozen=True)
class Command:
    topic: ClassVar[str] = ""
    # Hydration commands load state from storage and must never be written back.
    hydrate: ClassVar[bool] = False


@dataclass(slots=True, frozen=True)
class LoadTasks(Command):
    topic: ClassVar[str] = "tasks"
    hydrate: ClassVar[bool] = True
    tasks: tuple[Task, ...] = ()


@dataclass(slots=True, frozen=True)
class AddTask(Command):
    topic: ClassVar[str] = "tasks"
    task: Task | None = None


@dataclass(slots=True, frozen=True)
class CompleteTask(Command):
    topic: ClassVar[str] = "tasks"
    task_id: str = ""
    at: float = 0.0


@dataclass(slots=True, frozen=True)
class ReopenTask(Command):
    topic: ClassVar[str] = "tasks"
    task_id: str = ""


@dataclass(slots=True, frozen=True)
class LoadNotes(Command):
    topic: ClassVar[str] = "notes"
    hydrate: ClassVar[bool] = True
    notes: tuple[Note, ...] = ()


@dataclass(slots=True, frozen=True)
class AddNote(Command):
    topic: ClassVar[str] = "notes"
    note: Note | None = None


@dataclass(slots=True, frozen=True)
class UpdateNote(Command):
    topic: ClassVar[str] = "notes"
    note: Note | None = None


@dataclass(slots=True, frozen=True)
class DeleteNote(Command):
    topic: ClassVar[str] = "notes"
    note_id: str = ""


@dataclass(slots=True, frozen=True)
class SetThemeMode(Command):
    topic: ClassVar[str] = "settings"
    mode: ThemeMode = ThemeMode.DARK


def _reduce_tasks(tasks: tuple[Task, ...], command: Command) -> tuple[Task, ...]:
    if isinstance(command, LoadTasks):
        return tuple(command.tasks)

    if isinstance(command, AddTask):
        task = command.task
        if task is None or any(t.id == task.id for t in tasks):
            return tasks
        return (*tasks, task)

    if isinstance(command, CompleteTask):
        for i, t in enumerate(tasks):
            if t.id == command.task_id:
                if t.completed:
                    return tasks
                done = replace(t, completed=True, completed_at=command.at)
                return (*tasks[:i], done, *tasks[i + 1 :])
        return tasks

    if isinstance(command, ReopenTask):
        for i, t in enumerate(tasks):
            if t.id == command.task_id:
                if not t.completed:
                    return tasks
                reopened = replace(t, completed=False, completed_at=None)
                return (*tasks[:i], reopened, *tasks[i + 1 :])
        return tasks

    return tasks


def _reduce_notes(notes: tuple[Note, ...], command: Command) -> tuple[Note, ...]:
    if isinstance(command, LoadNotes):
        return tuple(command.notes)

    if isinstance(command, AddNote):
        note = command.note
        if note is None or any(n.id == note.id for n in notes):
            return notes
        return (*notes, note)

    if isinstance(command, UpdateNote):
        note = command.note
        if note is None:
            return notes
        for i, n in enumerate(notes):
            if n.id == note.id:
                return (*notes[:i], note, *notes[i + 1 :])
        return notes

    if isinstance(command, DeleteNote):
        kept = tuple(n for n in notes if n.id != command.note_id)
        return notes if len(kept) == len(notes) else kept

    return notes


def apply_command(snapshot: Snapshot, command: Command) -> Snapshot:
    """
    Apply one command. Pure: never mutates `snapshot`.

    Unknown ids and no-op transitions return `snapshot` itself, so callers can
    detect "nothing changed" with an identity check.
    """
    if command.topic == "tasks":
        tasks = _reduce_tasks(snapshot.tasks, command)
        return snapshot if tasks is snapshot.tasks else replace(snapshot, tasks=tasks)

    if command.topic == "notes":
        notes = _reduce_notes(snapshot.notes, command)
        return snapshot if notes is snapshot.notes else replace(snapshot, notes=notes)

    if isinstance(command, SetThemeMode):
        if snapshot.theme_mode == command.mode:
            return snapshot
        return replace(snapshot, theme_mode=command.mode)

    logger.warning("Unhandled command %s", type(command).__name__)
    return snapshot


# ---- persistence policies ----

class PersistencePolicy(Protocol):
    def on_dispatch(self, command: Command, before: Snapshot, after: Snapshot) -> None: ...
    def flush(self, snapshot: Snapshot) -> None: ...


class FlushOnChange:
    """Write the touched collection after every non-hydration command that changed it."""

    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway

    def on_dispatch(self, command: Command, before: Snapshot, after: Snapshot) -> None:
        if command.hydrate:
            return
        if after.tasks is not before.tasks:
            self._gateway.save_tasks(after.tasks)
        if after.notes is not before.notes:
            self._gateway.save_notes(after.notes)

    def flush(self, snapshot: Snapshot) -> None:
        return


class DeferredFlush:
    """
    Mark collections dirty on change; write them only when flush() is called
    (refresher tick, shutdown).
    """

    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway
        self._lock = threading.Lock()
        self._dirty: set[str] = set()

    @property
    def dirty(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._dirty)

    def on_dispatch(self, command: Command, before: Snapshot, after: Snapshot) -> None:
        if command.hydrate:
            return
        with self._lock:
            if after.tasks is not before.tasks:
                self._dirty.add("tasks")
            if after.notes is not before.notes:
                self._dirty.add("notes")

    def flush(self, snapshot: Snapshot) -> None:
        with self._lock:
            dirty = set(self._dirty)
            self._dirty.clear()

        if "tasks" in dirty:
            self._gateway.save_tasks(snapshot.tasks)
        if "notes" in dirty:
            self._gateway.save_notes(snapshot.notes)
        if dirty:
            logger.debug("Deferred flush wrote %s", sorted(dirty))


# ---- store ----

Listener = Callable[[Command, Snapshot], None]


class AppStore:
    """
    Single owner of the application snapshot.

    Reads (`snapshot`) are lock-free: a snapshot swap is one reference assignment.
    Dispatch is serialized so the command log and the policy see transitions in order.
    """

    def __init__(
        self,
        snapshot: Snapshot | None = None,
        *,
        persistence: PersistencePolicy | None = None,
        log_limit: int = 500,
    ) -> None:
        self._snapshot = snapshot or Snapshot()
        self._persistence = persistence
        self._log: deque[Command] = deque(maxlen=max(1, int(log_limit)))
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def log(self) -> tuple[Command, ...]:
        with self._lock:
            return tuple(self._log)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, command: Command) -> Snapshot:
        with self._lock:
            before = self._snapshot
            after = apply_command(before, command)
            self._snapshot = after
            self._log.append(command)

            if self._persistence is not None:
                try:
                    self._persistence.on_dispatch(command, before, after)
                except Exception:
                    logger.exception("Persistence policy failed for %s", type(command).__name__)

        for listener in list(self._listeners):
            try:
                listener(command, after)
            except Exception:
                logger.exception("Store listener failed for %s", type(command).__name__)

        return after

    def flush(self) -> None:
        if self._persistence is None:
            return
        # same lock as dispatch: snapshot and dirty set are read together
        with self._lock:
            try:
                self._persistence.flush(self._snapshot)
            except Exception:
                logger.exception("Persistence flush failed")
