# tests/fakes.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from better_notes.notes.note_models import Note
from better_notes.tasks.task_models import Task


class ManualClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SequenceClock:
    """Returns the given timestamps in order, then keeps returning the last one."""

    def __init__(self, values: list[float]) -> None:
        self._values = list(values)
        self._i = 0

    def __call__(self) -> float:
        v = self._values[min(self._i, len(self._values) - 1)]
        self._i += 1
        return v


class MemoryKeyValueStore:
    """dict-backed KeyValueStore."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)


class FailingKeyValueStore(MemoryKeyValueStore):
    def get_item(self, key: str) -> str | None:
        raise OSError("disk on fire")

    def set_item(self, key: str, value: str) -> None:
        raise OSError("disk on fire")


@dataclass(slots=True)
class RecordingGateway:
    """PersistenceGateway that records every save."""

    saved_tasks: list[list[Task]] = field(default_factory=list)
    saved_notes: list[list[Note]] = field(default_factory=list)

    def load_tasks(self) -> list[Task]:
        return []

    def save_tasks(self, tasks: Iterable[Task]) -> None:
        self.saved_tasks.append(list(tasks))

    def load_notes(self) -> list[Note]:
        return []

    def save_notes(self, notes: Iterable[Note]) -> None:
        self.saved_notes.append(list(notes))
