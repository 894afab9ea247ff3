# src/better_notes/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage swappable and lets tests use in-memory fakes.
"""

from collections.abc import Iterable
from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Platform-style string storage (SQLite in production, a dict in tests)."""

    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class PersistenceGateway(Protocol):
    """
    Load/save of whole entity collections.

    Implementations own format and durability, and must not raise:
    failures are logged and loads fall back to an empty list.
    """

    def load_tasks(self) -> list[Any]: ...
    def save_tasks(self, tasks: Iterable[Any]) -> None: ...
    def load_notes(self) -> list[Any]: ...
    def save_notes(self, notes: Iterable[Any]) -> None: ...
