# src/better_notes/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires storage, persistence policy, priority engine and store into AppState,
- hydrates the store from storage.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..core.store import (
    AppStore,
    Command,
    CompleteTask,
    DeferredFlush,
    FlushOnChange,
    LoadNotes,
    LoadTasks,
    PersistencePolicy,
    ReopenTask,
    Snapshot,
    ThemeMode,
)
from ..storage.gateway import StorageGateway
from ..storage.kv_store import SQLiteKeyValueStore
from ..tasks.priority import PriorityEngine

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_persistence_policy(settings, gateway: StorageGateway) -> PersistencePolicy:
    mode = str(getattr(settings, "flush_mode", "on_change"))
    if mode == "deferred":
        return DeferredFlush(gateway)
    return FlushOnChange(gateway)


def priority_invalidator(engine: PriorityEngine):
    """Store listener that drops cached priorities the command made stale."""

    def on_command(command: Command, snapshot: Snapshot) -> None:
        if isinstance(command, (CompleteTask, ReopenTask)):
            engine.invalidate_task(command.task_id)
        elif isinstance(command, LoadTasks):
            engine.invalidate_cache()

    return on_command


def create_initial_state(*, settings=None, gateway: StorageGateway | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if gateway is None:
        _ensure_local_dirs(settings)
        gateway = StorageGateway(
            SQLiteKeyValueStore(settings.storage_db_path),
            completed_retention_days=settings.completed_retention_days,
        )

    store = AppStore(
        Snapshot(theme_mode=ThemeMode.parse(getattr(settings, "theme_mode", None))),
        persistence=build_persistence_policy(settings, gateway),
        log_limit=getattr(settings, "command_log_limit", 500),
    )

    engine = PriorityEngine.with_ttl(getattr(settings, "priority_cache_ttl_seconds", 60.0))
    store.subscribe(priority_invalidator(engine))

    state = AppState(
        settings=settings,
        store=store,
        priority_engine=engine,
        storage=gateway,
    )
    return state


def hydrate_state(state: AppState) -> None:
    """Load tasks and notes from storage (hydration commands are never written back)."""
    state.store.dispatch(LoadTasks(tasks=tuple(state.storage.load_tasks())))
    state.store.dispatch(LoadNotes(notes=tuple(state.storage.load_notes())))
    snap = state.store.snapshot
    logger.info("State hydrated: %d tasks, %d notes", len(snap.tasks), len(snap.notes))
