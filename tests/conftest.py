# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from better_notes.cli.bootstrap import create_initial_state
from better_notes.core.state import AppState

from .fakes import MemoryKeyValueStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="better-notes-test",
        log_level="DEBUG",
        # Paths (tmp per test run)
        data_dir=tmp_path,
        storage_db_path=tmp_path / "storage.sqlite3",
        # Priority engine
        priority_cache_ttl_seconds=60.0,
        refresh_interval_seconds=60.0,
        resume_gap_seconds=120.0,
        refresher_enabled=False,
        # Persistence
        completed_retention_days=7,
        flush_mode="on_change",
        command_log_limit=50,
        theme_mode="dark",
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired by the real composition root.

    NOTE: the SQLite key-value store is real here because persistence through
    the whole stack is part of what we want to test.
    """
    return create_initial_state(settings=settings)


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()
