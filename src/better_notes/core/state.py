# src/better_notes/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.priority import PriorityEngine
from ..tasks.ranking import TaskBoard
from .ports import PersistenceGateway
from .store import AppStore


@dataclass
class AppState:
    # Settings object (real Settings or a SimpleNamespace in tests).
    settings: Any

    store: AppStore
    priority_engine: PriorityEngine
    storage: PersistenceGateway

    # Last board produced by the background refresher (None until the first tick).
    last_board: TaskBoard | None = None
