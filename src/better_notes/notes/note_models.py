# src/better_notes/notes/note_models.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Note:
    id: str
    title: str
    content: str
    created_at: float
    updated_at: float
