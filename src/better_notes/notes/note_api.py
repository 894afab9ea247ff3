# src/better_notes/notes/note_api.py

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import replace

from ..core.state import AppState
from ..core.store import AddNote, DeleteNote, UpdateNote
from .note_models import Note

logger = logging.getLogger(__name__)


def add_note(state: AppState, *, title: str, content: str = "", now_ts: float | None = None) -> Note:
    title = (title or "").strip()
    if not title:
        raise ValueError("title is required")

    now = time.time() if now_ts is None else float(now_ts)
    note = Note(id=uuid.uuid4().hex, title=title, content=content, created_at=now, updated_at=now)
    state.store.dispatch(AddNote(note=note))
    logger.info("Note added id=%s", note.id)
    return note


def update_note(
    state: AppState,
    note_id: str,
    *,
    title: str | None = None,
    content: str | None = None,
    now_ts: float | None = None,
) -> Note | None:
    """Edit in place (same id). Returns None if the note does not exist."""
    current = state.store.snapshot.find_note(note_id)
    if current is None:
        return None

    if title is not None and not title.strip():
        raise ValueError("title cannot be empty")

    updated = replace(
        current,
        title=current.title if title is None else title.strip(),
        content=current.content if content is None else content,
        updated_at=time.time() if now_ts is None else float(now_ts),
    )
    state.store.dispatch(UpdateNote(note=updated))
    return updated


def delete_note(state: AppState, note_id: str) -> bool:
    before = state.store.snapshot
    return state.store.dispatch(DeleteNote(note_id=note_id)) is not before


def list_notes(state: AppState) -> list[Note]:
    """Most recently updated first."""
    return sorted(state.store.snapshot.notes, key=lambda n: n.updated_at, reverse=True)


def resolve_note_id(state: AppState, prefix: str) -> str | None:
    prefix = (prefix or "").strip()
    if not prefix:
        return None
    matches = [n.id for n in state.store.snapshot.notes if n.id.startswith(prefix)]
    return matches[0] if len(matches) == 1 else None
