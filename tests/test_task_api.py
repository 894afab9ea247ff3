# tests/test_task_api.py

from __future__ import annotations

import time

import pytest

from better_notes.cli.bootstrap import create_initial_state, hydrate_state
from better_notes.core.state import AppState
from better_notes.core.store import CompleteTask, LoadTasks
from better_notes.notes import note_api
from better_notes.tasks import task_api
from better_notes.tasks.priority import SECONDS_PER_DAY


@pytest.mark.parametrize(
    "kwargs",
    [
        {"title": "   "},
        {"title": "x", "start_priority": 101},
        {"title": "x", "start_priority": -1},
        {"title": "x", "end_priority": 80},
        {"title": "x", "escalation_days": 3},
        {"title": "x", "start_priority": 50, "end_priority": 40, "escalation_days": 3},
        {"title": "x", "end_priority": 80, "escalation_days": 0},
        {"title": "x", "end_priority": 120, "escalation_days": 3},
        {"title": "x", "end_priority": 80, "escalation_days": float("nan")},
        {"title": "x", "end_priority": 80, "escalation_days": float("inf")},
    ],
)
def test_create_task_rejects_invalid_forms(state: AppState, kwargs) -> None:
    with pytest.raises(ValueError):
        task_api.create_task(state, **kwargs)
    assert state.store.snapshot.tasks == ()


def test_created_tasks_survive_restart(state: AppState, settings) -> None:
    task = task_api.create_task(
        state, title="  call mom ", start_priority=30, end_priority=70, escalation_days=5, now_ts=1_740_564_000.0
    )
    assert task.title == "call mom"
    assert task.completed is False

    restarted = create_initial_state(settings=settings)
    hydrate_state(restarted)
    assert restarted.store.snapshot.tasks == (task,)
    # hydration alone never writes back
    assert len(restarted.store.log) == 2


def test_complete_and_reopen_invalidate_cached_priority(state: AppState) -> None:
    now = time.time()
    task = task_api.create_task(
        state,
        title="renew passport",
        start_priority=20,
        end_priority=80,
        escalation_days=14,
        now_ts=now - 14 * SECONDS_PER_DAY,
    )
    assert state.priority_engine.compute(task, now) == 80

    assert task_api.complete_task(state, task.id, now_ts=now) is True
    done = state.store.snapshot.find_task(task.id)
    assert done is not None and done.completed_at == now
    assert state.priority_engine.compute(done, now) == 20
    assert task_api.complete_task(state, task.id) is False

    assert task_api.reopen_task(state, task.id) is True
    reopened = state.store.snapshot.find_task(task.id)
    assert reopened is not None
    assert state.priority_engine.compute(reopened, now) == 80
    assert task_api.reopen_task(state, task.id) is False


def test_handle_app_resume_clears_cache(state: AppState) -> None:
    task = task_api.create_task(state, title="water plants")
    state.priority_engine.compute(task)
    cache = state.priority_engine.cache
    assert cache is not None and len(cache) == 1

    task_api.handle_app_resume(state)
    assert len(cache) == 0


def test_current_board_orders_by_priority(state: AppState) -> None:
    low = task_api.create_task(state, title="low", start_priority=10)
    high = task_api.create_task(state, title="high", start_priority=90)
    task_api.complete_task(state, low.id)

    board = task_api.current_board(state)
    assert [r.task.id for r in board.active] == [high.id]
    assert [r.task.id for r in board.completed] == [low.id]


def test_resolve_task_id_by_prefix(state: AppState) -> None:
    task = task_api.create_task(state, title="prefix me")
    assert task_api.resolve_task_id(state, task.id[:6]) == task.id
    assert task_api.resolve_task_id(state, "") is None
    assert task_api.resolve_task_id(state, "zzzz-not-hex") is None


# ---- notes ----


def test_note_crud_and_ordering(state: AppState) -> None:
    first = note_api.add_note(state, title="first", content="a", now_ts=100.0)
    second = note_api.add_note(state, title="second", content="b", now_ts=200.0)
    assert [n.id for n in note_api.list_notes(state)] == [second.id, first.id]

    edited = note_api.update_note(state, first.id, content="**a**", now_ts=300.0)
    assert edited is not None
    assert edited.created_at == 100.0
    assert edited.updated_at == 300.0
    assert [n.id for n in note_api.list_notes(state)] == [first.id, second.id]

    assert note_api.update_note(state, "missing", content="x") is None
    with pytest.raises(ValueError):
        note_api.update_note(state, first.id, title="  ")

    assert note_api.delete_note(state, second.id) is True
    assert note_api.delete_note(state, second.id) is False
    assert [n.id for n in note_api.list_notes(state)] == [first.id]


def test_notes_are_persisted(state: AppState, settings) -> None:
    note = note_api.add_note(state, title="persist me", content="- item", now_ts=1_740_564_000.0)

    restarted = create_initial_state(settings=settings)
    hydrate_state(restarted)
    assert restarted.store.snapshot.notes == (note,)


def test_direct_store_dispatch_also_invalidates_cached_priority(state: AppState) -> None:
    now = time.time()
    task = task_api.create_task(
        state, title="escalates", start_priority=10, end_priority=90, escalation_days=1, now_ts=now - SECONDS_PER_DAY
    )
    assert state.priority_engine.compute(task, now) == 90

    state.store.dispatch(CompleteTask(task_id=task.id, at=now))
    done = state.store.snapshot.find_task(task.id)
    assert done is not None
    assert state.priority_engine.compute(done, now) == 10

    state.store.dispatch(LoadTasks(tasks=(task,)))
    assert len(state.priority_engine.cache) == 0
