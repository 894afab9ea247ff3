# tests/test_priority_refresher.py

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from better_notes.core.store import AddTask, AppStore, Snapshot
from better_notes.tasks.priority import SECONDS_PER_DAY, PriorityEngine
from better_notes.tasks.priority_refresher import is_resume_gap, run_priority_refresher
from better_notes.tasks.ranking import TaskBoard
from better_notes.tasks.task_models import Task

from .fakes import SequenceClock

T0 = 1_740_564_000.0


class CountingEngine(PriorityEngine):
    """PriorityEngine that counts cache invalidations."""

    def __init__(self) -> None:
        super().__init__()
        self.invalidations = 0

    def invalidate_cache(self) -> None:
        self.invalidations += 1
        super().invalidate_cache()


def _store() -> AppStore:
    store = AppStore(Snapshot())
    store.dispatch(AddTask(task=Task(id="static", title="static", start_priority=40, created_at=T0)))
    store.dispatch(
        AddTask(
            task=Task(
                id="escalating",
                title="escalating",
                start_priority=20,
                end_priority=80,
                escalation_days=14,
                created_at=T0 - 14 * SECONDS_PER_DAY,
            )
        )
    )
    return store


async def _run_until(n_boards: int, *, clock, engine=None, on_board=None, source=None) -> list[TaskBoard]:
    boards: list[TaskBoard] = []
    stop = asyncio.Event()

    def on_refresh(board: TaskBoard) -> None:
        boards.append(board)
        if on_board is not None:
            on_board(board)
        if len(boards) >= n_boards:
            stop.set()

    await asyncio.wait_for(
        run_priority_refresher(
            source or _store(),
            engine or PriorityEngine(),
            on_refresh,
            interval_seconds=0.01,
            resume_gap_seconds=120.0,
            clock=clock,
            stop_event=stop,
        ),
        timeout=5.0,
    )
    return boards


def test_is_resume_gap() -> None:
    assert is_resume_gap(None, 100.0, interval_seconds=60, resume_gap_seconds=120) is False
    assert is_resume_gap(0.0, 180.0, interval_seconds=60, resume_gap_seconds=120) is False
    assert is_resume_gap(0.0, 181.0, interval_seconds=60, resume_gap_seconds=120) is True


@pytest.mark.asyncio
async def test_refresher_ranks_current_snapshot() -> None:
    boards = await _run_until(2, clock=SequenceClock([T0, T0 + 1]))

    assert len(boards) == 2
    assert [(r.task.id, r.priority) for r in boards[0].active] == [("escalating", 80), ("static", 40)]


@pytest.mark.asyncio
async def test_refresher_sees_new_snapshots() -> None:
    store = _store()

    def add_on_first(board: TaskBoard) -> None:
        if len(board.active) == 2:
            store.dispatch(AddTask(task=Task(id="urgent", title="urgent", start_priority=99, created_at=T0)))

    boards = await _run_until(2, clock=SequenceClock([T0, T0 + 1]), on_board=add_on_first, source=store)
    assert boards[1].active[0].task.id == "urgent"


@pytest.mark.asyncio
async def test_wall_clock_jump_invalidates_cache() -> None:
    engine = CountingEngine()
    await _run_until(3, clock=SequenceClock([T0, T0 + 1, T0 + 3600]), engine=engine)
    assert engine.invalidations == 1


@pytest.mark.asyncio
async def test_callback_errors_do_not_stop_the_loop() -> None:
    calls = SimpleNamespace(n=0)

    def flaky(board: TaskBoard) -> None:
        calls.n += 1
        if calls.n == 1:
            raise RuntimeError("render failed")

    boards = await _run_until(2, clock=SequenceClock([T0, T0 + 1]), on_board=flaky)
    assert len(boards) == 2
    assert calls.n == 2


@pytest.mark.asyncio
async def test_async_callback_and_on_tick() -> None:
    seen: list[int] = []
    ticks: list[int] = []
    stop = asyncio.Event()

    async def on_refresh(board: TaskBoard) -> None:
        await asyncio.sleep(0)
        seen.append(len(board.active))
        if len(seen) >= 2:
            stop.set()

    await asyncio.wait_for(
        run_priority_refresher(
            _store(),
            PriorityEngine(),
            on_refresh,
            interval_seconds=0.01,
            clock=SequenceClock([T0, T0 + 1]),
            stop_event=stop,
            on_tick=lambda: ticks.append(1),
        ),
        timeout=5.0,
    )
    assert seen == [2, 2]
    assert len(ticks) == 2


@pytest.mark.asyncio
async def test_refresher_can_be_cancelled() -> None:
    boards: list[TaskBoard] = []
    runner = asyncio.create_task(
        run_priority_refresher(_store(), PriorityEngine(), boards.append, interval_seconds=0.01)
    )

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert boards, "Refresher should produce at least one board"
