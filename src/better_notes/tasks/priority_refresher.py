# src/better_notes/tasks/priority_refresher.py

from __future__ import annotations

"""
Priority refresher.

A small polling loop that:
- re-ranks the current task snapshot every interval,
- detects host suspension (wall clock jumped past the expected tick) and
  invalidates the priority cache before recomputing,
- hands the resulting TaskBoard to an injected callback.

The loop never mutates tasks; it only reads snapshots.
"""

import asyncio
import contextlib
import inspect
import logging
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from ..core.state import AppState
from ..core.store import Snapshot
from .priority import Clock, PriorityEngine
from .ranking import TaskBoard, rank_tasks

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[TaskBoard], Awaitable[None] | None]


class SnapshotSource(Protocol):
    @property
    def snapshot(self) -> Snapshot: ...


def is_resume_gap(prev_tick: float | None, now: float, *, interval_seconds: float, resume_gap_seconds: float) -> bool:
    """True if more wall-clock time passed since prev_tick than a normal sleep explains."""
    if prev_tick is None:
        return False
    return (now - prev_tick) > (interval_seconds + resume_gap_seconds)


async def run_priority_refresher(
        source: SnapshotSource,
        engine: PriorityEngine,
        on_refresh: RefreshCallback,
        *,
        interval_seconds: float = 60.0,
        resume_gap_seconds: float = 120.0,
        clock: Clock = time.time,
        stop_event: asyncio.Event | None = None,
        on_tick: Callable[[], None] | None = None,
) -> None:
    """
    Every interval_seconds:
    - if the wall clock jumped (suspend/resume), invalidate the engine cache
    - rank source.snapshot.tasks
    - await/call on_refresh(board)
    - call on_tick() (used for deferred persistence flushes)

    Stops when stop_event is set, or when the coroutine is cancelled.
    """
    sleep_s = max(0.01, float(interval_seconds))
    gap_s = max(0.0, float(resume_gap_seconds))
    prev_tick: float | None = None

    while stop_event is None or not stop_event.is_set():
        now_ts = clock()

        if prev_tick is not None and is_resume_gap(
            prev_tick, now_ts, interval_seconds=sleep_s, resume_gap_seconds=gap_s
        ):
            logger.info("Wall clock jumped %.0fs since last tick; invalidating priority cache", now_ts - prev_tick)
            engine.invalidate_cache()
        prev_tick = now_ts

        try:
            board = rank_tasks(source.snapshot.tasks, engine, now_ts)
        except Exception:
            logger.exception("rank_tasks failed")
            board = None

        if board is not None:
            try:
                result = on_refresh(board)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("on_refresh callback failed")

        if on_tick is not None:
            try:
                on_tick()
            except Exception:
                logger.exception("on_tick callback failed")

        if stop_event is None:
            await asyncio.sleep(sleep_s)
        else:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)

    logger.debug("Priority refresher stopped")


@dataclass(slots=True)
class RefresherBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal refresher stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_refresher_in_background(state: AppState) -> RefresherBackgroundRunner | None:
    """
    Run the refresher in a daemon thread with its own event loop
    (the console REPL blocks on input()).
    """
    settings = state.settings
    if not getattr(settings, "refresher_enabled", True):
        logger.info("Priority refresher disabled, not starting.")
        return None

    def on_refresh(board: TaskBoard) -> None:
        prev_top = state.last_board.top() if state.last_board is not None else None
        state.last_board = board
        top = board.top()
        if top is not None and (prev_top is None or prev_top.task.id != top.task.id):
            logger.info("Top task is now %s (priority %d)", top.task.title, top.priority)

    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_priority_refresher(
                    state.store,
                    state.priority_engine,
                    on_refresh,
                    interval_seconds=float(getattr(settings, "refresh_interval_seconds", 60.0)),
                    resume_gap_seconds=float(getattr(settings, "resume_gap_seconds", 120.0)),
                    stop_event=stop_event,
                    on_tick=state.store.flush,
                )
            )
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="priority-refresher", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Refresher thread did not initialize properly.")
        return None

    logger.info("Priority refresher started.")
    return RefresherBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
