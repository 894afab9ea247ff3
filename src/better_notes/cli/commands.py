# src/better_notes/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..core.store import SetThemeMode, ThemeMode
from ..notes import note_api
from ..notes.document import parse_markup, preview, to_plain_text
from ..tasks import task_api
from ..tasks.priority import escalation_progress
from ..tasks.ranking import RankedTask

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _fmt_ts(ts: float | None) -> str:
    if ts is None:
        return "-"
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d %H:%M")


def _short(id_: str) -> str:
    return id_[:SHORT_ID_LEN]


def _format_ranked(r: RankedTask, now: float) -> str:
    t = r.task
    line = f"[{_short(t.id)}] ({r.priority:3d}) {t.title}"
    progress = escalation_progress(t, now)
    if t.completed:
        line += f"  (done {_fmt_ts(t.completed_at)})"
    elif progress is not None:
        line += f"  [{t.start_priority}->{t.end_priority} over {t.escalation_days:g}d, {progress:.0%}]"
    return line


def _parse_add_args(args: list[str]) -> tuple[str, dict[str, float | int | None]]:
    """
    "/add [start=N] [end=N] [days=D] title words..."

    Giving only one of end/days switches escalation on with the form defaults
    for the other (end 80, 14 days).
    """
    opts: dict[str, float | int | None] = {}
    words: list[str] = []
    for a in args:
        key, sep, value = a.partition("=")
        key = key.lower()
        if sep and key in ("start", "end", "days"):
            opts[key] = float(value) if key == "days" else int(value)
        else:
            words.append(a)

    end = opts.get("end")
    days = opts.get("days")
    if end is not None and days is None:
        opts["days"] = task_api.DEFAULT_ESCALATION_DAYS
    elif days is not None and end is None:
        opts["end"] = task_api.DEFAULT_END_PRIORITY

    return " ".join(words), opts


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    s = state.settings
    snap = state.store.snapshot
    cache = state.priority_engine.cache
    active = sum(1 for t in snap.tasks if not t.completed)
    last_tick = "never" if state.last_board is None else f"{len(state.last_board.active)} active ranked"
    return (
        "Status:\n"
        f"  Theme: {snap.theme_mode.value}\n"
        f"  Tasks: {active} active / {len(snap.tasks) - active} completed\n"
        f"  Notes: {len(snap.notes)}\n"
        f"  Priority cache: {len(cache) if cache is not None else 'off'} entries, "
        f"ttl={getattr(s, 'priority_cache_ttl_seconds', '?')}s\n"
        f"  Flush mode: {getattr(s, 'flush_mode', 'on_change')}\n"
        f"  Last refresh: {last_tick}"
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    usage = "Usage: /add [start=0-100] [end=0-100] [days=N] <title>"
    try:
        title, opts = _parse_add_args(args)
    except ValueError:
        return usage

    try:
        task = task_api.create_task(
            state,
            title=title,
            start_priority=int(opts.get("start", task_api.DEFAULT_START_PRIORITY) or 0),
            end_priority=cast("int | None", opts.get("end")),
            escalation_days=opts.get("days"),
        )
    except ValueError as e:
        return f"{e}.\n{usage}"

    return f"Added task [{_short(task.id)}] {task.title}"


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks            -> active tasks, highest priority first
    /tasks done       -> completed tasks, most recent first
    /tasks all        -> both
    """
    which = args[0].lower() if args else "active"
    now = time.time()
    board = task_api.current_board(state, now_ts=now)

    lines: list[str] = []
    if which in ("active", "all"):
        lines.append("Active:")
        lines.extend(f"  {_format_ranked(r, now)}" for r in board.active)
        if not board.active:
            lines.append("  (none)")
    if which in ("done", "completed", "all"):
        lines.append("Completed:")
        lines.extend(f"  {_format_ranked(r, now)}" for r in board.completed)
        if not board.completed:
            lines.append("  (none)")
    if not lines:
        return "Usage: /tasks [active|done|all]"
    return "\n".join(lines)


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <task id>"
    task_id = task_api.resolve_task_id(state, args[0])
    if task_id is None:
        return f"No unique task matches '{args[0]}'."
    if not task_api.complete_task(state, task_id):
        return "Task is already completed."
    return f"Completed [{_short(task_id)}]."


def cmd_reopen(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /reopen <task id>"
    task_id = task_api.resolve_task_id(state, args[0])
    if task_id is None:
        return f"No unique task matches '{args[0]}'."
    if not task_api.reopen_task(state, task_id):
        return "Task is not completed."
    return f"Reopened [{_short(task_id)}]."


def cmd_refresh(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        with contextlib.suppress(Exception):
            emit("[REFRESH] Recomputing priorities...")
    task_api.handle_app_resume(state)
    return cmd_tasks(state, [])


def cmd_notes(state: AppState, args: list[str]) -> str:
    notes = note_api.list_notes(state)
    if not notes:
        return "No notes yet. Use /note add <title> | <content>."
    lines = ["Notes:"]
    for n in notes:
        lines.append(f"  [{_short(n.id)}] {n.title}  ({_fmt_ts(n.updated_at)})")
        lines.append(f"      {preview(n.content, limit=80) or 'No content'}")
    return "\n".join(lines)


def cmd_note(state: AppState, args: list[str]) -> str:
    """
    /note add <title> | <content>
    /note show <id>
    /note edit <id> <content>
    /note title <id> <title>
    /note rm <id>
    """
    usage = (
        "Usage:\n"
        "  /note add <title> | <content>\n"
        "  /note show <id>\n"
        "  /note edit <id> <content>\n"
        "  /note title <id> <title>\n"
        "  /note rm <id>"
    )
    if not args:
        return usage

    sub = args[0].lower()
    rest = args[1:]

    if sub == "add":
        title, _, content = " ".join(rest).partition("|")
        try:
            note = note_api.add_note(state, title=title, content=content.strip())
        except ValueError as e:
            return f"{e}.\n{usage}"
        return f"Added note [{_short(note.id)}] {note.title}"

    if not rest:
        return usage

    note_id = note_api.resolve_note_id(state, rest[0])
    if note_id is None:
        return f"No unique note matches '{rest[0]}'."
    text = " ".join(rest[1:])

    if sub == "show":
        note = state.store.snapshot.find_note(note_id)
        if note is None:
            return f"No unique note matches '{rest[0]}'."
        body = to_plain_text(parse_markup(note.content))
        return f"{note.title}\n{'-' * len(note.title)}\n{body}"

    if sub == "edit":
        note_api.update_note(state, note_id, content=text)
        return f"Updated [{_short(note_id)}]."

    if sub == "title":
        try:
            note_api.update_note(state, note_id, title=text)
        except ValueError as e:
            return f"{e}."
        return f"Renamed [{_short(note_id)}]."

    if sub in ("rm", "delete"):
        note_api.delete_note(state, note_id)
        return f"Deleted [{_short(note_id)}]."

    return usage


def cmd_theme(state: AppState, args: list[str]) -> str:
    current = state.store.snapshot.theme_mode
    if not args:
        return f"Theme is {current.value}. Use /theme light or /theme dark."
    arg = args[0].lower()
    if arg not in (ThemeMode.LIGHT.value, ThemeMode.DARK.value):
        return "Usage: /theme light or /theme dark."
    state.store.dispatch(SetThemeMode(mode=ThemeMode(arg)))
    return f"Theme set to {arg}."


def cmd_history(state: AppState, args: list[str]) -> str:
    log = state.store.log
    if not log:
        return "No commands dispatched yet."
    tail = log[-10:]
    return "Recent commands:\n" + "\n".join(f"  {type(c).__name__}" for c in tail)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show counts, cache and persistence settings.")
registry.register("add", cmd_add, help_text="Add a task: /add [start=N] [end=N] [days=D] <title>.")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [active|done|all].", aliases=["ls"])
registry.register("done", cmd_done, help_text="Complete a task: /done <id>.")
registry.register("reopen", cmd_reopen, help_text="Reopen a completed task: /reopen <id>.")
registry.register("refresh", cmd_refresh, help_text="Drop cached priorities and re-rank tasks.")
registry.register("notes", cmd_notes, help_text="List notes, most recently edited first.")
registry.register("note", cmd_note, help_text="Notes: /note add | show | edit | title | rm.")
registry.register("theme", cmd_theme, help_text="Show or set the theme: /theme light | dark.")
registry.register("history", cmd_history, help_text="Show the last dispatched state commands.")
