# src/better_notes/connectors/console_connector.py

"""
Interactive console front end.

Reads lines from stdin, routes slash-commands through the command registry
and prints replies with a local timestamp. Anything raised by a handler is
logged and answered with a generic message so the prompt survives.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks import task_api

logger = logging.getLogger(__name__)

PROMPT = "notes> "
EXIT_COMMANDS = frozenset({"/exit", "/quit", "/q"})
INTERNAL_ERROR_REPLY = "Internal error while handling a command."


def _stamp() -> str:
    return datetime.now().astimezone().strftime("%H:%M:%S")


def _say(text: str) -> None:
    print(f"[{_stamp()}] {text}", flush=True)


def _echo_input(line: str) -> None:
    """Overwrite the prompt line with a timestamped copy (TTY only)."""
    if not sys.stdout.isatty():
        return
    sys.stdout.write("\033[1A\033[2K\r")
    sys.stdout.write(f"[{_stamp()}] {PROMPT}{line}\n")
    sys.stdout.flush()


def startup_summary(state: AppState) -> str:
    snap = state.store.snapshot
    board = task_api.current_board(state)
    lines = [f"{len(board.active)} active tasks, {len(snap.notes)} notes."]
    top = board.top()
    if top is not None:
        lines.append(f"Most urgent: ({top.priority}) {top.task.title}")
    lines.append("Use /help for commands, /add to create a task, /exit to quit.")
    return "\n".join(lines)


def dispatch_line(state: AppState, line: str, emit: Callable[[str], None] | None = None) -> str | None:
    """Run one console line; returns the reply to print, if any."""
    if not line.startswith("/"):
        return "Commands start with '/'. Use /help to list them."
    try:
        return command_registry.handle(state, line, emit=emit)
    except Exception:
        logger.exception("Command %r failed.", line.split(maxsplit=1)[0])
        return INTERNAL_ERROR_REPLY


def run_console_loop(state: AppState, read_line: Callable[[str], str] = input) -> None:
    logger.info("Console connector started.")
    _say(startup_summary(state) + "\n")

    while True:
        try:
            line = read_line(PROMPT).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console interrupted, exiting.")
            print()
            break

        if not line:
            continue
        _echo_input(line)

        if line.lower() in EXIT_COMMANDS:
            logger.info("Console exit command received.")
            break

        reply = dispatch_line(state, line, emit=_say)
        if reply is not None:
            _say(reply + "\n")

    logger.info("Console connector finished.")
