# src/better_notes/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds and hydrates AppState, then runs:
- the priority refresher in a background thread (optional),
- the console REPL in the main thread.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state, hydrate_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.priority_refresher import start_refresher_in_background

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.store.flush()
    except Exception:
        logger.exception("Final flush failed.")


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/better_notes")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "better-notes"))

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)
    hydrate_state(state)

    runner = start_refresher_in_background(state)

    try:
        run_console_loop(state)
    finally:
        if runner is not None:
            runner.stop()
            runner.join(timeout=10.0)

        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
