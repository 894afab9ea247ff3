# src/better_notes/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

PACKAGE_LOGGER = "better_notes"
LOG_FILE_NAME = "better_notes.log"

# Minimum console level per logger prefix. Longest matching prefix wins.
_CONSOLE_THRESHOLDS: dict[str, int] = {
    PACKAGE_LOGGER: logging.NOTSET,
    # ticks once a minute; only problems belong on the prompt
    f"{PACKAGE_LOGGER}.tasks.priority_refresher": logging.WARNING,
    # one line per save would drown the REPL
    f"{PACKAGE_LOGGER}.storage": logging.WARNING,
    "py.warnings": logging.ERROR,
}
_OTHER_THRESHOLD = logging.ERROR


class _ConsoleNoiseFilter(logging.Filter):
    """Drop records below the per-prefix threshold on the interactive console."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= console_threshold(record.name)


def console_threshold(logger_name: str) -> int:
    best: str | None = None
    for prefix in _CONSOLE_THRESHOLDS:
        if logger_name == prefix or logger_name.startswith(prefix + "."):
            if best is None or len(prefix) > len(best):
                best = prefix
    return _OTHER_THRESHOLD if best is None else _CONSOLE_THRESHOLDS[best]


def setup_logging(
    *,
    log_dir: str | Path = ".local/better_notes",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> Path:
    """
    Configure root logging once at startup.

    stderr gets a filtered view at `console_level`; the data dir gets a
    rotating `better_notes.log` with everything at `file_level`.
    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
