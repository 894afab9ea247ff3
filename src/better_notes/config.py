# src/better_notes/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time; every value has a local default.
- Components take settings by injection; get_settings() is only for the composition root.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "NOTES"

FLUSH_MODES = ("on_change", "deferred")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = (os.getenv(name) or "").strip().lower()
    return raw if raw in choices else default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    storage_db_path: Path

    # ---- Priority engine ----
    priority_cache_ttl_seconds: float
    refresh_interval_seconds: float
    resume_gap_seconds: float
    refresher_enabled: bool

    # ---- Persistence ----
    completed_retention_days: int
    flush_mode: str
    command_log_limit: int

    # ---- UI ----
    theme_mode: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "better-notes")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/better_notes"))
        storage_db_path = _env_path(_k("STORAGE_DB_PATH"), data_dir / "storage.sqlite3")

        priority_cache_ttl_seconds = max(0.0, _env_float(_k("PRIORITY_CACHE_TTL_SECONDS"), 60.0))
        refresh_interval_seconds = max(1.0, _env_float(_k("REFRESH_INTERVAL_SECONDS"), 60.0))
        resume_gap_seconds = max(0.0, _env_float(_k("RESUME_GAP_SECONDS"), 120.0))
        refresher_enabled = _env_bool(_k("REFRESHER_ENABLED"), True)

        completed_retention_days = max(0, _env_int(_k("COMPLETED_RETENTION_DAYS"), 7))
        flush_mode = _env_choice(_k("FLUSH_MODE"), FLUSH_MODES, "on_change")
        command_log_limit = max(1, _env_int(_k("COMMAND_LOG_LIMIT"), 500))

        theme_mode = _env_choice(_k("THEME_MODE"), ("light", "dark"), "dark")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_db_path=storage_db_path,
            priority_cache_ttl_seconds=priority_cache_ttl_seconds,
            refresh_interval_seconds=refresh_interval_seconds,
            resume_gap_seconds=resume_gap_seconds,
            refresher_enabled=refresher_enabled,
            completed_retention_days=completed_retention_days,
            flush_mode=flush_mode,
            command_log_limit=command_log_limit,
            theme_mode=theme_mode,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env; use config_local.py only for safe overrides.
try:
    import config_local as _config_local  # type: ignore

    if hasattr(_config_local, "REFRESHER_ENABLED"):
        object.__setattr__(SETTINGS, "refresher_enabled", bool(_config_local.REFRESHER_ENABLED))  # type: ignore[misc]
    if hasattr(_config_local, "THEME_MODE"):
        object.__setattr__(SETTINGS, "theme_mode", str(_config_local.THEME_MODE))  # type: ignore[misc]
except ImportError:
    pass


def get_settings() -> Settings:
    return SETTINGS
