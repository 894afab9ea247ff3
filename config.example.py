# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Local machine tweaks go to config_local.py (gitignored).

This file exists to make the repo self-documenting without opening src/better_notes/config.py.
"""

ENV_VARS = {
    # App / logging
    "NOTES_APP_NAME": "App display name (default: better-notes).",
    "NOTES_LOG_LEVEL": "Console logging level (default: INFO).",
    # Paths (gitignored)
    "NOTES_DATA_DIR": "Local data directory, also holds better_notes.log (default: .local/better_notes).",
    "NOTES_STORAGE_DB_PATH": "Key-value SQLite path (default: <data_dir>/storage.sqlite3).",
    # Priority engine
    "NOTES_PRIORITY_CACHE_TTL_SECONDS": "How long a computed priority is reused (default: 60, 0 disables).",
    "NOTES_REFRESH_INTERVAL_SECONDS": "Background re-ranking period (default: 60, min 1).",
    "NOTES_RESUME_GAP_SECONDS": "Extra gap between ticks treated as a resume (default: 120).",
    "NOTES_REFRESHER_ENABLED": "Run the background refresher (true/false, default: true).",
    # Persistence
    "NOTES_COMPLETED_RETENTION_DAYS": "Keep completed tasks this many whole days (default: 7).",
    "NOTES_FLUSH_MODE": "on_change (save after every change) or deferred (save on refresh tick/exit).",
    "NOTES_COMMAND_LOG_LIMIT": "How many dispatched commands /history remembers (default: 500).",
    # UI
    "NOTES_THEME_MODE": "Initial theme: light or dark (default: dark).",
}
