# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for anything path-related. Only the values below are read.
"""

# Example: keep the console quiet while debugging storage
# REFRESHER_ENABLED = False

# Example: start in light mode
# THEME_MODE = "light"
