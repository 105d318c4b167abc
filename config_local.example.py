# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for secrets. This file should contain only safe overrides.
"""

# Example: keep tasks in memory only (nothing written to disk or network)
# BACKEND = "memory"

# Example: override the local data directory
# from pathlib import Path
# DATA_DIR = Path(".local/todo-sync")
