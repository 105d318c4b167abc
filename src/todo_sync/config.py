# src/todo_sync/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.
- Backend selection: Firebase when a database URL is configured, local JSON otherwise.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "TODO"

BACKENDS = ("firebase", "local", "memory")


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


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


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


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Remote store ----
    backend: str
    database_url: str
    database_auth: Optional[str]
    collection: str
    request_timeout_seconds: float
    stream_reconnect_seconds: float

    # ---- Connectivity gate ----
    connectivity_check: bool
    connectivity_timeout_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    local_store_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "todo-sync") or "todo-sync"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        database_url = (
            _first_env(_k("DATABASE_URL"), "FIREBASE_DATABASE_URL", default="") or ""
        ).strip()
        database_auth = _first_env(_k("DATABASE_AUTH"), "FIREBASE_DATABASE_AUTH", default=None)

        backend = _env(_k("BACKEND"), "").strip().lower()
        if backend not in BACKENDS:
            # Unknown or unset: pick from what is configured.
            backend = "firebase" if database_url else "local"

        collection = _env(_k("COLLECTION"), "Tasks").strip("/ ") or "Tasks"
        request_timeout_seconds = _env_float(_k("REQUEST_TIMEOUT_SECONDS"), 10.0)
        stream_reconnect_seconds = _env_float(_k("STREAM_RECONNECT_SECONDS"), 3.0)

        connectivity_check = _env_bool(_k("CONNECTIVITY_CHECK"), True)
        connectivity_timeout_seconds = _env_float(_k("CONNECTIVITY_TIMEOUT_SECONDS"), 3.0)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todo-sync"))
        local_store_path = _env_path(_k("LOCAL_STORE_PATH"), data_dir / "tasks.json")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            backend=backend,
            database_url=database_url,
            database_auth=database_auth,
            collection=collection,
            request_timeout_seconds=max(0.1, request_timeout_seconds),
            stream_reconnect_seconds=max(0.0, stream_reconnect_seconds),
            connectivity_check=connectivity_check,
            connectivity_timeout_seconds=max(0.1, connectivity_timeout_seconds),
            data_dir=data_dir,
            local_store_path=local_store_path,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env for secrets; use config_local.py only for safe overrides.
try:
    import config_local as _config_local  # type: ignore

    # Simple overrides for selected names. Keep it explicit.
    if hasattr(_config_local, "BACKEND") and str(_config_local.BACKEND) in BACKENDS:
        object.__setattr__(SETTINGS, "backend", str(_config_local.BACKEND))  # type: ignore[misc]
    if hasattr(_config_local, "DATA_DIR"):
        object.__setattr__(SETTINGS, "data_dir", Path(_config_local.DATA_DIR))  # type: ignore[misc]
        if not os.getenv(_k("LOCAL_STORE_PATH")):
            object.__setattr__(SETTINGS, "local_store_path", SETTINGS.data_dir / "tasks.json")  # type: ignore[misc]
except Exception:
    pass


def get_settings() -> Settings:
    return SETTINGS
