# src/todo_sync/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, runs the connectivity gate once,
subscribes to the task collection and starts the console REPL.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import connect, create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..errors import TodoSyncError
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.controller.stop()
    except Exception:
        logger.debug("Unsubscribe failed.", exc_info=True)

    try:
        state.remote.close()
    except Exception:
        logger.debug("Remote close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (backend=%s)...", settings.app_name, settings.backend)
    logger.debug("Full log: %s", log_file)

    try:
        state = create_initial_state(settings=settings)
    except TodoSyncError as e:
        logger.error("Cannot start: %s", e)
        raise SystemExit(1) from e

    try:
        if not connect(state):
            print("No internet connection. Tasks cannot be loaded right now.")
        run_console_loop(state)
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
