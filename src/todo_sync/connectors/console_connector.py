# src/todo_sync/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
from datetime import datetime

from ..cli.bootstrap import drain_callbacks
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _flush_sync(state: AppState) -> None:
    """Apply pending remote callbacks on this thread, then show what they reported."""
    drain_callbacks(state)
    while state.notices:
        _print_ts(state.notices.pop(0))


def _prompt(state: AppState) -> str:
    session = state.dialog
    if session is not None and session.is_open:
        return f"({session.mode}) >>> "
    return ">>> "


def run_console_loop(state: AppState) -> None:
    logger.info("Console started (backend=%s).", getattr(state.settings, "backend", "?"))
    _print_ts("[CONSOLE] Use /list to show tasks, /help for commands, /exit to quit.\n")

    state.ansi = sys.stdout.isatty()

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    _flush_sync(state)

    while True:
        try:
            user_input = input(_prompt(state)).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        _flush_sync(state)

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            # Plain text while a dialog is open edits its title.
            if state.dialog is not None and state.dialog.is_open:
                user_input = f"/title {user_input}"
            else:
                _print_ts("Commands start with '/'. Use /help to list them.")
                continue

        try:
            cmd_response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        _flush_sync(state)

        if cmd_response is not None:
            _print_ts(cmd_response)

    logger.info("Console finished.")
