# src/todo_sync/logging_setup.py

"""
Logging for the console app.

The REPL shares stderr with the log stream, so the console handler only lets
through what a user typing commands needs to see. The file handler under the
data dir keeps everything, including the Firebase stream and HTTP traffic.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "todo-sync.log"

_APP_PREFIX = "todo_sync."

# App loggers that run on background threads and would interleave with the prompt.
_BACKGROUND_MIN_LEVEL: dict[str, int] = {
    "todo_sync.remote.firebase": logging.WARNING,
}

# Libraries that log every request at INFO.
_CHATTY_LIBRARIES = ("httpx", "httpcore")


class _ConsoleNoiseFilter(logging.Filter):
    """App records pass (background ones from WARNING); anything else only from ERROR."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith(_APP_PREFIX):
            # third-party and captured py.warnings
            return record.levelno >= logging.ERROR
        for prefix, min_level in _BACKGROUND_MIN_LEVEL.items():
            if name.startswith(prefix):
                return record.levelno >= min_level
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/todo-sync",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install the console and file handlers on the root logger.

    Replaces any handlers already installed, so calling it twice does not
    duplicate output. Returns the log file path.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / LOG_FILE_NAME

    formatter = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    console.addFilter(_ConsoleNoiseFilter())

    to_file = logging.FileHandler(str(log_file), encoding="utf-8")
    to_file.setLevel(file_level)
    to_file.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.addHandler(console)
    root.addHandler(to_file)

    logging.captureWarnings(True)

    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
