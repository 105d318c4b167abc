# src/todo_sync/core/state.py

from __future__ import annotations

import queue
from collections.abc import Callable
from dataclasses import dataclass, field

from .controller import TaskListController
from .dialog import DialogSession
from .ports import RemoteStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    remote: RemoteStore
    controller: TaskListController
    online: bool = False
    ansi: bool = False

    # Remote callbacks queued for the console thread (see cli.bootstrap.drain_callbacks).
    callbacks: queue.SimpleQueue[Callable[[], None]] = field(default_factory=queue.SimpleQueue)

    # The dialog currently open in the console, if any.
    dialog: DialogSession | None = None

    # User-visible messages produced by callbacks (sync errors), printed by the console.
    notices: list[str] = field(default_factory=list)
