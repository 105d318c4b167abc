# src/todo_sync/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the remote store backend and the connectivity gate,
- wires the controller into AppState with a queue-based callback dispatcher.
"""

from __future__ import annotations

import logging
import queue

from ..config import get_settings
from ..core.controller import TaskListController
from ..core.ports import ConnectivityProbe, Dispatch, RemoteStore
from ..core.state import AppState
from ..errors import ConfigurationError, RemoteError
from ..remote.connectivity import AlwaysOnline, TcpConnectivityProbe
from ..remote.firebase import FirebaseRemoteStore
from ..remote.memory import InMemoryRemoteStore, LocalJsonRemoteStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.local_store_path.parent.mkdir(parents=True, exist_ok=True)


def create_remote_store(settings, dispatch: Dispatch) -> RemoteStore:
    backend = getattr(settings, "backend", "local")
    if backend == "firebase":
        return FirebaseRemoteStore(
            settings.database_url,
            collection=settings.collection,
            auth=settings.database_auth,
            timeout=settings.request_timeout_seconds,
            reconnect_delay=settings.stream_reconnect_seconds,
            dispatch=dispatch,
        )
    if backend == "local":
        return LocalJsonRemoteStore(settings.local_store_path, dispatch=dispatch)
    if backend == "memory":
        return InMemoryRemoteStore(dispatch=dispatch)
    raise ConfigurationError(f"Unknown backend: {backend!r}")


def create_probe(settings) -> ConnectivityProbe:
    if getattr(settings, "backend", "local") != "firebase" or not settings.connectivity_check:
        return AlwaysOnline()
    return TcpConnectivityProbe(
        settings.database_url,
        timeout=settings.connectivity_timeout_seconds,
    )


def create_initial_state(*, settings=None, remote: RemoteStore | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the remote store) injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    callbacks: queue.SimpleQueue = queue.SimpleQueue()
    if remote is None:
        remote = create_remote_store(settings, callbacks.put)

    notices: list[str] = []

    def on_error(err: RemoteError) -> None:
        notices.append(f"[SYNC] {err}")

    controller = TaskListController(remote, on_error=on_error)
    return AppState(
        settings=settings,
        remote=remote,
        controller=controller,
        callbacks=callbacks,
        notices=notices,
    )


def connect(state: AppState, probe: ConnectivityProbe | None = None) -> bool:
    """Run the connectivity gate once and start the subscription if online."""
    if probe is None:
        probe = create_probe(state.settings)
    state.online = bool(probe.is_reachable())
    state.controller.start(online=state.online)
    return state.online


def drain_callbacks(state: AppState) -> int:
    """Run every queued remote callback on the calling thread. Returns how many ran."""
    n = 0
    while True:
        try:
            fn = state.callbacks.get_nowait()
        except queue.Empty:
            return n
        try:
            fn()
        except Exception:
            logger.exception("Remote callback crashed.")
        n += 1
