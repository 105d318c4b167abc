# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_sync.cli.bootstrap import create_initial_state
from todo_sync.core.controller import TaskListController
from todo_sync.core.state import AppState
from todo_sync.remote.memory import InMemoryRemoteStore

from .fakes import ManualRemoteStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap helpers.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="todo-sync-test",
        log_level="DEBUG",
        backend="memory",
        database_url="",
        database_auth=None,
        collection="Tasks",
        request_timeout_seconds=1.0,
        stream_reconnect_seconds=0.0,
        connectivity_check=False,
        connectivity_timeout_seconds=0.1,
        data_dir=tmp_path / "data",
        local_store_path=tmp_path / "data" / "tasks.json",
    )


@pytest.fixture()
def remote() -> InMemoryRemoteStore:
    return InMemoryRemoteStore()


@pytest.fixture()
def manual_remote() -> ManualRemoteStore:
    return ManualRemoteStore()


@pytest.fixture()
def controller(remote: InMemoryRemoteStore) -> TaskListController:
    ctrl = TaskListController(remote)
    ctrl.start(online=True)
    return ctrl


@pytest.fixture()
def state(settings: SimpleNamespace, remote: InMemoryRemoteStore) -> AppState:
    """
    AppState wired with the in-memory remote (callbacks run inline).

    NOTE: the real InMemoryRemoteStore is used on purpose: notification order
    and self-notification are part of what we want to test.
    """
    st = create_initial_state(settings=settings, remote=remote)
    st.online = True
    st.controller.start(online=True)
    return st
