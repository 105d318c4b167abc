# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from todo_sync.cli.bootstrap import create_probe, create_remote_store
from todo_sync.config import Settings
from todo_sync.errors import ConfigurationError
from todo_sync.remote.connectivity import AlwaysOnline, TcpConnectivityProbe
from todo_sync.remote.memory import InMemoryRemoteStore, LocalJsonRemoteStore

_VARS = (
    "TODO_BACKEND",
    "TODO_DATABASE_URL",
    "FIREBASE_DATABASE_URL",
    "TODO_DATABASE_AUTH",
    "FIREBASE_DATABASE_AUTH",
    "TODO_COLLECTION",
    "TODO_REQUEST_TIMEOUT_SECONDS",
    "TODO_DATA_DIR",
    "TODO_LOCAL_STORE_PATH",
    "TODO_CONNECTIVITY_CHECK",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_to_local_backend_without_url() -> None:
    s = Settings.from_env()
    assert s.backend == "local"
    assert s.collection == "Tasks"
    assert s.request_timeout_seconds == 10.0
    assert s.local_store_path == s.data_dir / "tasks.json"


def test_database_url_selects_firebase(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FIREBASE_DATABASE_URL", "https://todo-test.firebaseio.com")
    monkeypatch.setenv("TODO_COLLECTION", "/Chores/")
    s = Settings.from_env()
    assert s.backend == "firebase"
    assert s.database_url == "https://todo-test.firebaseio.com"
    assert s.collection == "Chores"


def test_explicit_backend_and_bad_numbers(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TODO_BACKEND", "Memory")
    monkeypatch.setenv("TODO_REQUEST_TIMEOUT_SECONDS", "soon")
    monkeypatch.setenv("TODO_DATA_DIR", str(tmp_path))
    s = Settings.from_env()
    assert s.backend == "memory"
    assert s.request_timeout_seconds == 10.0
    assert s.local_store_path == tmp_path / "tasks.json"


def test_backend_factory(settings) -> None:
    assert isinstance(create_remote_store(settings, lambda fn: fn()), InMemoryRemoteStore)

    settings.backend = "local"
    store = create_remote_store(settings, lambda fn: fn())
    assert isinstance(store, LocalJsonRemoteStore)
    assert store.path == settings.local_store_path

    settings.backend = "carrier-pigeon"
    with pytest.raises(ConfigurationError):
        create_remote_store(settings, lambda fn: fn())


def test_probe_only_for_firebase(settings) -> None:
    assert isinstance(create_probe(settings), AlwaysOnline)

    settings.backend = "firebase"
    settings.database_url = "https://todo-test.firebaseio.com"
    settings.connectivity_check = True
    assert isinstance(create_probe(settings), TcpConnectivityProbe)

    settings.connectivity_check = False
    assert isinstance(create_probe(settings), AlwaysOnline)
