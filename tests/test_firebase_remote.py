# tests/test_firebase_remote.py

from __future__ import annotations

import json
import threading

import httpx
import pytest

from todo_sync.errors import ConfigurationError, RemoteError
from todo_sync.remote.connectivity import TcpConnectivityProbe
from todo_sync.remote.firebase import CollectionMirror, FirebaseRemoteStore, iter_sse_events
from todo_sync.tasks.task_models import Priority, TaskRecord

DB = "https://todo-test.firebaseio.com"


class FakeFirebase:
    """Tiny REST double: records requests, serves children from a dict."""

    def __init__(self, children: dict | None = None) -> None:
        self.children = dict(children or {})
        self.requests: list[httpx.Request] = []
        self.deny: set[str] = set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = request.url.path.removeprefix("/Tasks/").removesuffix(".json")
        if key in self.deny:
            return httpx.Response(401, json={"error": "Permission denied"})
        if request.method == "GET":
            return httpx.Response(200, json=self.children.get(key))
        if request.method == "PUT":
            self.children[key] = json.loads(request.content)
            return httpx.Response(200, json=self.children[key])
        if request.method == "PATCH":
            self.children.setdefault(key, {}).update(json.loads(request.content))
            return httpx.Response(200, json=json.loads(request.content))
        if request.method == "DELETE":
            self.children.pop(key, None)
            return httpx.Response(200, json=None)
        return httpx.Response(405)


def _store(fake, **kwargs) -> FirebaseRemoteStore:
    return FirebaseRemoteStore(DB, transport=httpx.MockTransport(fake), **kwargs)


def test_write_update_delete_hit_child_urls() -> None:
    fake = FakeFirebase()
    store = _store(fake, auth="s3cret")
    try:
        store.write("0", TaskRecord("Buy milk", Priority.HIGH))
        store.update("0", "Buy oat milk", Priority.LOW)
        store.delete_many(["0", "5"])
        store.flush(timeout=5)
    finally:
        store.close()

    methods = [(r.method, r.url.path) for r in fake.requests]
    assert methods == [
        ("PUT", "/Tasks/0.json"),
        ("PATCH", "/Tasks/0.json"),
        ("DELETE", "/Tasks/0.json"),
        ("DELETE", "/Tasks/5.json"),
    ]
    assert json.loads(fake.requests[0].content) == {"description": "Buy milk", "priority": 1}
    assert all(r.url.params["auth"] == "s3cret" for r in fake.requests)
    assert fake.children == {}


def test_one_failed_delete_does_not_block_the_rest() -> None:
    fake = FakeFirebase({"0": {"description": "a", "priority": 1}, "1": {"description": "b", "priority": 1}})
    fake.deny.add("0")
    errors: list[RemoteError] = []
    store = _store(fake)
    try:
        store.delete_many(["0", "1"], on_error=errors.append)
        store.flush(timeout=5)
    finally:
        store.close()

    assert list(fake.children) == ["0"]
    assert len(errors) == 1
    assert errors[0].key == "0"
    assert errors[0].status_code == 401


def test_fetch_once_results() -> None:
    fake = FakeFirebase({"3": {"description": "Walk dog", "priority": "2"}})
    results: list[TaskRecord | None] = []
    errors: list[RemoteError] = []
    store = _store(fake)
    try:
        store.fetch_once("3", results.append, errors.append)
        store.fetch_once("4", results.append, errors.append)
        store.flush(timeout=5)
    finally:
        store.close()

    assert results == [TaskRecord("Walk dog", Priority.MEDIUM), None]
    assert errors == []


def test_requires_a_database_url() -> None:
    with pytest.raises(ConfigurationError):
        FirebaseRemoteStore("")
    with pytest.raises(ConfigurationError):
        FirebaseRemoteStore("todo-test.firebaseio.com")


def test_sse_parser() -> None:
    lines = [
        "event: put",
        'data: {"path": "/", "data": null}',
        "",
        ": comment",
        "event: keep-alive",
        "data: null",
        "",
        "event: patch",
        'data: {"path": "/",',
        'data:  "data": {}}',
    ]
    events = list(iter_sse_events(lines))
    assert [e.event for e in events] == ["put", "keep-alive", "patch"]
    assert json.loads(events[2].data) == {"path": "/", "data": {}}


def test_mirror_applies_put_and_patch() -> None:
    mirror = CollectionMirror()
    mirror.apply("put", {"path": "/", "data": [{"description": "a", "priority": 1}, {"description": "b", "priority": 2}]})
    assert [k for k, _ in mirror.entries()] == ["0", "1"]

    mirror.apply("put", {"path": "/1/description", "data": "b2"})
    mirror.apply("patch", {"path": "/", "data": {"2": {"description": "c", "priority": 3}, "0": None}})
    assert mirror.entries() == [("1", TaskRecord("b2", Priority.MEDIUM)), ("2", TaskRecord("c", Priority.LOW))]

    mirror.apply("put", {"path": "/2/description", "data": None})
    mirror.apply("put", {"path": "/2/priority", "data": None})
    assert [k for k, _ in mirror.entries()] == ["1"]


def test_stream_subscription_delivers_full_snapshots() -> None:
    body = (
        "event: put\n"
        'data: {"path": "/", "data": {"0": {"description": "Buy milk", "priority": 1}}}\n\n'
        "event: keep-alive\ndata: null\n\n"
        "event: put\n"
        'data: {"path": "/1", "data": {"description": "Walk dog", "priority": 3}}\n\n'
    )

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["accept"] == "text/event-stream"
        return httpx.Response(200, headers={"content-type": "text/event-stream"}, content=body.encode())

    seen: list[list[str]] = []
    done = threading.Event()

    def on_change(entries) -> None:
        seen.append([k for k, _ in entries])
        if len(seen) == 2:
            done.set()

    store = FirebaseRemoteStore(DB, transport=httpx.MockTransport(handler), reconnect_delay=30)
    sub = store.subscribe_all(on_change, lambda e: None)
    try:
        assert done.wait(5)
    finally:
        sub.unsubscribe()
        sub.join(timeout=5)
        store.close()

    assert seen[:2] == [["0"], ["0", "1"]]
    assert not sub.active


def test_stream_rejection_is_reported_without_ending_subscription() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "Permission denied"})

    errors: list[RemoteError] = []
    got = threading.Event()

    def on_error(err: RemoteError) -> None:
        errors.append(err)
        got.set()

    store = FirebaseRemoteStore(DB, transport=httpx.MockTransport(handler), reconnect_delay=30)
    sub = store.subscribe_all(lambda entries: None, on_error)
    try:
        assert got.wait(5)
        assert sub.active
    finally:
        sub.unsubscribe()
        sub.join(timeout=5)
        store.close()

    assert errors[0].status_code == 401
    assert "Permission denied" in str(errors[0])


def test_probe_defaults_port_from_scheme() -> None:
    assert TcpConnectivityProbe(DB).port == 443
    assert TcpConnectivityProbe("http://localhost:9000").port == 9000
