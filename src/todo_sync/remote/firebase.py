# src/todo_sync/remote/firebase.py

"""
Firebase Realtime Database adapter (REST + Server-Sent Events).

Layout: <database_url>/<collection>/<key>.json = {"description": str, "priority": int}

- one-shot calls (fetch/write/update/delete) run on a single worker thread,
  so they reach the server in the order they were issued
- subscribe_all() opens a streaming GET on a background thread, keeps a local
  mirror of the collection from put/patch events and pushes the full mirror
  to the listener after each event
"""

from __future__ import annotations

import contextlib
import copy
import json
import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from ..core.ports import (
    ChangeHandler,
    Dispatch,
    ErrorHandler,
    FetchHandler,
    immediate_dispatch,
)
from ..errors import ConfigurationError, RemoteError
from ..tasks.task_models import Priority, TaskRecord
from .snapshot import as_children, decode_entries

logger = logging.getLogger(__name__)

STREAM_READ_TIMEOUT_SECONDS = 60.0  # server sends keep-alive every ~30s


@dataclass(slots=True, frozen=True)
class StreamEvent:
    event: str
    data: str


def iter_sse_events(lines: Iterable[str]) -> Iterator[StreamEvent]:
    """Parse a text/event-stream into events. Comments and unknown fields are ignored."""
    event = ""
    data: list[str] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            if event or data:
                yield StreamEvent(event=event or "message", data="\n".join(data))
            event, data = "", []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "event":
            event = value
        elif field == "data":
            data.append(value)
    if event or data:
        yield StreamEvent(event=event or "message", data="\n".join(data))


def _split_path(path: str) -> list[str]:
    return [p for p in (path or "/").split("/") if p]


class CollectionMirror:
    """Local copy of the collection, maintained from streaming put/patch events."""

    def __init__(self) -> None:
        self.children: dict[str, Any] = {}

    def apply(self, event: str, payload: dict[str, Any]) -> None:
        parts = _split_path(str(payload.get("path", "/")))
        data = payload.get("data")
        if event == "put":
            self._set(parts, data)
        elif event == "patch":
            if not isinstance(data, dict):
                raise ValueError("patch event data must be an object")
            for sub, value in data.items():
                self._set(parts + _split_path(str(sub)), value)
        else:
            raise ValueError(f"Unsupported event: {event}")

    def _set(self, parts: list[str], value: Any) -> None:
        if not parts:
            self.children = copy.deepcopy(as_children(value))
            return

        top = parts[0]
        if len(parts) == 1:
            if value is None:
                self.children.pop(top, None)
            else:
                self.children[top] = copy.deepcopy(value)
            return

        node = self.children.get(top)
        if not isinstance(node, dict):
            if value is None:
                return
            node = {}
            self.children[top] = node

        cursor = node
        for part in parts[1:-1]:
            nxt = cursor.get(part)
            if not isinstance(nxt, dict):
                if value is None:
                    return
                nxt = {}
                cursor[part] = nxt
            cursor = nxt

        if value is None:
            cursor.pop(parts[-1], None)
        else:
            cursor[parts[-1]] = copy.deepcopy(value)

        # Firebase drops nodes that lose their last field.
        if not node:
            self.children.pop(top, None)

    def entries(self) -> list[tuple[str, TaskRecord]]:
        return decode_entries(self.children)


def _error_message(resp: httpx.Response) -> str:
    with contextlib.suppress(ValueError):
        body = resp.json()
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
    return resp.reason_phrase or f"HTTP {resp.status_code}"


class FirebaseSubscription:
    """Streaming listener running on its own daemon thread."""

    def __init__(
        self,
        store: FirebaseRemoteStore,
        on_change: ChangeHandler,
        on_error: ErrorHandler,
    ) -> None:
        self._store = store
        self._on_change = on_change
        self._on_error = on_error
        self._stop = threading.Event()
        self._client: httpx.Client | None = None
        self._mirror = CollectionMirror()
        self.thread = threading.Thread(target=self._run, name="firebase-stream", daemon=True)

    @property
    def active(self) -> bool:
        return not self._stop.is_set()

    def start(self) -> None:
        self.thread.start()

    def unsubscribe(self) -> None:
        if self._stop.is_set():
            return
        self._stop.set()
        client = self._client
        if client is not None:
            # Unblocks iter_lines() on the stream thread.
            with contextlib.suppress(Exception):
                client.close()
        self._store._drop_subscription(self)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)

    def _deliver(self, entries: list[tuple[str, TaskRecord]]) -> None:
        self._store._dispatch(lambda: self.active and self._on_change(entries))

    def _fail(self, err: RemoteError) -> None:
        logger.warning("Task stream error: %s", err)
        self._store._dispatch(lambda: self.active and self._on_error(err))

    def _handle(self, ev: StreamEvent) -> bool:
        """Process one event. Returns False when the connection should be reopened."""
        if ev.event in ("put", "patch"):
            try:
                payload = json.loads(ev.data)
                if not isinstance(payload, dict):
                    raise ValueError("event payload must be an object")
                self._mirror.apply(ev.event, payload)
            except ValueError as e:
                self._fail(RemoteError(f"Malformed {ev.event} event: {e}"))
                return True
            self._deliver(self._mirror.entries())
            return True
        if ev.event == "keep-alive":
            return True
        if ev.event == "cancel":
            self._fail(RemoteError(f"Stream cancelled by server: {ev.data or 'permission denied'}"))
            return False
        if ev.event == "auth_revoked":
            self._fail(RemoteError("Stream credential expired", status_code=401))
            return False
        logger.debug("Ignoring stream event %r", ev.event)
        return True

    def _run(self) -> None:
        store = self._store
        logger.info("Task stream started url=%s", store.collection_url)
        while not self._stop.is_set():
            self._client = store._make_client(
                timeout=httpx.Timeout(store.timeout, read=STREAM_READ_TIMEOUT_SECONDS)
            )
            try:
                with self._client.stream(
                    "GET",
                    store.collection_url,
                    params=store._params(),
                    headers={"Accept": "text/event-stream"},
                    follow_redirects=True,
                ) as resp:
                    if resp.status_code >= 400:
                        resp.read()
                        raise RemoteError(
                            f"Stream rejected: {_error_message(resp)}",
                            status_code=resp.status_code,
                        )
                    for ev in iter_sse_events(resp.iter_lines()):
                        if self._stop.is_set() or not self._handle(ev):
                            break
            except RemoteError as e:
                self._fail(e)
            except httpx.HTTPError as e:
                if not self._stop.is_set():
                    self._fail(RemoteError(f"Stream connection failed: {e}"))
            finally:
                with contextlib.suppress(Exception):
                    self._client.close()

            if self._stop.wait(store.reconnect_delay):
                break
            logger.info("Reconnecting task stream...")
        logger.info("Task stream stopped.")


class FirebaseRemoteStore:
    """
    RemoteStore over the Firebase Realtime Database REST API.

    `transport` is passed to every httpx.Client (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        database_url: str,
        *,
        collection: str = "Tasks",
        auth: str | None = None,
        timeout: float = 10.0,
        reconnect_delay: float = 3.0,
        dispatch: Dispatch = immediate_dispatch,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        base = (database_url or "").strip().rstrip("/")
        if not base:
            raise ConfigurationError("Firebase database URL is not set (TODO_DATABASE_URL)")
        if not base.startswith(("https://", "http://")):
            raise ConfigurationError(f"Firebase database URL must be http(s): {base!r}")

        self.database_url = base
        self.collection = collection.strip("/") or "Tasks"
        self.timeout = float(timeout)
        self.reconnect_delay = float(reconnect_delay)
        self._auth = auth or None
        self._dispatch = dispatch
        self._transport = transport
        self._client = self._make_client(timeout=httpx.Timeout(self.timeout))
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="firebase-io")
        self._subs: list[FirebaseSubscription] = []
        self._lock = threading.Lock()

    # ---- low-level helpers ----

    @property
    def collection_url(self) -> str:
        return f"{self.database_url}/{quote(self.collection)}.json"

    def child_url(self, key: str) -> str:
        return f"{self.database_url}/{quote(self.collection)}/{quote(key, safe='')}.json"

    def _make_client(self, *, timeout: httpx.Timeout) -> httpx.Client:
        return httpx.Client(timeout=timeout, transport=self._transport)

    def _params(self) -> dict[str, str]:
        return {"auth": self._auth} if self._auth else {}

    def _request(self, method: str, key: str, body: Any = None) -> httpx.Response:
        kwargs: dict[str, Any] = {"params": self._params()}
        if body is not None:
            kwargs["json"] = body
        try:
            resp = self._client.request(method, self.child_url(key), **kwargs)
        except httpx.HTTPError as e:
            raise RemoteError(f"{method} {key!r} failed: {e}", key=key) from e
        if resp.status_code >= 400:
            raise RemoteError(
                f"{method} {key!r} rejected: {_error_message(resp)}",
                key=key,
                status_code=resp.status_code,
            )
        return resp

    def _submit(self, job: Callable[[], None], on_error: ErrorHandler | None) -> None:
        def run() -> None:
            try:
                job()
            except RemoteError as e:
                if on_error is None:
                    logger.error("Remote operation failed: %s", e)
                else:
                    self._dispatch(lambda: on_error(e))
            except Exception:
                logger.exception("Remote job crashed.")

        self._executor.submit(run)

    def _drop_subscription(self, sub: FirebaseSubscription) -> None:
        with self._lock:
            with contextlib.suppress(ValueError):
                self._subs.remove(sub)

    # ---- public API ----

    def subscribe_all(self, on_change: ChangeHandler, on_error: ErrorHandler) -> FirebaseSubscription:
        sub = FirebaseSubscription(self, on_change, on_error)
        with self._lock:
            self._subs.append(sub)
        sub.start()
        return sub

    def fetch_once(self, key: str, on_result: FetchHandler, on_error: ErrorHandler) -> None:
        def job() -> None:
            resp = self._request("GET", key)
            try:
                raw = resp.json()
            except ValueError as e:
                raise RemoteError(f"GET {key!r} returned invalid JSON", key=key) from e
            if raw is None:
                self._dispatch(lambda: on_result(None))
                return
            try:
                record = TaskRecord.from_remote(raw)
            except ValueError as e:
                raise RemoteError(f"Malformed task at {key!r}: {e}", key=key) from e
            self._dispatch(lambda: on_result(record))

        self._submit(job, on_error)

    def write(self, key: str, record: TaskRecord, on_error: ErrorHandler | None = None) -> None:
        body = record.to_remote()
        self._submit(lambda: self._request("PUT", key, body), on_error)
        logger.debug("PUT queued key=%s priority=%s", key, int(record.priority))

    def update(
        self,
        key: str,
        description: str,
        priority: Priority,
        on_error: ErrorHandler | None = None,
    ) -> None:
        body = {"description": description, "priority": int(priority)}
        self._submit(lambda: self._request("PATCH", key, body), on_error)
        logger.debug("PATCH queued key=%s", key)

    def delete_many(self, keys: Iterable[str], on_error: ErrorHandler | None = None) -> None:
        # One request per key; a failed delete does not stop the others.
        keys = list(keys)
        for key in keys:
            self._submit(lambda key=key: self._request("DELETE", key), on_error)
        logger.debug("DELETE queued for %s", keys)

    def flush(self, timeout: float | None = None) -> None:
        """Block until every one-shot request issued so far has finished."""
        done = threading.Event()
        self._executor.submit(done.set)
        done.wait(timeout)

    def close(self) -> None:
        with self._lock:
            subs = list(self._subs)
        for sub in subs:
            sub.unsubscribe()
        self._executor.shutdown(wait=True)
        with contextlib.suppress(Exception):
            self._client.close()
