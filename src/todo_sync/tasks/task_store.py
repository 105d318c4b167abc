# src/todo_sync/tasks/task_store.py

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Sequence

from ..errors import InvalidKeyFormat, NotFound
from .task_models import TaskRecord

logger = logging.getLogger(__name__)

Entry = tuple[str, TaskRecord]

_DECIMAL_KEY = re.compile(r"[+-]?[0-9]+")


def next_key(keys: Sequence[str]) -> str:
    """
    Key-generation policy for new tasks.

    - no keys          -> "0"
    - otherwise        -> str(int(last) + 1), `last` being the last key in display order

    Keys are assumed to be contiguous decimal integers that are never reused.
    Deleting the tail and then adding a task hands out the deleted key again.
    """
    if not keys:
        return "0"
    last = keys[-1]
    if not isinstance(last, str) or not _DECIMAL_KEY.fullmatch(last.strip()):
        raise InvalidKeyFormat(str(last))
    return str(int(last) + 1)


class KeyedTaskStore:
    """
    Local mirror of the remote task collection.

    The mirror is rebuilt wholesale from each change notification (no patching),
    so the only writer is replace_all(). Contents are held in an immutable tuple
    that is swapped in one assignment; readers never see a half-applied refresh.
    """

    def __init__(self, entries: Iterable[Entry] = ()) -> None:
        self._entries: tuple[Entry, ...] = ()
        self._index: dict[str, TaskRecord] = {}
        if entries:
            self.replace_all(entries)

    def replace_all(self, entries: Iterable[Entry]) -> None:
        new_entries = tuple((str(k), rec) for k, rec in entries)
        index: dict[str, TaskRecord] = {}
        for key, rec in new_entries:
            if key in index:
                raise ValueError(f"Duplicate key in refresh: {key!r}")
            if not isinstance(rec, TaskRecord):
                raise TypeError(f"Expected TaskRecord for key {key!r}, got {type(rec).__name__}")
            index[key] = rec

        self._entries, self._index = new_entries, index
        logger.debug("Task mirror replaced: %d entries", len(new_entries))

    def get(self, key: str) -> TaskRecord:
        try:
            return self._index[key]
        except KeyError:
            raise NotFound(key) from None

    def key_at(self, index: int) -> str:
        """Key of the row at a 0-based display position."""
        if index < 0 or index >= len(self._entries):
            raise NotFound(f"#{index}")
        return self._entries[index][0]

    def keys(self) -> list[str]:
        return [k for k, _ in self._entries]

    def items(self) -> tuple[Entry, ...]:
        return self._entries

    def next_key(self) -> str:
        return next_key(self.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)
