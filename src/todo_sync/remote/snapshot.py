# src/todo_sync/remote/snapshot.py

"""
Decoding of raw collection values into ordered task entries.

Firebase-style ordering: children whose keys parse as 32-bit integers come
first in numeric order, then all other keys in lexicographic order. A
collection whose keys are all small integers may come back as a JSON array
(with nulls for holes); both shapes are accepted.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from ..tasks.task_models import TaskRecord

logger = logging.getLogger(__name__)

_INT_KEY = re.compile(r"-?(0|[1-9][0-9]*)")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def child_order(key: str) -> tuple[int, int, str]:
    if _INT_KEY.fullmatch(key):
        n = int(key)
        if _INT32_MIN <= n <= _INT32_MAX:
            return (0, n, "")
    return (1, 0, key)


def as_children(raw: Any) -> dict[str, Any]:
    """Normalize a collection value (object, array or null) to a key -> child dict."""
    if raw is None:
        return {}
    if isinstance(raw, list):
        return {str(i): v for i, v in enumerate(raw) if v is not None}
    if isinstance(raw, dict):
        return {str(k): v for k, v in raw.items() if v is not None}
    raise ValueError(f"Collection value must be an object or array, got {type(raw).__name__}")


def ordered_keys(children: dict[str, Any]) -> list[str]:
    return sorted(children, key=child_order)


def decode_entries(raw: Any) -> list[tuple[str, TaskRecord]]:
    """
    Decode a collection value into (key, TaskRecord) pairs in server order.

    Children that are not task objects are skipped with a warning; one bad
    child must not hide the rest of the list.
    """
    children = as_children(raw)
    out: list[tuple[str, TaskRecord]] = []
    for key in ordered_keys(children):
        try:
            out.append((key, TaskRecord.from_remote(children[key])))
        except ValueError as e:
            logger.warning("Skipping malformed task %r: %s", key, e)
    return out
