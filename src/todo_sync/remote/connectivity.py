# src/todo_sync/remote/connectivity.py

from __future__ import annotations

import logging
import socket

import httpx

logger = logging.getLogger(__name__)


class TcpConnectivityProbe:
    """
    "Is the network reachable" gate, consulted once before the first subscription.

    Opens (and immediately closes) a TCP connection to the database host.
    """

    def __init__(self, url: str, *, timeout: float = 3.0) -> None:
        parsed = httpx.URL(url)
        self.host = parsed.host
        self.port = parsed.port or (443 if parsed.scheme == "https" else 80)
        self.timeout = float(timeout)

    def is_reachable(self) -> bool:
        if not self.host:
            return False
        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout):
                return True
        except OSError as e:
            logger.info("Network unreachable (%s:%s): %s", self.host, self.port, e)
            return False


class AlwaysOnline:
    """Probe for local backends, which need no network."""

    def is_reachable(self) -> bool:
        return True
