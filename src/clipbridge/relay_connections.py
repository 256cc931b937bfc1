#!/usr/bin/env python3
"""Set of peer connections held by the relay.

The relay adds a writer when a peer connects and discards it when the
connection ends. Broadcasts iterate over a snapshot, so a peer joining or
leaving mid-broadcast never disturbs the iteration.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import asyncio


class ConnectionSet:
    """Live peer writers, safe to add, discard and snapshot concurrently."""

    def __init__(self) -> None:
        self._writers: set[asyncio.StreamWriter] = set()
        self._lock = threading.Lock()

    def add(self, writer: asyncio.StreamWriter) -> None:
        """Register a newly connected peer."""
        with self._lock:
            self._writers.add(writer)

    def discard(self, writer: asyncio.StreamWriter) -> None:
        """Forget a peer. No error if it was never registered."""
        with self._lock:
            self._writers.discard(writer)

    def snapshot(self) -> list[asyncio.StreamWriter]:
        """Return the current members as a list safe to iterate."""
        with self._lock:
            return list(self._writers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._writers)

    def __contains__(self, writer: object) -> bool:
        with self._lock:
            return writer in self._writers
