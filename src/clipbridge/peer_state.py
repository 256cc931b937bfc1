#!/usr/bin/env python3
"""Peer synchronization state.

This module provides the PeerState dataclass shared by the two peer tasks:
the connection task (connect, receive, apply) and the clipboard poller.
They communicate only through the hash state and the current writer.
"""

from __future__ import annotations

import asyncio
import socket
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable

from clipbridge.clipboard_io import read_clipboard_text, write_clipboard_text
from clipbridge.hashing import HashState
from clipbridge.peer_constants import POLL_INTERVAL, RECONNECT_DELAY

if TYPE_CHECKING:
    from clipbridge.auth import Authenticator


class ConnectionState(Enum):
    """Where the peer is in its connect / reconnect cycle."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass
class PeerState:
    """State for one peer agent.

    Attributes:
        authenticator: Signs outbound and verifies inbound messages.
        origin: Host identifier placed in every outbound message.
        hash_state: Echo and bounce-back tracking.
        connection_state: Current position in the connection state machine.
        writer: Writer of the live relay connection, or None.
        read_clipboard: Coroutine returning local clipboard text ("" on failure).
        write_clipboard: Coroutine writing local clipboard text, True on success.
        poll_interval: Seconds between clipboard polls.
        reconnect_delay: Seconds to wait before each reconnect attempt.
        clipboard_lock: Serializes clipboard read/compare against write/record.
        send_lock: Serializes frame writes on the connection.
    """

    authenticator: Authenticator
    origin: str = field(default_factory=socket.gethostname)
    hash_state: HashState = field(default_factory=HashState)
    connection_state: ConnectionState = ConnectionState.DISCONNECTED
    writer: asyncio.StreamWriter | None = None
    read_clipboard: Callable[[], Awaitable[str]] = read_clipboard_text
    write_clipboard: Callable[[str], Awaitable[bool]] = write_clipboard_text
    poll_interval: float = POLL_INTERVAL
    reconnect_delay: float = RECONNECT_DELAY
    clipboard_lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    send_lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def attach(self, writer: asyncio.StreamWriter) -> None:
        """Enter CONNECTED with a fresh relay writer."""
        self.writer = writer
        self.connection_state = ConnectionState.CONNECTED

    def detach(self) -> None:
        """Enter DISCONNECTED and forget the writer."""
        self.writer = None
        self.connection_state = ConnectionState.DISCONNECTED

    def open_writer(self) -> asyncio.StreamWriter | None:
        """Return the writer if the connection is currently open, else None."""
        writer = self.writer
        if self.connection_state is not ConnectionState.CONNECTED:
            return None
        if writer is None or writer.is_closing():
            return None
        return writer
