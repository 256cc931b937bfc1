#!/usr/bin/env python3
"""Pytest fixtures for clipbridge tests.

Provides a shared-secret authenticator, hash state, in-memory clipboards,
mock stream writers and a ready-made peer state.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from clipbridge.auth import Authenticator
from clipbridge.hashing import HashState
from clipbridge.peer_state import PeerState

SECRET = b"k"


class FakeClipboard:
    """In-memory clipboard with the read/write coroutines a peer expects."""

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.writes: list[str] = []
        self.fail_reads = False
        self.fail_writes = False

    async def read(self) -> str:
        if self.fail_reads:
            return ""
        return self.text

    async def write(self, text: str) -> bool:
        if self.fail_writes:
            return False
        self.text = text
        self.writes.append(text)
        return True


def make_writer(peername: tuple[str, int] = ("127.0.0.1", 50000)) -> MagicMock:
    """Create a mock StreamWriter that records written bytes."""
    writer = MagicMock()
    writer.write = MagicMock()
    writer.drain = AsyncMock()
    writer.close = MagicMock()
    writer.wait_closed = AsyncMock()
    writer.is_closing = MagicMock(return_value=False)
    writer.get_extra_info = MagicMock(return_value=peername)
    return writer


@pytest.fixture
def authenticator() -> Authenticator:
    """Authenticator keyed with the test secret."""
    return Authenticator(SECRET)


@pytest.fixture
def hash_state() -> HashState:
    """Create a fresh HashState instance for testing."""
    return HashState()


@pytest.fixture
def clipboard() -> FakeClipboard:
    """Empty in-memory clipboard."""
    return FakeClipboard()


@pytest.fixture
def mock_writer() -> MagicMock:
    """Mock StreamWriter of an open connection."""
    return make_writer()


@pytest.fixture
def peer_state(authenticator: Authenticator, clipboard: FakeClipboard) -> PeerState:
    """Disconnected peer state wired to the in-memory clipboard."""
    return PeerState(
        authenticator=authenticator,
        origin="host-a",
        read_clipboard=clipboard.read,
        write_clipboard=clipboard.write,
        poll_interval=0.01,
        reconnect_delay=0.01,
    )
