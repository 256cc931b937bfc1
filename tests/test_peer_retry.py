#!/usr/bin/env python3
"""Tests for peer connection and reconnection logic."""
import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from conftest import FakeClipboard, make_writer

from clipbridge.auth import Authenticator
from clipbridge.hashing import compute_hash
from clipbridge.message import Clip, encode_message
from clipbridge.peer_retry import connect_to_relay, run_peer_connection, run_peer_session
from clipbridge.peer_state import ConnectionState, PeerState
from clipbridge.protocol import ProtocolError, encode_netstring


class StopPeer(Exception):
    """Non-transport error used to break out of the retry loop."""


def make_reader(data: bytes) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    reader.feed_data(data)
    reader.feed_eof()
    return reader


@pytest.mark.asyncio
async def test_connect_to_relay_success() -> None:
    """Test connect_to_relay returns reader/writer on success."""
    mock_reader = AsyncMock()
    mock_writer = AsyncMock()

    with patch("asyncio.open_connection", new_callable=AsyncMock) as mock_open:
        mock_open.return_value = (mock_reader, mock_writer)
        reader, writer = await connect_to_relay("relay.local", 8765)

        mock_open.assert_called_once_with("relay.local", 8765)
        assert reader is mock_reader
        assert writer is mock_writer


@pytest.mark.asyncio
async def test_connect_to_relay_failure_raises_connection_error() -> None:
    """Test connect_to_relay raises ConnectionError on failure."""
    with patch("asyncio.open_connection", new_callable=AsyncMock) as mock_open:
        mock_open.side_effect = OSError("Name or service not known")

        with pytest.raises(ConnectionError) as exc_info:
            await connect_to_relay("nowhere", 8765)

        assert "Name or service not known" in str(exc_info.value)


@pytest.mark.asyncio
async def test_session_sends_hello_applies_clip_and_disconnects(
    peer_state: PeerState, clipboard: FakeClipboard, authenticator: Authenticator
) -> None:
    """Test one session: hello out, remote clip applied, EOF ends it."""
    clip = Clip(origin="host-b", timestamp="t", text="remote", content_hash=compute_hash("remote"))
    reader = make_reader(encode_netstring(encode_message(clip, authenticator)))
    writer = make_writer()
    states: list[ConnectionState] = []

    def record_write(_frame: bytes) -> None:
        states.append(peer_state.connection_state)

    writer.write.side_effect = record_write

    with patch("clipbridge.peer_retry.connect_to_relay", new_callable=AsyncMock) as mock_conn:
        mock_conn.return_value = (reader, writer)
        with pytest.raises(ConnectionError):
            await run_peer_session("relay", 8765, peer_state)

    assert b'"type":"hello"' in writer.write.call_args_list[0].args[0]
    assert states == [ConnectionState.CONNECTED]
    assert clipboard.text == "remote"
    assert peer_state.connection_state is ConnectionState.DISCONNECTED
    assert peer_state.writer is None
    writer.close.assert_called_once()


@pytest.mark.asyncio
async def test_session_connect_failure_leaves_disconnected(peer_state: PeerState) -> None:
    """Test a refused connection returns the state machine to DISCONNECTED."""
    with patch("clipbridge.peer_retry.connect_to_relay", new_callable=AsyncMock) as mock_conn:
        mock_conn.side_effect = ConnectionError("refused")
        with pytest.raises(ConnectionError):
            await run_peer_session("relay", 8765, peer_state)

    assert peer_state.connection_state is ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_connection_retries_transport_failures(peer_state: PeerState) -> None:
    """Test connect errors, drops and framing errors all lead to a retry."""
    with patch("clipbridge.peer_retry.run_peer_session", new_callable=AsyncMock) as mock_session:
        mock_session.side_effect = [
            ConnectionError("refused"),
            OSError("unreachable"),
            ProtocolError("bad frame"),
            StopPeer(),
        ]
        with pytest.raises(StopPeer):
            await run_peer_connection("relay", 8765, peer_state)

    assert mock_session.await_count == 4


@pytest.mark.asyncio
async def test_connection_waits_fixed_delay(peer_state: PeerState) -> None:
    """Test every retry waits the same reconnect delay."""
    peer_state.reconnect_delay = 0.05
    loop = asyncio.get_running_loop()
    started: list[float] = []

    async def fail(*_args: object) -> None:
        started.append(loop.time())
        if len(started) == 4:
            raise StopPeer()
        raise ConnectionError("refused")

    with patch("clipbridge.peer_retry.run_peer_session", side_effect=fail):
        with pytest.raises(StopPeer):
            await run_peer_connection("relay", 8765, peer_state)

    gaps = [b - a for a, b in zip(started, started[1:])]
    assert all(gap >= 0.045 for gap in gaps)
    assert all(gap < 0.5 for gap in gaps)


@pytest.mark.asyncio
async def test_hash_state_survives_reconnect(peer_state: PeerState) -> None:
    """Test hashes recorded before a drop are kept for the next session."""
    peer_state.hash_state.record_sent("sent")
    peer_state.hash_state.record_applied("applied")

    with patch("clipbridge.peer_retry.run_peer_session", new_callable=AsyncMock) as mock_session:
        mock_session.side_effect = [ConnectionError("drop"), StopPeer()]
        with pytest.raises(StopPeer):
            await run_peer_connection("relay", 8765, peer_state)

    assert peer_state.hash_state.last_local_hash == "sent"
    assert peer_state.hash_state.last_applied_hash == "applied"
