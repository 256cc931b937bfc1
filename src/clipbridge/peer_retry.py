#!/usr/bin/env python3
"""Peer connection and reconnection logic for clipbridge.

This module drives the peer's connection state machine:
DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED -> ...

Reconnection uses tenacity with a fixed wait and no stop condition, so a
peer keeps trying until the process exits. Hash state survives reconnects:
content sent or applied before a drop is not resent afterwards.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from tenacity import AsyncRetrying, retry_if_exception_type, stop_never, wait_fixed

from clipbridge.peer_handlers import send_hello
from clipbridge.peer_loop import receive_loop
from clipbridge.peer_state import ConnectionState
from clipbridge.protocol import ProtocolError

if TYPE_CHECKING:
    from tenacity import RetryCallState

    from clipbridge.peer_state import PeerState

logger = logging.getLogger(__name__)

# Failures that end a session and trigger a reconnect.
TRANSPORT_ERRORS = (ConnectionError, OSError, ProtocolError)


async def connect_to_relay(
    host: str,
    port: int,
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Open a TCP connection to the relay.

    Args:
        host: Relay host name or address.
        port: Relay port.

    Returns:
        Tuple of (StreamReader, StreamWriter) for the connection.

    Raises:
        ConnectionError: If connection fails (refused, unreachable, etc).
    """
    try:
        return await asyncio.open_connection(host, port)
    except OSError as e:
        raise ConnectionError(f"Failed to connect to {host}:{port}: {e}") from e


async def run_peer_session(host: str, port: int, state: PeerState) -> None:
    """Connect once, announce ourselves and apply inbound frames until the
    connection ends.

    Args:
        host: Relay host.
        port: Relay port.
        state: The peer state.

    Raises:
        ConnectionError, OSError, ProtocolError: When the session ends.
    """
    state.connection_state = ConnectionState.CONNECTING
    logger.debug("Connecting to relay at %s:%d", host, port)
    try:
        reader, writer = await connect_to_relay(host, port)
    except ConnectionError:
        state.detach()
        raise

    state.attach(writer)
    logger.info("Connected to relay at %s:%d", host, port)
    try:
        await send_hello(state, writer)
        await receive_loop(state, reader)
    finally:
        state.detach()
        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError):
            pass


def _log_retry(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    error = outcome.exception() if outcome is not None else None
    logger.warning(
        "Disconnected from relay (%s), reconnecting in %.1fs",
        error,
        retry_state.next_action.sleep if retry_state.next_action else 0.0,
    )


async def run_peer_connection(host: str, port: int, state: PeerState) -> None:
    """Keep a relay session alive forever.

    After any transport failure the peer is DISCONNECTED, waits
    state.reconnect_delay seconds, and connects again. There is no retry
    limit and the delay never grows.

    Args:
        host: Relay host.
        port: Relay port.
        state: The peer state.
    """
    retrying = AsyncRetrying(
        wait=wait_fixed(state.reconnect_delay),
        retry=retry_if_exception_type(TRANSPORT_ERRORS),
        stop=stop_never,
        before_sleep=_log_retry,
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            await run_peer_session(host, port, state)
