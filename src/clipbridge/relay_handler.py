#!/usr/bin/env python3
"""Relay per-connection handling.

Each connected peer gets its own handle_peer task. Inbound frames are
decoded and verified; hello messages are accepted and ignored, clip messages
are forwarded verbatim to every other open peer. Anything malformed or
unsigned is dropped without a reply.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from clipbridge.message import Clip, Hello, parse_verified
from clipbridge.protocol import ProtocolError, encode_netstring, read_netstring

if TYPE_CHECKING:
    from clipbridge.auth import Authenticator
    from clipbridge.relay_connections import ConnectionSet

logger = logging.getLogger(__name__)

# Seconds a peer may take to accept a forwarded frame before the relay
# gives up on it and closes its connection.
FORWARD_DRAIN_TIMEOUT: float = 5.0


def _peer_name(writer: asyncio.StreamWriter) -> str:
    peer = writer.get_extra_info("peername")
    if isinstance(peer, tuple) and len(peer) >= 2:
        return f"{peer[0]}:{peer[1]}"
    return str(peer)


async def _forward(
    connections: ConnectionSet,
    target: asyncio.StreamWriter,
    frame: bytes,
) -> bool:
    try:
        target.write(frame)
        await asyncio.wait_for(target.drain(), timeout=FORWARD_DRAIN_TIMEOUT)
    except asyncio.TimeoutError:
        logger.warning("Peer %s stopped reading, closing it", _peer_name(target))
        connections.discard(target)
        target.close()
        return False
    except (ConnectionError, OSError) as e:
        logger.debug("Forward to %s failed: %s", _peer_name(target), e)
        return False
    return True


async def broadcast(
    connections: ConnectionSet,
    sender: asyncio.StreamWriter,
    raw: bytes,
) -> int:
    """Forward a frame payload unchanged to every open peer except the sender.

    Writers that are already closing are skipped. All targets are written
    concurrently: a write failure on one peer is logged, and a peer that
    does not drain within FORWARD_DRAIN_TIMEOUT is closed and dropped, so
    neither delays delivery to the rest.

    Args:
        connections: The relay's connection set.
        sender: Writer of the connection the frame arrived on.
        raw: Original frame payload bytes as received.

    Returns:
        Number of peers the frame was written to.
    """
    frame = encode_netstring(raw)
    targets = [
        target
        for target in connections.snapshot()
        if target is not sender and not target.is_closing()
    ]
    results = await asyncio.gather(
        *(_forward(connections, target, frame) for target in targets)
    )
    return sum(results)


async def route_frame(
    connections: ConnectionSet,
    authenticator: Authenticator,
    sender: asyncio.StreamWriter,
    raw: bytes,
) -> None:
    """Act on one inbound frame from a peer.

    Args:
        connections: The relay's connection set.
        authenticator: Verifies the message signature.
        sender: Writer of the connection the frame arrived on.
        raw: Frame payload bytes.
    """
    message = parse_verified(raw, authenticator)
    if message is None:
        return
    if isinstance(message, Hello):
        logger.debug("Hello from %s (%s)", message.origin, _peer_name(sender))
        return
    if isinstance(message, Clip):
        delivered = await broadcast(connections, sender, raw)
        logger.debug(
            "Forwarded %d chars from %s to %d peer(s)",
            len(message.text),
            message.origin,
            delivered,
        )


async def handle_peer(
    connections: ConnectionSet,
    authenticator: Authenticator,
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
) -> None:
    """Serve one peer connection until it closes.

    Registers the writer, routes every inbound frame, and always removes
    the writer again. Errors end only this connection.

    Args:
        connections: The relay's connection set.
        authenticator: Verifies message signatures.
        reader: The asyncio StreamReader for the peer connection.
        writer: The asyncio StreamWriter for the peer connection.
    """
    name = _peer_name(writer)
    connections.add(writer)
    logger.info("Peer connected: %s (%d connected)", name, len(connections))
    try:
        while True:
            raw = await read_netstring(reader)
            await route_frame(connections, authenticator, writer, raw)
    except ProtocolError as e:
        logger.debug("Closing %s after framing error: %s", name, e)
    except (ConnectionError, OSError) as e:
        logger.debug("Connection from %s ended: %s", name, e)
    finally:
        connections.discard(writer)
        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError):
            pass
        logger.info("Peer disconnected: %s (%d connected)", name, len(connections))
