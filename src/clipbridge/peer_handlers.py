#!/usr/bin/env python3
"""Peer synchronization handlers.

This module provides the handlers behind the two peer tasks:
- send_hello: announce this host on a fresh connection
- handle_inbound_frame: verify a relayed clip and apply it locally
- poll_clipboard_once: read the local clipboard and send it if it changed
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from clipbridge.hashing import compute_hash
from clipbridge.message import Clip, Hello, encode_message, now_timestamp, parse_verified
from clipbridge.protocol import validate_content_size, write_frame

if TYPE_CHECKING:
    from clipbridge.peer_state import PeerState

logger = logging.getLogger(__name__)


async def send_hello(state: PeerState, writer: asyncio.StreamWriter) -> None:
    """Send a signed hello carrying this host's identifier.

    Args:
        state: The peer state.
        writer: Writer of the connection that was just established.

    Raises:
        ConnectionError: If the connection drops while sending.
    """
    hello = Hello(origin=state.origin, timestamp=now_timestamp())
    async with state.send_lock:
        await write_frame(writer, encode_message(hello, state.authenticator))
    logger.debug("Sent hello as %s", state.origin)


async def handle_inbound_frame(state: PeerState, raw: bytes) -> bool:
    """Apply a relayed clip to the local clipboard.

    Drops, without any reply, frames that do not decode, are not signed
    with our secret, are not clips, or carry the digest of the content this
    peer last sent (its own message echoed back). On a successful write the
    digest is recorded as last applied so the poller will not bounce it
    back; a failed write is ignored.

    Args:
        state: The peer state.
        raw: Frame payload bytes.

    Returns:
        True if the clipboard was written.
    """
    message = parse_verified(raw, state.authenticator)
    if not isinstance(message, Clip):
        return False
    if state.hash_state.is_echo(message.content_hash):
        logger.debug("Ignoring echo of our own content")
        return False

    async with state.clipboard_lock:
        if not await state.write_clipboard(message.text):
            logger.debug("Could not apply content from %s", message.origin)
            return False
        state.hash_state.record_applied(message.content_hash)

    logger.debug("Applied %d chars from %s", len(message.text), message.origin)
    return True


async def poll_clipboard_once(state: PeerState) -> bool:
    """Read the local clipboard and send it to the relay if it changed.

    Content is sent only when it is non-empty, differs from what this peer
    last sent, is not what this peer last applied from the network, and the
    connection is open. Nothing is queued while disconnected.

    Args:
        state: The peer state.

    Returns:
        True if a clip message was sent.
    """
    async with state.clipboard_lock:
        text = await state.read_clipboard()
        if not text:
            return False
        try:
            current_hash = compute_hash(text)
        except UnicodeEncodeError:
            logger.debug("Clipboard text is not encodable as UTF-8, skipping")
            return False
        writer = state.open_writer()
        if writer is None:
            return False
        if not state.hash_state.claim_send(current_hash):
            return False

    clip = Clip(
        origin=state.origin,
        timestamp=now_timestamp(),
        text=text,
        content_hash=current_hash,
    )
    payload = encode_message(clip, state.authenticator)
    if not validate_content_size(payload):
        logger.warning("Clipboard content exceeds 10 MB limit, skipping")
        return False

    try:
        async with state.send_lock:
            await write_frame(writer, payload)
    except (ConnectionError, OSError) as e:
        logger.debug("Send failed, connection will be re-established: %s", e)
        return False
    logger.debug("Sent %d chars to relay", len(text))
    return True
