#!/usr/bin/env python3
"""Peer event loops.

Two loops run side by side in a peer:
- receive_loop: reads frames from the relay for as long as the connection
  lives and applies verified clips
- poll_loop: reads the local clipboard every poll interval, whether or not
  a connection is up, and sends changes when it is
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from clipbridge.peer_handlers import handle_inbound_frame, poll_clipboard_once
from clipbridge.protocol import read_netstring

if TYPE_CHECKING:
    from clipbridge.peer_state import PeerState


async def receive_loop(state: PeerState, reader: asyncio.StreamReader) -> None:
    """Apply inbound frames until the connection ends.

    Args:
        state: The peer state.
        reader: The asyncio StreamReader for the relay connection.

    Raises:
        ConnectionError: When the relay closes the connection.
        ProtocolError: On a framing violation from the relay.
    """
    while True:
        raw = await read_netstring(reader)
        await handle_inbound_frame(state, raw)


async def poll_loop(state: PeerState) -> None:
    """Poll the local clipboard forever at a fixed interval.

    Args:
        state: The peer state.
    """
    while True:
        await poll_clipboard_once(state)
        await asyncio.sleep(state.poll_interval)
