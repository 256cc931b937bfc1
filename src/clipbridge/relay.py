#!/usr/bin/env python3
"""Relay mode implementation for clipbridge.

The relay listens on a TCP address and accepts any number of peers. It
keeps no state beyond the set of live connections: every verified clip
message from one peer is forwarded, byte for byte, to all the others.

Usage:
    clipbridge --relay [--host 0.0.0.0] [--port 8765]
"""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

from clipbridge.relay_connections import ConnectionSet
from clipbridge.relay_handler import handle_peer

if TYPE_CHECKING:
    from clipbridge.auth import Authenticator


def print_startup_message(host: str, port: int) -> None:
    """Print relay startup message to stderr.

    Args:
        host: Address the listening socket is bound to.
        port: Port the listening socket is bound to.
    """
    print(f"Relay listening on {host}:{port}", file=sys.stderr)


async def start_relay(
    host: str,
    port: int,
    authenticator: Authenticator,
    connections: ConnectionSet | None = None,
) -> asyncio.Server:
    """Start listening and return the server without blocking.

    Args:
        host: Address to bind.
        port: Port to bind; 0 picks a free port.
        authenticator: Verifies inbound message signatures.
        connections: Connection set to use; a fresh one by default.

    Returns:
        The listening asyncio Server.
    """
    if connections is None:
        connections = ConnectionSet()
    return await asyncio.start_server(
        lambda r, w: handle_peer(connections, authenticator, r, w),
        host=host,
        port=port,
    )


async def run_relay(host: str, port: int, authenticator: Authenticator) -> None:
    """Run the relay until cancelled.

    Args:
        host: Address to bind.
        port: Port to bind.
        authenticator: Verifies inbound message signatures.
    """
    connections = ConnectionSet()
    server = await start_relay(host, port, authenticator, connections)
    bound_host, bound_port = server.sockets[0].getsockname()[:2]
    print_startup_message(bound_host, bound_port)
    async with server:
        try:
            await server.serve_forever()
        finally:
            for writer in connections.snapshot():
                writer.close()
