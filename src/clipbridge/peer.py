#!/usr/bin/env python3
"""Peer mode implementation for clipbridge.

A peer keeps one connection to the relay and runs two tasks: the
connection task, which reconnects forever and applies clipboard updates
from other peers, and the poller, which sends local clipboard changes.

See peer_retry.py for connection handling and peer_handlers.py for the
echo and bounce-back rules.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

from clipbridge.peer_loop import poll_loop
from clipbridge.peer_retry import run_peer_connection
from clipbridge.peer_state import PeerState

if TYPE_CHECKING:
    from clipbridge.auth import Authenticator

logger = logging.getLogger(__name__)


async def run_peer_tasks(
    host: str,
    port: int,
    state: PeerState,
    shutdown_requested: asyncio.Event,
) -> None:
    """Run the connection task and the poller until shutdown is requested.

    If either task stops on its own with an exception, the other is
    cancelled and the exception propagates.

    Args:
        host: Relay host.
        port: Relay port.
        state: The peer state.
        shutdown_requested: Event signaling graceful shutdown request.
    """
    tasks = {
        asyncio.create_task(run_peer_connection(host, port, state)),
        asyncio.create_task(poll_loop(state)),
    }
    shutdown_task = asyncio.create_task(shutdown_requested.wait())
    try:
        done, _ = await asyncio.wait(
            tasks | {shutdown_task}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in tasks | {shutdown_task}:
            task.cancel()
        await asyncio.gather(*tasks, shutdown_task, return_exceptions=True)

    for task in done & tasks:
        task.result()
    logger.debug("Peer shut down")


async def run_peer(
    host: str,
    port: int,
    authenticator: Authenticator,
    poll_interval: float,
    reconnect_delay: float,
) -> None:
    """Run peer mode connecting to a clipbridge relay.

    Main entry point for peer mode. Builds the peer state, installs
    SIGINT/SIGTERM handlers, and runs until one of them fires.

    Args:
        host: Relay host.
        port: Relay port.
        authenticator: Signs and verifies messages.
        poll_interval: Seconds between clipboard polls.
        reconnect_delay: Seconds between reconnect attempts.
    """
    state = PeerState(
        authenticator=authenticator,
        poll_interval=poll_interval,
        reconnect_delay=reconnect_delay,
    )

    # Register signal handlers for clean shutdown
    shutdown_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_requested.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_requested.set)

    await run_peer_tasks(host, port, state, shutdown_requested)
