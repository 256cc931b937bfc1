"""CLI handling for clipbridge.

This module provides the command-line interface for clipbridge, handling
argument parsing via click, logging configuration, and dispatching to relay
or peer mode based on user-specified options.

Usage:
    clipbridge --relay [--host ADDR] [--port PORT] [--verbose]
    clipbridge --peer --host RELAY [--port PORT] [--verbose]

The shared secret comes from --secret or the CLIPBRIDGE_SECRET environment
variable and must match on every process.
"""

import sys

import click

from clipbridge.config import DEFAULT_HOST, DEFAULT_PORT, SECRET_ENV_VAR, require_secret
from clipbridge.main_logging import configure_logging
from clipbridge.main_options import RELAY_MODE, ModeOption, resolve_mode
from clipbridge.peer_constants import POLL_INTERVAL, RECONNECT_DELAY

_SECONDS = click.FloatRange(min=0, min_open=True)


@click.command()
@click.option(
    "--relay",
    is_flag=True,
    cls=ModeOption,
    excludes=["peer"],
    help="Run the relay that peers connect to",
)
@click.option(
    "--peer",
    is_flag=True,
    cls=ModeOption,
    excludes=["relay"],
    help="Run a peer that syncs the local clipboard",
)
@click.option(
    "--host",
    default=None,
    help=f"Relay: address to bind (default {DEFAULT_HOST}). Peer: relay to connect to.",
)
@click.option(
    "--port",
    type=click.IntRange(1, 65535),
    default=DEFAULT_PORT,
    show_default=True,
    help="TCP port of the relay",
)
@click.option(
    "--secret",
    envvar=SECRET_ENV_VAR,
    show_envvar=True,
    help="Shared secret used to sign and verify messages",
)
@click.option(
    "--poll-interval",
    type=_SECONDS,
    default=POLL_INTERVAL,
    show_default=True,
    help="Peer: seconds between clipboard reads",
)
@click.option(
    "--reconnect-delay",
    type=_SECONDS,
    default=RECONNECT_DELAY,
    show_default=True,
    help="Peer: seconds to wait before reconnecting",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable DEBUG-level logging",
)
def main(
    relay: bool,
    peer: bool,
    host: str | None,
    port: int,
    secret: str | None,
    poll_interval: float,
    reconnect_delay: float,
    verbose: bool,
) -> None:
    """Synchronize the clipboard between machines on a local network."""
    mode = resolve_mode(relay, peer)
    if mode != RELAY_MODE and not host:
        raise click.UsageError("--host is required in peer mode")
    key = require_secret(secret)

    configure_logging(verbose)

    _run_mode(mode, host, port, key, poll_interval, reconnect_delay)


def _run_mode(
    mode: str,
    host: str | None,
    port: int,
    key: bytes,
    poll_interval: float,
    reconnect_delay: float,
) -> None:
    """Run the appropriate mode (relay or peer).

    Args:
        mode: RELAY_MODE or PEER_MODE.
        host: Bind address (relay) or relay address (peer).
        port: TCP port.
        key: Shared secret bytes.
        poll_interval: Seconds between clipboard polls (peer only).
        reconnect_delay: Seconds between reconnect attempts (peer only).
    """
    import asyncio

    from clipbridge.auth import Authenticator
    from clipbridge.peer import run_peer
    from clipbridge.relay import run_relay

    authenticator = Authenticator(key)
    try:
        if mode == RELAY_MODE:
            asyncio.run(run_relay(host or DEFAULT_HOST, port, authenticator))
        else:
            asyncio.run(
                run_peer(host, port, authenticator, poll_interval, reconnect_delay)
            )
    except KeyboardInterrupt:
        pass
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
