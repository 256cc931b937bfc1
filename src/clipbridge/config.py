#!/usr/bin/env python3
"""Process configuration for clipbridge.

The shared secret is the only required setting. It is read from the
--secret option or the CLIPBRIDGE_SECRET environment variable and must be
identical on the relay and every peer; a mismatch is not detected, it just
makes every message fail verification.
"""

from __future__ import annotations

import click

# Environment variable holding the shared HMAC secret.
SECRET_ENV_VAR: str = "CLIPBRIDGE_SECRET"

# Address the relay binds to when --host is not given.
DEFAULT_HOST: str = "0.0.0.0"

# TCP port used by both relay and peers when --port is not given.
DEFAULT_PORT: int = 8765


class ConfigurationError(click.ClickException):
    """Fatal startup misconfiguration, reported once before exiting."""

    exit_code = 1


def require_secret(secret: str | None) -> bytes:
    """Validate the shared secret and return it as HMAC key bytes.

    Args:
        secret: Secret from the command line or environment, if any.

    Returns:
        The UTF-8 encoded secret.

    Raises:
        ConfigurationError: If the secret is missing or empty.
    """
    if not secret:
        raise ConfigurationError(
            f"A shared secret is required: set {SECRET_ENV_VAR} on the relay "
            "and every peer, or pass --secret"
        )
    return secret.encode("utf-8")
