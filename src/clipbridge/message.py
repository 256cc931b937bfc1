#!/usr/bin/env python3
"""Wire messages exchanged between peers and the relay.

Two message variants exist:
- Hello: sent by a peer right after connecting, carries its host name.
- Clip: carries clipboard text and the SHA-256 digest of that text.

On the wire each message is a JSON object with fields ``type``, ``ts``,
``host``, then ``text`` and ``hash`` for clips, and finally ``sig``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from clipbridge.auth import Authenticator

logger = logging.getLogger(__name__)


class MessageType(str, Enum):
    """Value of the ``type`` field."""

    HELLO = "hello"
    CLIP = "clip"


class MalformedMessage(Exception):
    """Raised when frame bytes do not decode to a well-formed message."""


def now_timestamp() -> str:
    """Return the current UTC time as ISO-8601 with milliseconds and ``Z``."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Hello:
    """Announcement a peer sends on every new connection."""

    origin: str
    timestamp: str

    def to_fields(self) -> dict[str, Any]:
        return {
            "type": MessageType.HELLO.value,
            "ts": self.timestamp,
            "host": self.origin,
        }


@dataclass(frozen=True)
class Clip:
    """Clipboard update."""

    origin: str
    timestamp: str
    text: str
    content_hash: str

    def to_fields(self) -> dict[str, Any]:
        return {
            "type": MessageType.CLIP.value,
            "ts": self.timestamp,
            "host": self.origin,
            "text": self.text,
            "hash": self.content_hash,
        }


Message = Union[Hello, Clip]


def encode_message(message: Message, authenticator: Authenticator) -> bytes:
    """Serialize and sign a message for sending.

    Args:
        message: The finalized message.
        authenticator: Signs the canonical field serialization.

    Returns:
        UTF-8 JSON bytes with ``sig`` as the last field.
    """
    signed = authenticator.sign_fields(message.to_fields())
    return json.dumps(signed, ensure_ascii=False, separators=(",", ":")).encode(
        "utf-8"
    )


def decode_fields(raw: bytes) -> dict[str, Any]:
    """Decode frame bytes into a JSON object, preserving field order.

    Args:
        raw: Frame payload bytes.

    Returns:
        The decoded object.

    Raises:
        MalformedMessage: If the bytes are not UTF-8 JSON describing an object.
    """
    try:
        fields = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise MalformedMessage(f"Undecodable frame: {e}") from e
    if not isinstance(fields, dict):
        raise MalformedMessage(f"Expected JSON object, got {type(fields).__name__}")
    return fields


def _require_str(fields: dict[str, Any], name: str) -> str:
    value = fields.get(name)
    if not isinstance(value, str):
        raise MalformedMessage(f"Field {name!r} missing or not a string")
    return value


def message_from_fields(fields: dict[str, Any]) -> Message:
    """Build the message variant described by decoded fields.

    Args:
        fields: Decoded (and normally already verified) message object.

    Returns:
        Hello or Clip.

    Raises:
        MalformedMessage: On unknown ``type`` or missing/mistyped fields.
    """
    kind = fields.get("type")
    origin = _require_str(fields, "host")
    timestamp = _require_str(fields, "ts")
    if kind == MessageType.HELLO.value:
        return Hello(origin=origin, timestamp=timestamp)
    if kind == MessageType.CLIP.value:
        return Clip(
            origin=origin,
            timestamp=timestamp,
            text=_require_str(fields, "text"),
            content_hash=_require_str(fields, "hash"),
        )
    raise MalformedMessage(f"Unknown message type {kind!r}")


def parse_verified(raw: bytes, authenticator: Authenticator) -> Message | None:
    """Decode, verify and build a message, or return None to drop it.

    Malformed and unauthenticated input are indistinguishable to the caller:
    both yield None and nothing is reported to the sender.

    Args:
        raw: Frame payload bytes.
        authenticator: Verifies the ``sig`` field.

    Returns:
        The message, or None if it must be silently discarded.
    """
    try:
        fields = decode_fields(raw)
    except MalformedMessage as e:
        logger.debug("Dropping malformed frame: %s", e)
        return None
    if not authenticator.verify(fields):
        logger.debug("Dropping frame with invalid signature")
        return None
    try:
        return message_from_fields(fields)
    except MalformedMessage as e:
        logger.debug("Dropping signed but malformed message: %s", e)
        return None
