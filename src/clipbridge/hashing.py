#!/usr/bin/env python3
"""
SHA-256 content digests for change detection and loop prevention.

Every clip message carries the digest of its text. Peers compare digests,
never raw text, to decide whether clipboard content changed since the last
send, whether an inbound message is their own echo, and whether a freshly
polled value is the bounce-back of a remote update they just applied.

This module provides:
- compute_hash(): SHA-256 hex digest of clipboard text
- HashState: lock-guarded last_local_hash / last_applied_hash pair
"""
import hashlib

from clipbridge.hash_state import HashState

__all__ = ["compute_hash", "HashState"]


def compute_hash(text: str) -> str:
    """
    Compute SHA-256 digest of clipboard text.

    The digest is taken over the UTF-8 encoding of the text, so every peer
    produces the same value for the same string.

    Args:
        text: Clipboard text to hash.

    Returns:
        Hexadecimal string representation of the SHA-256 digest.
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
