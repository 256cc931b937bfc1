#!/usr/bin/env python3
"""
HMAC-SHA256 message authentication.

A message is signed over its canonical serialization: the JSON object of
every field except ``sig``, in field order, with compact separators and
non-ASCII text kept as UTF-8. The hex digest is then attached as ``sig``.

Verification rebuilds the same serialization from whatever fields arrived
(in their received order), so relay and peers agree as long as they share
the secret. An empty secret never verifies anything.
"""
from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any, Mapping

SIGNATURE_FIELD = "sig"


def canonical_payload(fields: Mapping[str, Any]) -> bytes:
    """
    Serialize message fields, minus the signature, for signing.

    Args:
        fields: Message fields in wire order.

    Returns:
        UTF-8 bytes of the compact JSON object.

    Raises:
        TypeError: If a field value is not JSON-serializable.
        ValueError: If a field value cannot be encoded (e.g. circular data).
    """
    unsigned = {k: v for k, v in fields.items() if k != SIGNATURE_FIELD}
    return json.dumps(
        unsigned, ensure_ascii=False, separators=(",", ":")
    ).encode("utf-8")


class Authenticator:
    """Sign and verify messages with a process-wide shared secret."""

    def __init__(self, secret: bytes) -> None:
        self._secret = secret

    def sign(self, payload: bytes) -> str:
        """
        Compute the HMAC-SHA256 hex digest of a serialized payload.

        Args:
            payload: Canonical serialization of the unsigned fields.

        Returns:
            Lowercase hex signature.
        """
        return hmac.new(self._secret, payload, hashlib.sha256).hexdigest()

    def sign_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """
        Return a copy of fields with ``sig`` appended as the last key.

        Args:
            fields: Finalized message fields without a signature.

        Returns:
            New dict with all fields followed by ``sig``.
        """
        signed = {k: v for k, v in fields.items() if k != SIGNATURE_FIELD}
        signed[SIGNATURE_FIELD] = self.sign(canonical_payload(signed))
        return signed

    def verify(self, fields: Any) -> bool:
        """
        Check the ``sig`` field against the recomputed signature.

        Never raises: anything that is not a mapping with a non-empty string
        signature matching the recomputed one is simply not verified.

        Args:
            fields: Decoded message object.

        Returns:
            True only for a correctly signed message under this secret.
        """
        if not self._secret:
            return False
        if not isinstance(fields, Mapping):
            return False
        sig = fields.get(SIGNATURE_FIELD)
        if not isinstance(sig, str) or not sig:
            return False
        try:
            expected = self.sign(canonical_payload(fields))
            return hmac.compare_digest(expected.encode("ascii"), sig.encode("utf-8"))
        except (TypeError, ValueError):
            return False
