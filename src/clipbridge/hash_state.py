#!/usr/bin/env python3
"""
Hash state for echo and bounce-back suppression.

A peer tracks two digests:
- last_local_hash: content this peer last sent to the relay. An inbound clip
  carrying this digest is our own message echoed back and is never applied.
  It also stops the poller from resending unchanged content.
- last_applied_hash: content this peer last wrote to its clipboard because it
  arrived from the network. The next poll reads that content back and must
  not send it again.

The receive task and the poll task both touch these fields, so every
compare-and-record happens under a lock.
"""
import threading
from dataclasses import dataclass, field


@dataclass
class HashState:
    """
    Track hashes for loop prevention.

    Attributes:
        last_local_hash: SHA-256 hex digest of last sent content, or None.
        last_applied_hash: SHA-256 hex digest of last applied remote content,
            or None.
    """

    last_local_hash: str | None = None
    last_applied_hash: str | None = None
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def should_send(self, current_hash: str) -> bool:
        """
        Check if polled content should be sent.

        Returns False if current_hash matches last_local_hash (unchanged since
        the last send) or last_applied_hash (bounce-back of a remote update).

        Args:
            current_hash: SHA-256 hex digest of current clipboard content.

        Returns:
            True if content should be sent, False if duplicate or bounce-back.
        """
        with self._lock:
            return self._should_send(current_hash)

    def _should_send(self, current_hash: str) -> bool:
        if current_hash == self.last_local_hash:
            return False
        if current_hash == self.last_applied_hash:
            return False
        return True

    def claim_send(self, current_hash: str) -> bool:
        """
        Atomically check should_send and record the hash as sent.

        The hash is recorded before the bytes go out so a later poll tick
        never resends identical content, even if this send is still draining.

        Args:
            current_hash: SHA-256 hex digest of current clipboard content.

        Returns:
            True if the caller now owns the send, False if it must skip.
        """
        with self._lock:
            if not self._should_send(current_hash):
                return False
            self.last_local_hash = current_hash
            return True

    def record_sent(self, hash_value: str) -> None:
        """
        Record hash of content sent to the relay.

        Args:
            hash_value: SHA-256 hex digest of sent content.
        """
        with self._lock:
            self.last_local_hash = hash_value

    def is_echo(self, hash_value: str) -> bool:
        """
        Check if an inbound clip is our own content echoed by the relay.

        Args:
            hash_value: Digest carried by the inbound clip message.

        Returns:
            True if hash_value equals last_local_hash.
        """
        with self._lock:
            return hash_value == self.last_local_hash

    def record_applied(self, hash_value: str) -> None:
        """
        Record hash of remote content written to the local clipboard.

        Call only after the clipboard write succeeded.

        Args:
            hash_value: Digest carried by the applied clip message.
        """
        with self._lock:
            self.last_applied_hash = hash_value
