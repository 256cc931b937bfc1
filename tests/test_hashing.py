#!/usr/bin/env python3
"""
Unit tests for SHA-256 hashing and HashState loop prevention.

Tests compute_hash for consistent output and HashState for proper
duplicate, echo and bounce-back detection.
"""
import hashlib

from clipbridge.hashing import HashState, compute_hash


def test_compute_hash_produces_sha256_hex() -> None:
    """Test compute_hash returns 64-character hex SHA-256 digest."""
    result = compute_hash("test content")
    assert len(result) == 64
    assert all(c in "0123456789abcdef" for c in result)


def test_compute_hash_is_sha256_of_utf8() -> None:
    """Test digest is taken over the UTF-8 encoding of the text."""
    text = "héllo ✓"
    assert compute_hash(text) == hashlib.sha256(text.encode("utf-8")).hexdigest()


def test_compute_hash_consistent_output() -> None:
    """Test same input always produces same hash."""
    assert compute_hash("Hello world!") == compute_hash("Hello world!")


def test_compute_hash_different_for_different_input() -> None:
    """Test different inputs produce different hashes."""
    assert compute_hash("content A") != compute_hash("content B")


def test_hashstate_initial_values() -> None:
    """Test HashState initializes with None hashes."""
    state = HashState()
    assert state.last_local_hash is None
    assert state.last_applied_hash is None


def test_hashstate_should_send_new_content() -> None:
    """Test should_send returns True for new content."""
    state = HashState()
    assert state.should_send("abc123") is True


def test_hashstate_should_send_false_for_duplicate() -> None:
    """Test should_send returns False when hash matches last_local_hash."""
    state = HashState()
    state.record_sent("abc123")
    assert state.should_send("abc123") is False


def test_hashstate_should_send_false_for_bounce_back() -> None:
    """Test should_send returns False when hash matches last_applied_hash."""
    state = HashState()
    state.record_applied("abc123")
    assert state.should_send("abc123") is False


def test_hashstate_claim_send_records_hash() -> None:
    """Test claim_send succeeds once and then refuses the same hash."""
    state = HashState()
    assert state.claim_send("abc123") is True
    assert state.last_local_hash == "abc123"
    assert state.claim_send("abc123") is False


def test_hashstate_claim_send_refuses_applied_hash() -> None:
    """Test claim_send leaves last_local_hash alone for a bounce-back."""
    state = HashState()
    state.record_applied("abc123")
    assert state.claim_send("abc123") is False
    assert state.last_local_hash is None


def test_hashstate_is_echo() -> None:
    """Test is_echo matches only the last sent hash."""
    state = HashState()
    state.record_sent("sent")
    state.record_applied("applied")
    assert state.is_echo("sent") is True
    assert state.is_echo("applied") is False
