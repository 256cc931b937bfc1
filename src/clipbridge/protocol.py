#!/usr/bin/env python3
"""
Netstring framing for wire messages.

Every message travels as one netstring frame over the TCP stream:
<length>:<payload>, where length is ASCII decimal digits, followed by a
colon, the raw payload bytes, and a trailing comma. The payload is the
UTF-8 JSON of one signed message.

Example: "12:Hello world!," frames the 12-byte payload "Hello world!".

A clean close between frames surfaces as ConnectionError; anything
malformed, oversized or truncated surfaces as ProtocolError. Either way the
connection is finished.
"""
import asyncio

# Maximum size of a frame payload in bytes (10 MB).
# Prevents memory exhaustion from extremely large clipboard data.
MAX_CONTENT_SIZE: int = 10485760

# Maximum digits in the length field (8 digits allows up to 99999999 bytes).
# Enforced during parsing to prevent denial of service from huge length values.
MAX_LENGTH_DIGITS: int = 8


def encode_netstring(data: bytes) -> bytes:
    """
    Encode payload bytes as a netstring.

    Args:
        data: Frame payload to encode.

    Returns:
        Netstring-encoded bytes in format "<length>:<payload>,".
    """
    length = len(data)
    return f"{length}:".encode("ascii") + data + b","


def validate_content_size(data: bytes) -> bool:
    """
    Check if payload size is within the allowed limit.

    Args:
        data: Frame payload to validate.

    Returns:
        True if len(data) <= MAX_CONTENT_SIZE, False otherwise.
    """
    return len(data) <= MAX_CONTENT_SIZE


class ProtocolError(Exception):
    """
    Exception raised for framing errors.

    Raised when netstring parsing fails due to invalid format, size
    violations, or the stream ending in the middle of a frame.
    """

    pass


async def read_netstring(reader: asyncio.StreamReader) -> bytes:
    """
    Read and decode one netstring frame from an async stream.

    Args:
        reader: asyncio StreamReader to read from.

    Returns:
        Decoded payload bytes.

    Raises:
        ConnectionError: If the stream ends cleanly before a new frame starts.
        ProtocolError: On invalid format, size violation, or truncated frame.
    """
    length_bytes = b""
    while len(length_bytes) < MAX_LENGTH_DIGITS + 1:
        byte = await reader.read(1)
        if not byte:
            if not length_bytes:
                raise ConnectionError("Connection closed by remote")
            raise ProtocolError("Connection closed while reading length field")
        if byte == b":":
            break
        if not byte.isdigit():
            raise ProtocolError(f"Invalid character in length field: {byte!r}")
        length_bytes += byte
    else:
        raise ProtocolError("Length field exceeds maximum digits")
    if not length_bytes:
        raise ProtocolError("Empty length field")
    length = int(length_bytes.decode("ascii"))
    if length > MAX_CONTENT_SIZE:
        raise ProtocolError(f"Content size {length} exceeds limit {MAX_CONTENT_SIZE}")
    try:
        content = await reader.readexactly(length)
    except asyncio.IncompleteReadError as e:
        raise ProtocolError(f"Connection closed after {len(e.partial)} bytes") from e
    comma = await reader.read(1)
    if comma != b",":
        raise ProtocolError(f"Expected comma terminator, got {comma!r}")
    return content


async def write_frame(writer: asyncio.StreamWriter, payload: bytes) -> None:
    """
    Frame a payload as a netstring, write it and wait for the buffer to drain.

    Args:
        writer: asyncio StreamWriter of the connection.
        payload: Frame payload bytes.

    Raises:
        ConnectionError: If the connection was lost while writing.
    """
    writer.write(encode_netstring(payload))
    await writer.drain()
