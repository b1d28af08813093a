"""Unsigned LEB128 varints.

Self-describing lengths are stored as little-endian base-128 groups: each byte
carries 7 value bits, and a set high bit means another byte follows.

    Value 0-127:       1 byte   [0xxxxxxx]
    Value 128-16383:   2 bytes  [1xxxxxxx] [0xxxxxxx]
    Value 16384+:      3+ bytes [1xxxxxxx] [1xxxxxxx] [0xxxxxxx] ...

Varint bytes are never subject to the record's byte order.
"""

from __future__ import annotations

from ..exceptions import DecodeError
from .stream import ByteReader, ByteWriter

# 10 groups of 7 bits cover any 64-bit count.
MAX_VARINT_BYTES = 10


def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer as a varint.

    Args:
        value: Non-negative integer to encode

    Returns:
        Varint bytes (1 or more)

    Raises:
        ValueError: If value is negative

    Examples:
        >>> encode_varint(127)
        b'\\x7f'
        >>> encode_varint(300)
        b'\\xac\\x02'
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative value as varint: {value}")

    result = bytearray()
    while value > 0x7F:
        result.append((value & 0x7F) | 0x80)
        value >>= 7
    result.append(value)
    return bytes(result)


def write_varint(writer: ByteWriter, value: int) -> None:
    """Append a varint to a writer."""
    writer.write(encode_varint(value))


def read_varint(reader: ByteReader) -> int:
    """Read a varint from a reader.

    Args:
        reader: Source positioned at the first varint byte

    Returns:
        Decoded value

    Raises:
        TruncationError: If the source ends inside the varint
        DecodeError: If the varint runs longer than MAX_VARINT_BYTES
    """
    result = 0
    shift = 0
    for _ in range(MAX_VARINT_BYTES):
        byte = reader.read_byte()
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result
        shift += 7
    raise DecodeError(f"Varint longer than {MAX_VARINT_BYTES} bytes")


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a varint from a byte buffer.

    Args:
        data: Buffer containing the varint
        offset: Start position in the buffer

    Returns:
        Tuple of (value, bytes_consumed)

    Examples:
        >>> decode_varint(b"\\xac\\x02")
        (300, 2)
    """
    reader = ByteReader(memoryview(data)[offset:])
    value = read_varint(reader)
    return value, reader.position()
