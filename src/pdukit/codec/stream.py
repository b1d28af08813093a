"""Byte-level sink and source used by the encode and decode engines.

The engines only need single-pass sequential access: an append-only sink for
encoding and a forward-only source for decoding. No seeking is performed.
"""

from __future__ import annotations

from typing import BinaryIO, Optional, Union

from ..exceptions import TruncationError


class ByteWriter:
    """Appends bytes to an in-memory buffer.

    The encoder assembles a whole record here before anything reaches the
    caller's stream, so a failed encode never leaves partial output behind.

    Example:
        >>> writer = ByteWriter()
        >>> writer.write(b"\\x01\\x02")
        >>> writer.write_byte(3)
        >>> writer.to_bytes()
        b'\\x01\\x02\\x03'
    """

    def __init__(self) -> None:
        """Initialize an empty byte writer."""
        self._buffer = bytearray()

    def write(self, data: bytes | bytearray | memoryview) -> None:
        """Append raw bytes.

        Args:
            data: Bytes to append
        """
        self._buffer.extend(data)

    def write_byte(self, value: int) -> None:
        """Append a single byte.

        Args:
            value: Byte value (0-255)

        Raises:
            ValueError: If value is not a byte
        """
        if not 0 <= value <= 0xFF:
            raise ValueError(f"write_byte requires a value in 0-255, got {value}")
        self._buffer.append(value)

    def byte_length(self) -> int:
        """Return the number of bytes written so far."""
        return len(self._buffer)

    def to_bytes(self) -> bytes:
        """Return the written bytes."""
        return bytes(self._buffer)


class ByteReader:
    """Reads bytes sequentially from a buffer or a binary stream.

    Example:
        >>> reader = ByteReader(b"\\x01\\x02\\x03")
        >>> reader.read(2)
        b'\\x01\\x02'
        >>> reader.read_byte()
        3
        >>> reader.position()
        3
    """

    def __init__(self, source: Union[bytes, bytearray, memoryview, BinaryIO]) -> None:
        """Initialize a reader over a byte buffer or a readable binary stream.

        Args:
            source: Bytes-like object, or any object with a ``read(n)`` method
        """
        self._stream: Optional[BinaryIO]
        if isinstance(source, (bytes, bytearray, memoryview)):
            self._data: Optional[bytes] = bytes(source)
            self._stream = None
        else:
            self._data = None
            self._stream = source
        self._position = 0

    def read(self, num_bytes: int) -> bytes:
        """Read exactly ``num_bytes`` bytes.

        Args:
            num_bytes: Number of bytes to read

        Returns:
            Bytes read from the source

        Raises:
            ValueError: If num_bytes is negative
            TruncationError: If the source holds fewer than num_bytes bytes
        """
        if num_bytes < 0:
            raise ValueError(f"num_bytes must be non-negative, got {num_bytes}")
        if num_bytes == 0:
            return b""

        if self._data is not None:
            end = self._position + num_bytes
            if end > len(self._data):
                raise TruncationError(
                    f"Not enough bytes: need {num_bytes}, have {len(self._data) - self._position}"
                )
            chunk = self._data[self._position : end]
        else:
            assert self._stream is not None
            chunk = self._stream.read(num_bytes) or b""
            if len(chunk) < num_bytes:
                raise TruncationError(
                    f"Stream ended early: need {num_bytes} bytes, got {len(chunk)}"
                )

        self._position += num_bytes
        return bytes(chunk)

    def read_byte(self) -> int:
        """Read a single byte.

        Raises:
            TruncationError: If the source is exhausted
        """
        return self.read(1)[0]

    def position(self) -> int:
        """Return the number of bytes consumed so far."""
        return self._position

    def bytes_remaining(self) -> Optional[int]:
        """Return the number of unread bytes, or None for stream sources."""
        if self._data is None:
            return None
        return len(self._data) - self._position
