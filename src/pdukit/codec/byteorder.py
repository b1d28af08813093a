"""Byte-order transforms for numeric scalars.

A ByteOrder pairs a host-to-wire transform (``pack``) with its wire-to-host
inverse (``unpack``). It applies to one numeric unit at a time: a scalar field,
each tuple element, or each element of a numeric sequence. Varint prefixes,
byte and character sequences, and nested records are never transformed.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any

from ..exceptions import EncodeError


@dataclass(frozen=True)
class ByteOrder:
    """Host/wire transform pair for numeric units.

    Attributes:
        name: Human-readable name
        prefix: ``struct`` byte-order prefix (``">"`` or ``"<"``)
    """

    name: str
    prefix: str

    def pack(self, code: str, value: Any) -> bytes:
        """Convert one host value to wire bytes.

        Args:
            code: ``struct`` format code of the unit (e.g. ``"H"``)
            value: Value to convert

        Raises:
            EncodeError: If the value does not fit the format
        """
        try:
            return struct.pack(self.prefix + code, value)
        except (struct.error, OverflowError) as e:
            raise EncodeError(f"Cannot pack {value!r} as '{code}': {e}") from e

    def unpack(self, code: str, data: bytes) -> Any:
        """Convert wire bytes of one unit back to a host value."""
        return struct.unpack(self.prefix + code, data)[0]

    def __repr__(self) -> str:
        return f"ByteOrder({self.name})"


BIG_ENDIAN = ByteOrder("big-endian", ">")
LITTLE_ENDIAN = ByteOrder("little-endian", "<")
NETWORK_ORDER = BIG_ENDIAN


def unit_size(code: str) -> int:
    """Return the wire size in bytes of a ``struct`` format code."""
    return struct.calcsize("<" + code)
