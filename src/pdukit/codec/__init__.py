"""Binary codec for pdukit records.

This module provides the encode and decode engines together with the pieces
they are built from: field classification, length resolution, byte order and
varint handling.
"""

from __future__ import annotations

from .byteorder import BIG_ENDIAN, LITTLE_ENDIAN, NETWORK_ORDER, ByteOrder
from .decoder import decode, decode_raw, read
from .encoder import encode, encode_raw, write
from .length import UNKNOWN, DecodeContext, EncodeContext, FieldContext, Length, LengthKind
from .schema import FieldSchema, RecordSchema
from .stream import ByteReader, ByteWriter
from .varint import decode_varint, encode_varint

__all__ = [
    "encode",
    "encode_raw",
    "write",
    "decode",
    "decode_raw",
    "read",
    "RecordSchema",
    "FieldSchema",
    "Length",
    "LengthKind",
    "UNKNOWN",
    "FieldContext",
    "EncodeContext",
    "DecodeContext",
    "ByteOrder",
    "BIG_ENDIAN",
    "LITTLE_ENDIAN",
    "NETWORK_ORDER",
    "ByteReader",
    "ByteWriter",
    "encode_varint",
    "decode_varint",
]
