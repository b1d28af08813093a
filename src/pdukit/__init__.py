"""pdukit: declarative binary codecs for protocol data units

A Python library for describing binary record formats (network frames, file
headers, telemetry packets) as annotated Pydantic models, and converting them
to and from their exact wire bytes.

Key Features:
- Pydantic-based record modeling
- Per-record and per-field byte order
- Length policies computed from sibling fields or the record's byte budget
- Union fields resolved from earlier fields at decode time
- Pre-encode / post-decode hooks for computed fields and checksums

Quick Start:
    >>> from pdukit import BasePDU, NTuple, UInt8, UInt16, UInt32, encode, decode
    >>>
    >>> class EthernetFrame(BasePDU):
    ...     dstaddr: NTuple(UInt8, 6)
    ...     srcaddr: NTuple(UInt8, 6)
    ...     ethtype: UInt16
    ...     payload: bytes
    ...     crc: UInt32 = 0
    ...
    ...     pdu_lengths = {"payload": lambda ctx: ctx.length - 18}
    >>>
    >>> frame = EthernetFrame(
    ...     dstaddr=(1, 2, 3, 4, 5, 6), srcaddr=(6, 5, 4, 3, 2, 1),
    ...     ethtype=0x0800, payload=b"\\x00", crc=0xDEADBEEF,
    ... )
    >>> data = encode(frame)
    >>> decode(EthernetFrame, data) == frame
    True
"""

from __future__ import annotations

import logging

# codec before models: models.base imports codec.byteorder and codec imports models.base
from .codec import (
    BIG_ENDIAN,
    LITTLE_ENDIAN,
    NETWORK_ORDER,
    UNKNOWN,
    ByteOrder,
    DecodeContext,
    EncodeContext,
    FieldContext,
    Length,
    decode,
    decode_raw,
    decode_varint,
    encode,
    encode_raw,
    encode_varint,
    read,
    write,
)
from .models import (
    BasePDU,
    Bool,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    NTuple,
    Opaque,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)
from .checksum import ChecksumMixin
from .exceptions import (
    DecodeError,
    EncodeError,
    LengthError,
    PdukitError,
    SchemaError,
    TruncationError,
    ValidationError,
)
from .logging_config import PDUKIT_LOGGER_NAME
from .utils import encoded_size, field_sizes, fixed_size

logging.getLogger(PDUKIT_LOGGER_NAME).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Core API
    "BasePDU",
    "encode",
    "encode_raw",
    "write",
    "decode",
    "decode_raw",
    "read",
    # Wire types
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Float32",
    "Float64",
    "Bool",
    "NTuple",
    "Opaque",
    # Lengths and contexts
    "Length",
    "UNKNOWN",
    "FieldContext",
    "EncodeContext",
    "DecodeContext",
    # Byte order
    "ByteOrder",
    "BIG_ENDIAN",
    "LITTLE_ENDIAN",
    "NETWORK_ORDER",
    # Hooks
    "ChecksumMixin",
    # Exceptions
    "PdukitError",
    "SchemaError",
    "EncodeError",
    "DecodeError",
    "LengthError",
    "TruncationError",
    "ValidationError",
    # Sizing
    "encoded_size",
    "field_sizes",
    "fixed_size",
    # Varint
    "encode_varint",
    "decode_varint",
    # Version
    "__version__",
]
