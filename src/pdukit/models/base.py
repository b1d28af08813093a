"""Base record class and pdukit-specific Pydantic configuration.

This module provides the BasePDU class that all records should inherit from.
Per-record codec configuration lives in ClassVar tables looked up by field name.
"""

from __future__ import annotations

from typing import Any, ClassVar, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from ..codec.byteorder import BIG_ENDIAN, ByteOrder

P = TypeVar("P", bound="BasePDU")


class BasePDU(BaseModel):
    """Base class for all records (protocol data units).

    Fields are encoded in declaration order. Wire types come from the field
    annotations (see ``pdukit.models.fields``); everything else is configured
    with ClassVar tables keyed by field name. Subclasses assign the tables
    directly, without an annotation.

    Example:
        >>> class Frame(BasePDU):
        ...     dstaddr: NTuple(UInt8, 6)
        ...     srcaddr: NTuple(UInt8, 6)
        ...     ethtype: UInt16
        ...     payload: bytes
        ...     crc: UInt32 = 0
        ...
        ...     pdu_lengths = {"payload": lambda ctx: ctx.length - 18}

    Attributes:
        pdu_byteorder: Default byte order of numeric fields
        pdu_field_byteorder: Per-field byte order overrides
        pdu_lengths: Per-field length policies, ``(context) -> Length``
            or a constant (``Length``, int, None, ``UNKNOWN``)
        pdu_fieldtypes: Per-field type resolvers, ``(context) -> type``
        pdu_max_bytes: Maximum encoded size in bytes (optional, for validation)
    """

    model_config = ConfigDict(
        # Records are values: hooks return modified copies
        frozen=True,
        # Opaque wire types are plain classes
        arbitrary_types_allowed=True,
        # Forbid extra fields not defined in schema
        extra="forbid",
    )

    pdu_byteorder: ClassVar[ByteOrder] = BIG_ENDIAN
    pdu_field_byteorder: ClassVar[Mapping[str, ByteOrder]] = {}
    pdu_lengths: ClassVar[Mapping[str, Any]] = {}
    pdu_fieldtypes: ClassVar[Mapping[str, Any]] = {}
    pdu_max_bytes: ClassVar[Optional[int]] = None

    def preencode(self: P) -> P:
        """Pre-encode hook.

        Called before the record is encoded. May return a new record of the
        same class (e.g. ``self.model_copy(update={"count": len(self.items)})``)
        which is encoded instead. Use ``encode_raw`` inside the hook to see the
        encoding without re-entering the hook.
        """
        return self

    def postdecode(self: P) -> P:
        """Post-decode hook.

        Called after the record is decoded. May return a new record of the same
        class, or reject the record by raising ``ValidationError`` (a plain
        ``ValueError`` is converted to ``ValidationError``).
        """
        return self

    def to_bytes(self) -> bytes:
        """Encode this record (hooks enabled)."""
        from ..codec.encoder import encode

        return encode(self)

    @classmethod
    def from_bytes(cls: type[P], data: bytes) -> P:
        """Decode a record of this class from ``data`` (hooks enabled)."""
        from ..codec.decoder import decode

        return decode(cls, data)
