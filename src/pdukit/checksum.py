"""Trailing checksum support.

Many framed protocols end with a checksum over every byte before it. The
ChecksumMixin implements that pattern with the record hooks: ``preencode``
fills in the checksum and ``postdecode`` verifies it. The checksum function
itself is supplied by the record (``zlib.crc32`` by default).

Example:
    >>> class Frame(ChecksumMixin):
    ...     kind: UInt8
    ...     payload: bytes
    ...     crc: UInt32 = 0
    ...
    ...     pdu_lengths = {"payload": lambda ctx: ctx.remaining - 4}
    ...     pdu_checksum_field = "crc"
    >>> data = encode(Frame(kind=1, payload=b"abc"))
    >>> decode(Frame, data).crc == zlib.crc32(data[:-4])
    True
"""

from __future__ import annotations

import zlib
from typing import Any, Callable, ClassVar, TypeVar

from .codec.classify import FieldKind
from .codec.encoder import encode_raw
from .codec.schema import RecordSchema
from .exceptions import SchemaError, ValidationError
from .models.base import BasePDU

C = TypeVar("C", bound="ChecksumMixin")


class ChecksumMixin(BasePDU):
    """Record base class whose last field is a checksum of the preceding bytes.

    Attributes:
        pdu_checksum_field: Name of the checksum field. It must be the last
            field and a scalar numeric wire type.
        pdu_checksum: Function mapping the covered bytes to an integer. The
            result is masked to the width of the checksum field.
    """

    pdu_checksum_field: ClassVar[str] = "crc"
    pdu_checksum: ClassVar[Callable[[bytes], int]] = zlib.crc32

    @classmethod
    def _checksum_width(cls) -> int:
        schema = RecordSchema.from_model(cls)
        if not schema.fields or schema.fields[-1].name != cls.pdu_checksum_field:
            raise SchemaError(
                f"{cls.__name__}: checksum field {cls.pdu_checksum_field!r} must be the last field"
            )
        field = schema.fields[-1]
        info = field.candidates[0]
        if field.union or info.kind is not FieldKind.SCALAR:
            raise SchemaError(
                f"{cls.__name__}.{field.name}: checksum field must be a numeric scalar"
            )
        assert info.fixed_size is not None
        return info.fixed_size

    def compute_checksum(self) -> int:
        """Return the checksum of this record's encoding, excluding the checksum field."""
        width = self._checksum_width()
        covered = encode_raw(self)[:-width]
        checksum: Any = type(self).pdu_checksum
        return checksum(covered) & ((1 << (8 * width)) - 1)

    def preencode(self: C) -> C:
        return self.model_copy(update={self.pdu_checksum_field: self.compute_checksum()})

    def postdecode(self: C) -> C:
        expected = self.compute_checksum()
        actual = getattr(self, self.pdu_checksum_field)
        if actual != expected:
            raise ValidationError(
                f"{type(self).__name__}: checksum mismatch "
                f"(expected {expected:#x}, got {actual:#x})"
            )
        return self
