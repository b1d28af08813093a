"""Record size calculation utilities.

Sizes of variable-length records depend on their values, so ``encoded_size``
and ``field_sizes`` take instances. ``fixed_size`` works on the class alone
and answers only when every field has a fixed width.
"""

from __future__ import annotations

from typing import Optional

from ..codec.encoder import _encode_field, encode
from ..codec.hooks import run_preencode
from ..codec.length import EncodeContext
from ..codec.schema import RecordSchema
from ..codec.stream import ByteWriter
from ..models.base import BasePDU


def encoded_size(pdu: BasePDU) -> int:
    """Calculate the encoded size of a record in bytes.

    Args:
        pdu: Record instance

    Returns:
        Size in bytes, hooks included

    Example:
        >>> class Status(BasePDU):
        ...     code: UInt8
        ...     message: str
        >>> encoded_size(Status(code=1, message="ok"))
        4  # 1 + varint(2) + 2
    """
    return len(encode(pdu))


def field_sizes(pdu: BasePDU) -> dict[str, int]:
    """Get the encoded size in bytes of each field of a record.

    The ``preencode`` hook runs first, so computed fields are sized as they
    would be sent. Sequence sizes include any varint prefix and padding.

    Args:
        pdu: Record instance

    Returns:
        Dictionary mapping field names to their size in bytes, in field order

    Example:
        >>> field_sizes(Status(code=1, message="ok"))
        {'code': 1, 'message': 3}
    """
    pdu = run_preencode(pdu)
    schema = RecordSchema.from_model(type(pdu))
    ctx = EncodeContext(pdu)

    sizes: dict[str, int] = {}
    for field_schema in schema.fields:
        writer = ByteWriter()
        _encode_field(writer, field_schema, ctx, getattr(pdu, field_schema.name))
        sizes[field_schema.name] = writer.byte_length()
    return sizes


def fixed_size(pdu_class: type[BasePDU]) -> Optional[int]:
    """Calculate the encoded size of a record class whose fields are all fixed-width.

    Args:
        pdu_class: Record class

    Returns:
        Size in bytes, or None if any field's size depends on its value

    Example:
        >>> class Header(BasePDU):
        ...     version: UInt8
        ...     address: NTuple(UInt8, 6)
        >>> fixed_size(Header)
        7
    """
    return RecordSchema.from_model(pdu_class).fixed_size()
