"""Binary decoder for records.

This module provides the decode() function that converts wire bytes back to a
record instance. Fields are decoded in the same order and format as they were
encoded; each field can see the values of the fields decoded before it.
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO, Optional, TypeVar

import pydantic

from ..exceptions import DecodeError, LengthError, SchemaError, ValidationError
from ..models.base import BasePDU
from .byteorder import unit_size
from .classify import ElementKind, FieldKind, TypeInfo
from .hooks import run_postdecode
from .length import DecodeContext, LengthKind
from .schema import FieldSchema, RecordSchema
from .stream import ByteReader
from .varint import read_varint

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BasePDU)


def decode(message_class: type[T], data: bytes) -> T:
    """Decode bytes to a record.

    The whole of ``data`` is the record's byte budget, so length policies can
    use ``ctx.length``. The record's ``postdecode`` hook runs on the result.

    Args:
        message_class: Record class to decode to
        data: Wire bytes

    Returns:
        Decoded record instance

    Raises:
        SchemaError: If the record schema is invalid or a union has no resolver
        TruncationError: If data ends before a field is complete
        LengthError: If a field length cannot be resolved
        ValidationError: If the decoded record is rejected

    Examples:
        ```python
        from pdukit import BasePDU, UInt8, decode

        class Status(BasePDU):
            code: UInt8
            message: str

        decode(Status, b"\\x00\\x02ok")  # Status(code=0, message='ok')
        ```
    """
    return _decode_record(ByteReader(data), message_class, len(data), hooks=True)


def decode_raw(message_class: type[T], data: bytes) -> T:
    """Decode bytes to a record without running its ``postdecode`` hook."""
    return _decode_record(ByteReader(data), message_class, len(data), hooks=False)


def read(stream: BinaryIO, message_class: type[T], nbytes: Optional[int] = None) -> T:
    """Decode a record from a binary stream.

    Args:
        stream: Readable binary stream positioned at the record
        message_class: Record class to decode to
        nbytes: Byte length of the record, if known

    Returns:
        Decoded record instance
    """
    return _decode_record(ByteReader(stream), message_class, nbytes, hooks=True)


def _decode_record(
    reader: ByteReader, message_class: type[T], nbytes: Optional[int], hooks: bool
) -> T:
    schema = RecordSchema.from_model(message_class)
    schema.check_decodable()

    start = reader.position()
    field_values: dict[str, Any] = {}
    ctx = DecodeContext(
        message_class, nbytes, field_values, lambda: reader.position() - start
    )

    for field_schema in schema.fields:
        field_values[field_schema.name] = _decode_field(reader, field_schema, ctx)

    try:
        decoded_message = message_class(**field_values)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Failed to construct {message_class.__name__}: {e}") from e

    logger.debug("Decoded %s: %d bytes", message_class.__name__, reader.position() - start)

    if hooks:
        decoded_message = run_postdecode(decoded_message)
    return decoded_message


def _decode_field(reader: ByteReader, field_schema: FieldSchema, ctx: DecodeContext) -> Any:
    """Decode a single field value.

    Args:
        reader: ByteReader to read from
        field_schema: Compiled field information
        ctx: Context holding the fields decoded so far

    Returns:
        Decoded field value
    """
    info = field_schema.resolve(ctx)

    if info.kind is FieldKind.SCALAR:
        return _unpack(reader, field_schema, info.codes[0])

    if info.kind is FieldKind.TUPLE:
        return tuple(_unpack(reader, field_schema, code) for code in info.codes)

    if info.kind is FieldKind.SEQUENCE:
        return _decode_sequence(reader, field_schema, info, ctx)

    if info.kind is FieldKind.RECORD:
        budget = field_schema.budget(ctx)
        start = reader.position()
        value = _decode_record(reader, info.base, budget, hooks=True)
        consumed = reader.position() - start
        if budget is not None and consumed != budget:
            raise LengthError(
                f"Field {field_schema.name}: {info.base.__name__} consumed {consumed} bytes "
                f"of a {budget}-byte budget"
            )
        return value

    if info.kind is FieldKind.ABSENT:
        return None

    if info.kind is FieldKind.OPAQUE:
        return info.base.pdu_read(reader, field_schema.budget(ctx))

    raise SchemaError(f"Field {field_schema.name}: unhandled field kind {info.kind}")


def _decode_sequence(
    reader: ByteReader, field_schema: FieldSchema, info: TypeInfo, ctx: DecodeContext
) -> Any:
    length = field_schema.length(ctx, info)
    count = length.read_count(field_schema.name)
    if count is None:
        count = read_varint(reader)

    if info.element is ElementKind.NUMERIC:
        code = info.codes[0]
        return [_unpack(reader, field_schema, code) for _ in range(count)]

    raw = reader.read(count)
    if info.element is ElementKind.BYTE:
        return raw

    if length.kind is not LengthKind.VARINT:
        raw = raw.rstrip(b"\x00")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Field {field_schema.name}: invalid UTF-8 encoding: {e}") from e


def _unpack(reader: ByteReader, field_schema: FieldSchema, code: str) -> Any:
    return field_schema.byteorder.unpack(code, reader.read(unit_size(code)))
