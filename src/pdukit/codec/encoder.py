"""Binary encoder for records.

This module provides the encode() function that converts a record instance to
its exact wire bytes. Fields are encoded in declaration order; each field's
encoding is driven by its classified type, its byte order and, for sequences,
its length policy.
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO

from ..exceptions import EncodeError, LengthError, SchemaError
from ..models.base import BasePDU
from .classify import ElementKind, FieldKind, TypeInfo
from .hooks import run_preencode
from .length import EncodeContext, LengthKind
from .schema import FieldSchema, RecordSchema
from .stream import ByteWriter
from .varint import write_varint

logger = logging.getLogger(__name__)


def encode(pdu: BasePDU) -> bytes:
    """Encode a record to bytes.

    The record's ``preencode`` hook runs first and the record it returns is
    encoded. Nested records run their own hooks.

    Args:
        pdu: Record instance to encode

    Returns:
        Wire bytes of the record

    Raises:
        SchemaError: If the record schema is invalid
        LengthError: If a value does not satisfy its resolved length
        EncodeError: If a field value cannot be represented

    Examples:
        ```python
        from pdukit import BasePDU, UInt8, UInt16, encode

        class Header(BasePDU):
            version: UInt8
            length: UInt16

        encode(Header(version=1, length=512))  # b"\\x01\\x02\\x00"
        ```
    """
    writer = ByteWriter()
    _encode_record(writer, pdu, hooks=True)
    return writer.to_bytes()


def encode_raw(pdu: BasePDU) -> bytes:
    """Encode a record without running its ``preencode`` hook.

    Hooks use this to see the encoding of the record as it stands, e.g. to
    compute a checksum over everything but the checksum field.
    """
    writer = ByteWriter()
    _encode_record(writer, pdu, hooks=False)
    return writer.to_bytes()


def write(stream: BinaryIO, pdu: BasePDU) -> int:
    """Encode a record and write it to a binary stream.

    Nothing is written if encoding fails.

    Returns:
        Number of bytes written
    """
    data = encode(pdu)
    stream.write(data)
    return len(data)


def _encode_record(writer: ByteWriter, pdu: BasePDU, hooks: bool) -> None:
    if not isinstance(pdu, BasePDU):
        raise EncodeError(f"Expected a BasePDU instance, got {type(pdu).__name__}")

    if hooks:
        pdu = run_preencode(pdu)

    schema = RecordSchema.from_model(type(pdu))
    ctx = EncodeContext(pdu)
    start = writer.byte_length()

    for field_schema in schema.fields:
        _encode_field(writer, field_schema, ctx, getattr(pdu, field_schema.name))

    size = writer.byte_length() - start
    max_bytes = type(pdu).pdu_max_bytes
    if max_bytes is not None and size > max_bytes:
        raise LengthError(
            f"Encoded {type(pdu).__name__} size ({size} bytes) exceeds pdu_max_bytes={max_bytes}"
        )

    logger.debug("Encoded %s: %d bytes", type(pdu).__name__, size)


def _encode_field(
    writer: ByteWriter, field_schema: FieldSchema, ctx: EncodeContext, value: Any
) -> None:
    """Encode a single field value.

    Args:
        writer: ByteWriter to append to
        field_schema: Compiled field information
        ctx: Context of the record being encoded
        value: Field value to encode
    """
    info = field_schema.resolve(ctx)

    if info.kind is FieldKind.SCALAR:
        writer.write(_pack(field_schema, info.codes[0], value))
        return

    if info.kind is FieldKind.TUPLE:
        if not info.matches(value):
            raise EncodeError(
                f"Field {field_schema.name}: expected a tuple of {len(info.codes)} elements, "
                f"got {value!r}"
            )
        for code, item in zip(info.codes, value):
            writer.write(_pack(field_schema, code, item))
        return

    if info.kind is FieldKind.SEQUENCE:
        _encode_sequence(writer, field_schema, info, ctx, value)
        return

    if info.kind is FieldKind.RECORD:
        if not isinstance(value, info.base):
            raise EncodeError(
                f"Field {field_schema.name}: expected {info.base.__name__}, "
                f"got {type(value).__name__}"
            )
        _encode_record(writer, value, hooks=True)
        return

    if info.kind is FieldKind.ABSENT:
        if value is not None:
            raise EncodeError(
                f"Field {field_schema.name}: resolved to the absent variant but has value {value!r}"
            )
        return

    if info.kind is FieldKind.OPAQUE:
        if not isinstance(value, info.base):
            raise EncodeError(
                f"Field {field_schema.name}: expected {info.base.__name__}, "
                f"got {type(value).__name__}"
            )
        value.pdu_write(writer)
        return

    raise SchemaError(f"Field {field_schema.name}: unhandled field kind {info.kind}")


def _encode_sequence(
    writer: ByteWriter,
    field_schema: FieldSchema,
    info: TypeInfo,
    ctx: EncodeContext,
    value: Any,
) -> None:
    length = field_schema.length(ctx, info)

    if info.element is ElementKind.NUMERIC:
        items = list(value)
    elif info.element is ElementKind.CHAR:
        if not isinstance(value, str):
            raise EncodeError(
                f"Field {field_schema.name}: expected str, got {type(value).__name__}"
            )
        items = value.encode("utf-8")
    else:
        items = bytes(value)

    count, padding = length.fit(field_schema.name, len(items))

    if length.kind is LengthKind.VARINT:
        write_varint(writer, count)

    if info.element is ElementKind.NUMERIC:
        code = info.codes[0]
        for item in items[:count]:
            writer.write(_pack(field_schema, code, item))
        for _ in range(padding):
            writer.write(_pack(field_schema, code, 0))
    else:
        writer.write(items[:count])
        writer.write(bytes(padding))


def _pack(field_schema: FieldSchema, code: str, value: Any) -> bytes:
    try:
        return field_schema.byteorder.pack(code, value)
    except EncodeError as e:
        raise EncodeError(f"Field {field_schema.name}: {e}") from e
