"""Unit tests for encoding/decoding."""

from __future__ import annotations

import io
from typing import Any, Optional, Union

import pydantic
import pytest
from pydantic import Field

from pdukit import (
    LITTLE_ENDIAN,
    BasePDU,
    Bool,
    DecodeError,
    EncodeError,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Length,
    LengthError,
    NTuple,
    SchemaError,
    TruncationError,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    ValidationError,
    decode,
    decode_raw,
    encode,
    encode_raw,
    read,
    write,
)


class SimplePDU(BasePDU):
    """Fixed-width numeric fields."""

    a: Int16
    b: UInt8
    c: UInt8
    d: NTuple(Int32, 2)
    e: Float32
    f: Float64


class LittleSimplePDU(SimplePDU):
    """Same layout, little-endian."""

    pdu_byteorder = LITTLE_ENDIAN


class TextPDU(BasePDU):
    """Numeric field followed by a self-describing string."""

    a: UInt8
    b: str


class SizedText(BasePDU):
    """String whose size is the value of an earlier field."""

    n: UInt8
    s: str

    pdu_lengths = {"s": lambda ctx: ctx.get("n")}


class Inner(BasePDU):
    """Nested record."""

    a: UInt16
    b: str


class Outer(BasePDU):
    """Record containing a nested record."""

    n: UInt16
    inner: Inner


class Doubled(BasePDU):
    """Byte payload sized at twice a sibling value."""

    a: UInt16
    data: bytes

    pdu_lengths = {"data": lambda ctx: 2 * ctx.get("a")}


class Samples(BasePDU):
    """Numeric list with a varint count."""

    values: list[Int16]

    pdu_lengths = {"values": Length.varint()}


class Fixed4(BasePDU):
    """Exactly four bytes."""

    data: bytes

    pdu_lengths = {"data": Length.exact(4)}


class Versioned(BasePDU):
    """Value width chosen by a discriminator."""

    version: UInt8
    value: Union[UInt16, UInt32]

    pdu_fieldtypes = {"value": lambda ctx: UInt16 if ctx.get("version") == 1 else UInt32}


class Extension(BasePDU):
    """Optional trailing field."""

    flag: UInt8
    ext: Optional[UInt32] = None

    pdu_fieldtypes = {"ext": lambda ctx: UInt32 if ctx.get("flag") else None}


class Tagged(BasePDU):
    """Union without a resolver."""

    value: Union[UInt8, str]


class Mixed(BasePDU):
    """Per-field byte order override."""

    a: UInt16
    b: UInt16

    pdu_field_byteorder = {"b": LITTLE_ENDIAN}


class Reading(BasePDU):
    """Single-precision measurement."""

    value: Float32


class Ping(BasePDU):
    """Message body with a sequence number."""

    seq: UInt16


class Note(BasePDU):
    """Message body with a sender and text."""

    sender: UInt8
    text: str


class Message(BasePDU):
    """Body record chosen by a kind field."""

    kind: UInt8
    body: Union[Ping, Note]
    tail: UInt8 = 0

    pdu_fieldtypes = {"body": lambda ctx: Ping if ctx.get("kind") == 1 else Note}


class Limited(BasePDU):
    """Record with a maximum encoded size."""

    s: str

    pdu_max_bytes = 4


class Flags(BasePDU):
    """Booleans and wide integers."""

    on: Bool
    off: Bool
    big: UInt64
    small: Int8


class Ipv4Address:
    """Opaque address type writing its own four bytes."""

    def __init__(self, octets: bytes) -> None:
        self.octets = bytes(octets)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Ipv4Address) and other.octets == self.octets

    def __hash__(self) -> int:
        return hash(self.octets)

    def pdu_write(self, writer: Any) -> None:
        writer.write(self.octets)

    @classmethod
    def pdu_read(cls, reader: Any, nbytes: Optional[int]) -> Ipv4Address:
        return cls(reader.read(4))


class Packet(BasePDU):
    """Record with an opaque field."""

    ttl: UInt8
    src: Ipv4Address


class TestEncodeDecode:
    """Test basic encode/decode functionality."""

    def test_fixed_fields_big_endian(self) -> None:
        """Test fixed-width fields in big-endian order."""
        msg = SimplePDU(a=1, b=2, c=3, d=(4, 5), e=6.0, f=7.0)
        data = encode(msg)

        assert data == bytes.fromhex("0001" "02" "03" "00000004" "00000005" "40c00000" "401c000000000000")
        assert decode(SimplePDU, data) == msg

    def test_fixed_fields_little_endian(self) -> None:
        """Test the record byte order applies to every numeric unit."""
        msg = LittleSimplePDU(a=1, b=2, c=3, d=(4, 5), e=6.0, f=7.0)
        data = encode(msg)

        assert data == bytes.fromhex("0100" "02" "03" "04000000" "05000000" "0000c040" "0000000000001c40")
        assert decode(LittleSimplePDU, data) == msg

    def test_string_varint(self) -> None:
        """Test strings default to a varint length prefix."""
        msg = TextPDU(a=0x12, b="hello")
        data = encode(msg)

        assert data == b"\x12\x05hello"
        assert decode(TextPDU, data) == msg

    def test_empty_string(self) -> None:
        """Test an empty string is a single zero prefix."""
        assert encode(TextPDU(a=0, b="")) == b"\x00\x00"

    def test_unicode_string(self) -> None:
        """Test string lengths count UTF-8 bytes."""
        msg = TextPDU(a=1, b="héllo")
        data = encode(msg)

        assert data[1] == 6
        assert decode(TextPDU, data) == msg

    def test_bools_and_wide_ints(self) -> None:
        """Test booleans and 64-bit integers."""
        msg = Flags(on=True, off=False, big=2**64 - 1, small=-128)
        data = encode(msg)

        assert data == b"\x01\x00" + b"\xff" * 8 + b"\x80"
        assert decode(Flags, data) == msg

    def test_numeric_list(self) -> None:
        """Test numeric sequences apply the byte order per element."""
        msg = Samples(values=[1, -1, 256])
        data = encode(msg)

        assert data == b"\x03\x00\x01\xff\xff\x01\x00"
        assert decode(Samples, data) == msg

    def test_encode_is_deterministic(self) -> None:
        """Test repeated encodes of equal records are identical."""
        assert encode(TextPDU(a=1, b="x")) == encode(TextPDU(a=1, b="x"))

    def test_trailing_bytes_ignored(self) -> None:
        """Test bytes after a complete record are not an error."""
        assert decode(TextPDU, b"\x12\x02hiEXTRA") == TextPDU(a=0x12, b="hi")

    def test_to_bytes_from_bytes(self) -> None:
        """Test the record convenience methods."""
        msg = TextPDU(a=7, b="ok")
        assert msg.to_bytes() == encode(msg)
        assert TextPDU.from_bytes(msg.to_bytes()) == msg


class TestByteOrder:
    """Test byte order configuration."""

    def test_field_override(self) -> None:
        """Test a per-field byte order overrides the record default."""
        msg = Mixed(a=0x0102, b=0x0304)
        data = encode(msg)

        assert data == b"\x01\x02\x04\x03"
        assert decode(Mixed, data) == msg


class TestWireTypes:
    """Test numeric wire type validation."""

    def test_float32_stores_wire_value(self) -> None:
        """Test Float32 values are rounded to what the wire carries."""
        msg = Reading(value=0.1)
        data = encode(msg)

        assert data == b"\x3d\xcc\xcc\xcd"
        assert msg.value == pytest.approx(0.1, rel=1e-7)
        assert msg.value != 0.1
        assert decode(Reading, data) == msg

    def test_float32_overflow(self) -> None:
        """Test Float32 rejects values too large for 32 bits."""
        with pytest.raises(pydantic.ValidationError, match="32-bit float"):
            Reading(value=1e300)

    @pytest.mark.parametrize("value", [-1, 256])
    def test_wire_range(self, value: int) -> None:
        """Test integers outside the wire unit are rejected."""
        with pytest.raises(pydantic.ValidationError, match="wire range"):
            TextPDU(a=value, b="")

    def test_user_bounds_kept(self) -> None:
        """Test field bounds narrower than the wire range still apply."""

        class Percent(BasePDU):
            value: UInt8 = Field(le=100)
            floor: Int8 = Field(default=0, ge=-10)

        assert Percent(value=100).value == 100
        with pytest.raises(pydantic.ValidationError):
            Percent(value=101)
        with pytest.raises(pydantic.ValidationError):
            Percent(value=50, floor=-11)


class TestLengthPolicies:
    """Test length policies."""

    def test_sibling_padded(self) -> None:
        """Test a string padded to a sibling value."""
        msg = SizedText(n=7, s="hello")
        data = encode(msg)

        assert data == b"\x07hello\x00\x00"
        assert decode(SizedText, data) == msg

    def test_sibling_at_boundary(self) -> None:
        """Test a value exactly at the declared size."""
        data = encode(SizedText(n=5, s="hello"))
        assert data == b"\x05hello"

    def test_sibling_oversize(self) -> None:
        """Test a value longer than its padded size raises LengthError."""
        with pytest.raises(LengthError, match="Field s"):
            encode(SizedText(n=8, s="hello world!"))

    def test_truncated_policy(self) -> None:
        """Test the deprecated truncating policy cuts oversized strings."""

        class Truncating(BasePDU):
            n: UInt8
            s: str

            pdu_lengths = {"s": lambda ctx: Length.truncated(ctx.get("n"))}

        with pytest.warns(DeprecationWarning):
            data = encode(Truncating(n=8, s="hello world!"))
        assert data == b"\x08hello wo"

        with pytest.warns(DeprecationWarning):
            decoded = decode(Truncating, data)
        assert decoded.s == "hello wo"

    def test_padded_bytes_keep_zeros(self) -> None:
        """Test zero padding is kept for byte sequences."""
        data = encode(Doubled(a=2, data=b"ab"))

        assert data == b"\x00\x02ab\x00\x00"
        assert decode(Doubled, data).data == b"ab\x00\x00"

    @pytest.mark.parametrize(("a", "size"), [(6, 14), (8, 18)])
    def test_sibling_dependent_size(self, a: int, size: int) -> None:
        """Test the payload size follows the decoded sibling value."""
        payload = bytes(range(2 * a))
        data = a.to_bytes(2, "big") + payload + b"\xff" * 4

        decoded = decode(Doubled, data)

        assert decoded.data == payload
        assert len(encode(decoded)) == size

    def test_exact_length(self) -> None:
        """Test exact lengths accept only the declared size."""
        assert encode(Fixed4(data=b"abcd")) == b"abcd"
        with pytest.raises(LengthError, match="expected exactly 4"):
            encode(Fixed4(data=b"abc"))

    def test_budget_policy(self) -> None:
        """Test a payload sized from the record's byte budget."""

        class Trailer(BasePDU):
            kind: UInt8
            body: bytes
            crc: UInt16

            pdu_lengths = {"body": lambda ctx: ctx.remaining - 2}

        msg = Trailer(kind=1, body=b"xyz", crc=0xBEEF)
        data = encode(msg)

        assert data == b"\x01xyz\xbe\xef"
        assert decode(Trailer, data) == msg

    def test_unresolved_length_at_decode(self) -> None:
        """Test budget policies fail without a known budget."""

        class Trailer(BasePDU):
            body: bytes
            crc: UInt16

            pdu_lengths = {"body": lambda ctx: ctx.length - 2}

        data = encode(Trailer(body=b"abc", crc=1))
        with pytest.raises(LengthError, match="unresolved"):
            read(io.BytesIO(data), Trailer)
        assert read(io.BytesIO(data), Trailer, nbytes=len(data)).body == b"abc"

    def test_negative_length(self) -> None:
        """Test a negative resolved length raises LengthError."""

        class Frame(BasePDU):
            header: NTuple(UInt8, 4)
            body: bytes

            pdu_lengths = {"body": lambda ctx: ctx.length - 8}

        with pytest.raises(LengthError, match="negative"):
            decode(Frame, b"\x01\x02\x03\x04\x05")

    def test_bytes_without_policy(self) -> None:
        """Test bytes fields need a length policy."""

        class Unsized(BasePDU):
            data: bytes

        with pytest.raises(SchemaError, match="length policy"):
            encode(Unsized(data=b"x"))


class TestNested:
    """Test nested records."""

    def test_nested_record(self) -> None:
        """Test nested records are encoded inline without framing."""
        msg = Outer(n=0x5678, inner=Inner(a=0x1234, b="hello"))
        data = encode(msg)

        assert data == b"\x56\x78\x12\x34\x05hello"
        assert decode(Outer, data) == msg

    def test_nested_budget(self) -> None:
        """Test a nested record decodes within the budget given by its field policy."""

        class Body(BasePDU):
            tag: UInt8
            rest: bytes

            pdu_lengths = {"rest": lambda ctx: ctx.remaining}

        class Envelope(BasePDU):
            size: UInt8
            body: Body
            tail: UInt8

            pdu_lengths = {"body": lambda ctx: ctx.get("size")}

        msg = Envelope(size=4, body=Body(tag=9, rest=b"abc"), tail=0xEE)
        data = encode(msg)

        assert data == b"\x04\x09abc\xee"
        assert decode(Envelope, data) == msg

    @pytest.mark.parametrize("size", [2, 6])
    def test_nested_budget_mismatch(self, size: int) -> None:
        """Test a nested record must consume exactly its budget."""

        class Body(BasePDU):
            a: UInt8
            s: str

        class Envelope(BasePDU):
            size: UInt8
            body: Body
            tail: UInt8

            pdu_lengths = {"body": lambda ctx: ctx.get("size")}

        with pytest.raises(LengthError, match=f"consumed 5 bytes of a {size}-byte budget"):
            decode(Envelope, bytes([size]) + b"\x01\x03abc\x09\x00")


class TestUnions:
    """Test union fields."""

    @pytest.mark.parametrize(
        ("version", "value", "expected"),
        [(1, 0x1234, b"\x01\x12\x34"), (2, 0x1234, b"\x02\x00\x00\x12\x34")],
    )
    def test_resolved_by_discriminator(self, version: int, value: int, expected: bytes) -> None:
        """Test the discriminator selects the encoded and decoded width."""
        msg = Versioned(version=version, value=value)
        data = encode(msg)

        assert data == expected
        assert decode(Versioned, data) == msg

    @pytest.mark.parametrize(
        ("body", "expected"),
        [
            (Ping(seq=0x0102), b"\x01\x01\x02\x07"),
            (Note(sender=5, text="hi"), b"\x02\x05\x02hi\x07"),
        ],
    )
    def test_record_variants(self, body: BasePDU, expected: bytes) -> None:
        """Test decoded record variants have the type they were encoded as."""
        msg = Message(kind=expected[0], body=body, tail=7)
        data = encode(msg)

        assert data == expected
        decoded = decode(Message, data)
        assert type(decoded.body) is type(body)
        assert decoded == msg

    def test_record_variant_mismatch(self) -> None:
        """Test a body that disagrees with its kind is not encoded."""
        with pytest.raises(EncodeError, match="expected Ping"):
            encode(Message(kind=1, body=Note(sender=1, text="")))

    def test_absent_variant(self) -> None:
        """Test the absent variant has zero width."""
        msg = Extension(flag=0)
        data = encode(msg)

        assert data == b"\x00"
        assert decode(Extension, data) == msg

    def test_present_variant(self) -> None:
        """Test the present variant is encoded in full."""
        msg = Extension(flag=1, ext=0xAABBCCDD)
        data = encode(msg)

        assert data == b"\x01\xaa\xbb\xcc\xdd"
        assert decode(Extension, data) == msg

    def test_absent_variant_with_value(self) -> None:
        """Test a value cannot be dropped by resolving to the absent variant."""
        with pytest.raises(EncodeError, match="absent variant"):
            encode(Extension(flag=0, ext=5))

    def test_resolved_value_missing(self) -> None:
        """Test a resolved numeric variant needs a value."""
        with pytest.raises(EncodeError):
            encode(Extension(flag=1))

    def test_unresolved_union_encodes_by_value(self) -> None:
        """Test encoding picks the union candidate matching the value."""
        assert encode(Tagged(value=5)) == b"\x05"
        assert encode(Tagged(value="hi")) == b"\x02hi"

    def test_unresolved_union_decode(self) -> None:
        """Test decoding an unresolved union is a schema error."""
        with pytest.raises(SchemaError, match="needs a type resolver"):
            decode(Tagged, b"\x05")


class TestOpaque:
    """Test opaque field types."""

    def test_opaque_roundtrip(self) -> None:
        """Test opaque types write and read their own bytes."""
        msg = Packet(ttl=64, src=Ipv4Address(b"\x0a\x00\x00\x01"))
        data = encode(msg)

        assert data == b"\x40\x0a\x00\x00\x01"
        assert decode(Packet, data) == msg


class TestErrors:
    """Test error handling."""

    def test_truncated_input(self) -> None:
        """Test running out of bytes raises TruncationError."""
        with pytest.raises(TruncationError):
            decode(TextPDU, b"\x12\x05hel")

    def test_empty_input(self) -> None:
        """Test decoding nothing raises TruncationError."""
        with pytest.raises(TruncationError):
            decode(SimplePDU, b"")

    def test_invalid_utf8(self) -> None:
        """Test invalid UTF-8 in a string raises DecodeError."""
        with pytest.raises(DecodeError, match="UTF-8"):
            decode(TextPDU, b"\x00\x02\xff\xfe")

    def test_errors_share_a_root(self) -> None:
        """Test truncation is a decode error."""
        assert issubclass(TruncationError, DecodeError)
        assert issubclass(LengthError, EncodeError)
        assert issubclass(LengthError, DecodeError)

    def test_max_bytes(self) -> None:
        """Test pdu_max_bytes limits the encoded size."""
        assert encode(Limited(s="abc")) == b"\x03abc"
        with pytest.raises(LengthError, match="pdu_max_bytes"):
            encode(Limited(s="hello"))

    def test_encode_requires_record(self) -> None:
        """Test only records can be encoded."""
        with pytest.raises(EncodeError, match="BasePDU"):
            encode("not a record")  # type: ignore[arg-type]

    def test_decoded_value_rejected_by_model(self) -> None:
        """Test pydantic validation failures surface as ValidationError."""

        class Percent(BasePDU):
            value: UInt8 = Field(le=100)

        assert decode(Percent, b"\x64").value == 100
        with pytest.raises(ValidationError, match="Percent"):
            decode(Percent, b"\xff")


class TestStreams:
    """Test stream entry points."""

    def test_write_and_read(self) -> None:
        """Test writing and reading consecutive records on one stream."""
        stream = io.BytesIO()
        assert write(stream, TextPDU(a=1, b="one")) == 5
        assert write(stream, TextPDU(a=2, b="two")) == 5

        stream.seek(0)
        assert read(stream, TextPDU) == TextPDU(a=1, b="one")
        assert read(stream, TextPDU) == TextPDU(a=2, b="two")

    def test_failed_write_leaves_stream_untouched(self) -> None:
        """Test a failed encode writes nothing."""
        stream = io.BytesIO()
        with pytest.raises(LengthError):
            write(stream, SizedText(n=1, s="too long"))
        assert stream.getvalue() == b""


class TestRawEntryPoints:
    """Test hook-free entry points."""

    def test_raw_skips_hooks(self) -> None:
        """Test encode_raw and decode_raw bypass the hooks."""

        class Shouting(BasePDU):
            text: str

            def preencode(self) -> Shouting:
                return self.model_copy(update={"text": self.text.upper()})

            def postdecode(self) -> Shouting:
                raise ValueError("always rejected")

        msg = Shouting(text="hi")
        assert encode(msg) == b"\x02HI"
        assert encode_raw(msg) == b"\x02hi"
        assert decode_raw(Shouting, b"\x02hi") == msg
        with pytest.raises(ValidationError, match="always rejected"):
            decode(Shouting, b"\x02hi")
