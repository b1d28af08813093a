"""Wire types for record fields.

Numeric scalars carry their wire width as ``Annotated`` metadata, together with a
validator that keeps values inside the wire unit. Fixed tuples, variable
sequences, nested records, ``None`` and opaque types are expressed with plain
annotations.

Example:
    >>> class Header(BasePDU):
    ...     version: UInt8
    ...     flags: UInt16
    ...     address: NTuple(UInt8, 6)
    ...     values: list[Float32]
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Annotated, Any, Optional, Protocol, Tuple, runtime_checkable

from pydantic import AfterValidator


@dataclass(frozen=True)
class Numeric:
    """Marks an annotation as a fixed-width numeric wire unit.

    Attributes:
        code: ``struct`` format code without byte-order prefix
    """

    code: str


def _wire_range(low: int, high: int) -> AfterValidator:
    """Validator rejecting integers outside a wire unit's range.

    A validator adds to ``Field(ge=..., le=...)`` bounds on the same field
    instead of replacing them.
    """

    def check(value: int) -> int:
        if not low <= value <= high:
            raise ValueError(f"value {value} is outside the wire range [{low}, {high}]")
        return value

    return AfterValidator(check)


def _to_float32(value: float) -> float:
    """Round a float to the nearest single-precision value it is sent as."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError as e:
        raise ValueError(f"value {value} does not fit a 32-bit float") from e


UInt8 = Annotated[int, Numeric("B"), _wire_range(0, 0xFF)]
UInt16 = Annotated[int, Numeric("H"), _wire_range(0, 0xFFFF)]
UInt32 = Annotated[int, Numeric("I"), _wire_range(0, 0xFFFFFFFF)]
UInt64 = Annotated[int, Numeric("Q"), _wire_range(0, 0xFFFFFFFFFFFFFFFF)]
Int8 = Annotated[int, Numeric("b"), _wire_range(-0x80, 0x7F)]
Int16 = Annotated[int, Numeric("h"), _wire_range(-0x8000, 0x7FFF)]
Int32 = Annotated[int, Numeric("i"), _wire_range(-0x80000000, 0x7FFFFFFF)]
Int64 = Annotated[int, Numeric("q"), _wire_range(-0x8000000000000000, 0x7FFFFFFFFFFFFFFF)]
Float32 = Annotated[float, Numeric("f"), AfterValidator(_to_float32)]
Float64 = Annotated[float, Numeric("d")]
Bool = Annotated[bool, Numeric("?")]


def NTuple(element: Any, count: int) -> Any:
    """Build a fixed-length tuple annotation of ``count`` numeric elements.

    Args:
        element: Numeric wire type of every element (e.g. ``UInt8``)
        count: Number of elements

    Example:
        >>> class Frame(BasePDU):
        ...     dstaddr: NTuple(UInt8, 6)
    """
    if count < 1:
        raise ValueError(f"NTuple count must be positive, got {count}")
    return Tuple[(element,) * count]


def numeric_code(annotation: Any, metadata: tuple[Any, ...] = ()) -> Optional[str]:
    """Return the ``struct`` code of a numeric wire annotation, if it is one.

    Args:
        annotation: Type annotation (possibly ``Annotated``)
        metadata: Extra metadata already split off by pydantic

    Returns:
        Format code, or None when the annotation is not a numeric wire type
    """
    extras = tuple(getattr(annotation, "__metadata__", ())) + tuple(metadata)
    for item in extras:
        if isinstance(item, Numeric):
            return item.code
    return None


@runtime_checkable
class Opaque(Protocol):
    """Protocol for types that read and write their own raw bytes.

    Opaque types bypass field classification. ``nbytes`` is the concrete
    length resolved for the field, or None when no length policy applies.

    Example:
        >>> class Ipv4Address:
        ...     def __init__(self, text: str) -> None:
        ...         self.text = text
        ...
        ...     def pdu_write(self, writer):
        ...         writer.write(bytes(int(p) for p in self.text.split(".")))
        ...
        ...     @classmethod
        ...     def pdu_read(cls, reader, nbytes):
        ...         return cls(".".join(str(b) for b in reader.read(4)))
    """

    def pdu_write(self, writer: Any) -> None: ...

    @classmethod
    def pdu_read(cls, reader: Any, nbytes: Optional[int]) -> Any: ...
