"""Length resolution for variable-size fields.

A length policy is a pure function of a field context that tells the engine
how many elements of a sequence to write or read. Policies may look at the
record's byte budget (``ctx.length``, ``ctx.remaining``) and at sibling values
(``ctx.get(name)``). During encoding the budget is not known; it is reported as
``UNKNOWN``, which absorbs arithmetic so one policy serves both directions:

    >>> policy = lambda ctx: ctx.length - 18
    >>> policy(EncodeContext(frame))      # UNKNOWN: write the payload as is
    >>> policy(DecodeContext(...))        # e.g. 8: read exactly 8 bytes

Policy results are normalized into a Length descriptor:

    ============  ================================================
    Result        Descriptor
    ============  ================================================
    None          Length.varint()    (self-describing)
    int n         Length.padded(n)
    UNKNOWN       Length.unframed()
    Length        itself
    ============  ================================================
"""

from __future__ import annotations

import enum
import warnings
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

from ..exceptions import LengthError, SchemaError


class Unknown:
    """Singleton standing for a length that is not known yet.

    Arithmetic involving UNKNOWN yields UNKNOWN.
    """

    _instance: Optional[Unknown] = None

    def __new__(cls) -> Unknown:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def _absorb(self, other: Any) -> Unknown:
        return self

    __add__ = __radd__ = _absorb
    __sub__ = __rsub__ = _absorb
    __mul__ = __rmul__ = _absorb
    __floordiv__ = __rfloordiv__ = _absorb
    __mod__ = __rmod__ = _absorb

    def __neg__(self) -> Unknown:
        return self

    def __repr__(self) -> str:
        return "UNKNOWN"


UNKNOWN = Unknown()


def is_known(value: Any) -> bool:
    """Return True if ``value`` is a concrete length, not UNKNOWN."""
    return value is not UNKNOWN


class LengthKind(enum.Enum):
    """How a sequence length is represented on the wire."""

    VARINT = "self-describing"
    EXACT = "exact"
    PADDED = "padded"
    UNFRAMED = "unframed"
    TRUNCATED = "truncated"


@dataclass(frozen=True)
class Length:
    """Resolved length of a sequence field.

    Counts are in bytes for ``str`` and ``bytes`` fields and in elements for
    numeric sequences. Use the classmethod constructors.

    Attributes:
        kind: Wire representation of the length
        count: Element count, or None when it is not fixed by the descriptor
    """

    kind: LengthKind
    count: Optional[int] = None

    @classmethod
    def varint(cls) -> Length:
        """Varint count prefix followed by the elements."""
        return cls(LengthKind.VARINT)

    @classmethod
    def exact(cls, count: Union[int, Unknown]) -> Length:
        """Exactly ``count`` elements; any other length is an error."""
        return cls._counted(LengthKind.EXACT, count)

    @classmethod
    def padded(cls, count: Union[int, Unknown]) -> Length:
        """``count`` elements, zero-filling shorter values; longer is an error."""
        return cls._counted(LengthKind.PADDED, count)

    @classmethod
    def unframed(cls, count: Union[int, Unknown, None] = None) -> Length:
        """No length marker.

        Encoding writes the value as is. Decoding reads ``count`` elements and
        fails when no concrete count is given.
        """
        if count is None or count is UNKNOWN:
            return cls(LengthKind.UNFRAMED)
        return cls(LengthKind.UNFRAMED, _check_count(count))

    @classmethod
    def truncated(cls, count: Union[int, Unknown]) -> Length:
        """``count`` elements, zero-filling shorter values and cutting longer ones.

        Deprecated: silently dropping data hides encoding bugs. Prefer
        ``padded``, which rejects oversized values.
        """
        warnings.warn(
            "Length.truncated() is deprecated; use Length.padded() which rejects oversized values",
            DeprecationWarning,
            stacklevel=2,
        )
        return cls._counted(LengthKind.TRUNCATED, count)

    @classmethod
    def _counted(cls, kind: LengthKind, count: Union[int, Unknown]) -> Length:
        if count is UNKNOWN:
            return cls(LengthKind.UNFRAMED)
        return cls(kind, _check_count(count))

    def fit(self, name: str, actual: int) -> tuple[int, int]:
        """Decide how much of a value to write under this descriptor.

        Args:
            name: Field name, for error messages
            actual: Current element count of the value

        Returns:
            Tuple of (elements to write, zero elements to append)

        Raises:
            LengthError: If the value does not satisfy the descriptor
        """
        if self.kind in (LengthKind.VARINT, LengthKind.UNFRAMED):
            return actual, 0

        assert self.count is not None
        if self.kind is LengthKind.TRUNCATED:
            kept = min(actual, self.count)
            return kept, self.count - kept

        if actual > self.count:
            raise LengthError(
                f"Field {name}: value has {actual} elements, "
                f"longer than its {self.kind.value} length {self.count}"
            )
        if self.kind is LengthKind.EXACT and actual != self.count:
            raise LengthError(
                f"Field {name}: value has {actual} elements, expected exactly {self.count}"
            )
        return actual, self.count - actual

    def read_count(self, name: str) -> Optional[int]:
        """Return the element count to read, or None for a varint prefix.

        Raises:
            LengthError: If the length is unframed with no concrete count
        """
        if self.kind is LengthKind.VARINT:
            return None
        if self.count is None:
            raise LengthError(
                f"Field {name}: length is unresolved; an unframed field needs a "
                f"concrete count at decode time (known budget or sibling value)"
            )
        return self.count


def _check_count(count: Any) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise SchemaError(f"Length must be an integer, got {count!r}")
    if count < 0:
        raise LengthError(f"Resolved length is negative: {count}")
    return count


def normalize_length(result: Any) -> Length:
    """Turn a policy result into a Length descriptor.

    Raises:
        LengthError: If the result is a negative count
        SchemaError: If the result is not a valid policy result
    """
    if isinstance(result, Length):
        return result
    if result is None:
        return Length.varint()
    if result is UNKNOWN:
        return Length.unframed()
    return Length.padded(result)


class FieldContext:
    """Information available to length policies and type resolvers.

    Attributes:
        record: Record class being encoded or decoded
        length: Total byte length of the record, or UNKNOWN
    """

    direction = ""

    def __init__(self, record: type, length: Union[int, Unknown]) -> None:
        self.record = record
        self.length = length

    @property
    def remaining(self) -> Union[int, Unknown]:
        """Bytes of the budget not consumed yet, or UNKNOWN."""
        return UNKNOWN

    def get(self, name: str) -> Any:
        """Return the value of field ``name``."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.record.__name__}, length={self.length!r})"


class EncodeContext(FieldContext):
    """Context of one encode call.

    The whole record exists already, so ``get`` sees every field, including
    fields after the one being encoded. The encoded length is UNKNOWN.
    """

    direction = "encode"

    def __init__(self, pdu: Any) -> None:
        super().__init__(type(pdu), UNKNOWN)
        self._pdu = pdu

    def get(self, name: str) -> Any:
        if name not in type(self._pdu).model_fields:
            raise SchemaError(f"{self.record.__name__} has no field {name!r}")
        return getattr(self._pdu, name)


class DecodeContext(FieldContext):
    """Context of one decode call.

    ``get`` only sees fields decoded strictly earlier in schema order.
    """

    direction = "decode"

    def __init__(
        self,
        record: type,
        length: Optional[int],
        values: Mapping[str, Any],
        consumed: Callable[[], int],
    ) -> None:
        super().__init__(record, UNKNOWN if length is None else length)
        self._values = values
        self._consumed = consumed

    @property
    def remaining(self) -> Union[int, Unknown]:
        return self.length - self._consumed()

    def get(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError:
            if name in getattr(self.record, "model_fields", {}):
                raise SchemaError(
                    f"{self.record.__name__}.{name} is not decoded yet; "
                    f"policies may only use earlier fields"
                ) from None
            raise SchemaError(f"{self.record.__name__} has no field {name!r}") from None
