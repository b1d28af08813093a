"""Field classification.

Every concrete field type maps to exactly one handling category. The mapping is
structural (it depends on the annotation, never on the value) and is computed
once when a record schema is compiled, so encoder and decoder always agree.
"""

from __future__ import annotations

import enum
import types
from dataclasses import dataclass
from typing import Annotated, Any, Optional, Union, get_args, get_origin

from ..exceptions import SchemaError
from ..models.base import BasePDU
from ..models.fields import numeric_code
from .byteorder import unit_size

NoneType = type(None)


class FieldKind(enum.Enum):
    """Handling category of a concrete field type."""

    SCALAR = "scalar-numeric"
    TUPLE = "fixed-tuple-of-numeric"
    SEQUENCE = "variable-sequence"
    RECORD = "nested-record"
    ABSENT = "absent"
    OPAQUE = "opaque-passthrough"


class ElementKind(enum.Enum):
    """Element type of a variable sequence."""

    CHAR = "char"
    BYTE = "byte"
    NUMERIC = "numeric"


@dataclass(frozen=True)
class TypeInfo:
    """Classification result for one concrete type.

    Attributes:
        kind: Handling category
        annotation: The concrete annotation as declared (used to match
            type resolver results)
        base: Annotation with ``Annotated`` metadata removed
        codes: ``struct`` codes: one for a scalar or numeric sequence element,
            one per element for a tuple
        element: Element type for sequences
    """

    kind: FieldKind
    annotation: Any
    base: Any
    codes: tuple[str, ...] = ()
    element: Optional[ElementKind] = None

    @property
    def fixed_size(self) -> Optional[int]:
        """Wire size in bytes when it does not depend on the value."""
        if self.kind in (FieldKind.SCALAR, FieldKind.TUPLE):
            return sum(unit_size(code) for code in self.codes)
        if self.kind is FieldKind.ABSENT:
            return 0
        return None

    def matches(self, value: Any) -> bool:
        """Return True if ``value`` is a plausible instance of this type."""
        if self.kind is FieldKind.ABSENT:
            return value is None
        if self.kind is FieldKind.SCALAR:
            return _matches_code(self.codes[0], value)
        if self.kind is FieldKind.TUPLE:
            return isinstance(value, tuple) and len(value) == len(self.codes)
        if self.kind is FieldKind.SEQUENCE:
            if self.element is ElementKind.CHAR:
                return isinstance(value, str)
            if self.element is ElementKind.BYTE:
                return isinstance(value, (bytes, bytearray))
            return isinstance(value, list)
        return isinstance(value, self.base)

    def describe(self) -> str:
        """Short human-readable name for error messages."""
        name = getattr(self.base, "__name__", repr(self.base))
        if self.kind is FieldKind.SCALAR:
            return f"{name}[{self.codes[0]}]"
        if self.kind is FieldKind.TUPLE:
            return f"tuple[{''.join(self.codes)}]"
        return name


def _matches_code(code: str, value: Any) -> bool:
    if code == "?":
        return isinstance(value, bool)
    if code in "efd":
        return isinstance(value, float)
    return isinstance(value, int) and not isinstance(value, bool)


def is_union(annotation: Any) -> bool:
    """Return True for ``Union[...]``, ``Optional[...]`` and ``X | Y``."""
    return get_origin(annotation) in (Union, types.UnionType)


def strip_annotated(annotation: Any) -> Any:
    """Remove ``Annotated`` metadata from an annotation."""
    if get_origin(annotation) is Annotated:
        return get_args(annotation)[0]
    return annotation


def classify_type(annotation: Any, metadata: tuple[Any, ...] = ()) -> TypeInfo:
    """Classify a concrete (non-union) field annotation.

    Args:
        annotation: Field annotation
        metadata: ``Annotated`` metadata that pydantic split off the annotation

    Returns:
        TypeInfo for the annotation

    Raises:
        SchemaError: If the annotation is a union or has no wire representation
    """
    if annotation is None or annotation is NoneType:
        return TypeInfo(FieldKind.ABSENT, annotation, NoneType)

    base = strip_annotated(annotation)

    code = numeric_code(annotation, metadata)
    if code is not None:
        return TypeInfo(FieldKind.SCALAR, annotation, base, (code,))

    if is_union(base):
        raise SchemaError(f"Union type {annotation} must be resolved before classification")

    origin = get_origin(base)
    args = get_args(base)

    if origin is tuple:
        if not args or Ellipsis in args:
            raise SchemaError(
                f"Tuple type {annotation} must list a fixed number of numeric elements"
            )
        codes = tuple(numeric_code(arg) for arg in args)
        if any(c is None for c in codes):
            raise SchemaError(f"Tuple type {annotation}: every element must be a numeric wire type")
        return TypeInfo(FieldKind.TUPLE, annotation, tuple, tuple(str(c) for c in codes))

    if base is str:
        return TypeInfo(FieldKind.SEQUENCE, annotation, str, element=ElementKind.CHAR)

    if base is bytes:
        return TypeInfo(FieldKind.SEQUENCE, annotation, bytes, element=ElementKind.BYTE)

    if origin is list:
        element_code = numeric_code(args[0]) if args else None
        if element_code is None:
            raise SchemaError(f"List type {annotation}: elements must be a numeric wire type")
        return TypeInfo(
            FieldKind.SEQUENCE, annotation, list, (element_code,), element=ElementKind.NUMERIC
        )

    if isinstance(base, type) and issubclass(base, BasePDU):
        return TypeInfo(FieldKind.RECORD, annotation, base)

    if isinstance(base, type) and hasattr(base, "pdu_read") and hasattr(base, "pdu_write"):
        return TypeInfo(FieldKind.OPAQUE, annotation, base)

    raise SchemaError(
        f"Unsupported field type {annotation}. Supported: numeric wire types "
        f"(UInt8, Int32, Float64, ...), tuples of them, str, bytes, lists of numerics, "
        f"BasePDU records, None, opaque types, and unions of these."
    )


def classify_candidates(annotation: Any) -> tuple[TypeInfo, ...]:
    """Classify each candidate of a union annotation, in declaration order."""
    return tuple(classify_type(arg) for arg in get_args(annotation))
