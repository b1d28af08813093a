"""Schema compilation for record models.

This module turns a BasePDU subclass into an immutable RecordSchema: the ordered
field list with each field's classified type(s), byte order, length policy and
type resolver. A schema is compiled on first use and shared by every encode and
decode call for that class.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from ..exceptions import EncodeError, SchemaError
from ..models.base import BasePDU
from .byteorder import ByteOrder
from .classify import (
    ElementKind,
    FieldKind,
    NoneType,
    TypeInfo,
    classify_candidates,
    classify_type,
    is_union,
)
from .length import UNKNOWN, FieldContext, Length, normalize_length

logger = logging.getLogger(__name__)


class _NoPolicy:
    def __repr__(self) -> str:
        return "NO_POLICY"


NO_POLICY: Any = _NoPolicy()

# Kinds whose wire size a length policy can set
_SIZED_KINDS = (FieldKind.SEQUENCE, FieldKind.RECORD, FieldKind.OPAQUE)


@dataclass(frozen=True)
class FieldSchema:
    """Compiled information for a single field.

    Attributes:
        name: Field name
        annotation: Declared annotation
        candidates: Classified concrete types (one unless the field is a union)
        union: Whether the declared type is a union
        byteorder: Byte order of numeric units in this field
        length_policy: Length policy, or NO_POLICY
        resolver: Type resolver, or None
    """

    name: str
    annotation: Any
    candidates: tuple[TypeInfo, ...]
    union: bool
    byteorder: ByteOrder
    length_policy: Any = NO_POLICY
    resolver: Optional[Callable[[FieldContext], Any]] = None

    def resolve(self, ctx: FieldContext) -> TypeInfo:
        """Pick the concrete type of this field for one encode/decode call.

        Args:
            ctx: Encode context (whole record visible) or decode context
                (earlier fields visible)

        Returns:
            Classified concrete type

        Raises:
            SchemaError: If the union cannot be resolved from the schema
            EncodeError: If the value matches no union candidate
        """
        if self.resolver is not None:
            return self._candidate_for(self.resolver(ctx))

        if not self.union:
            return self.candidates[0]

        if ctx.direction == "decode":
            raise SchemaError(
                f"Field {self.name}: union type {self.annotation} needs a type resolver "
                f"(pdu_fieldtypes) to be decoded"
            )

        value = ctx.get(self.name)
        matching = [c for c in self.candidates if c.matches(value)]
        if len(matching) == 1:
            return matching[0]
        if not matching:
            raise EncodeError(
                f"Field {self.name}: value {value!r} matches none of "
                f"{', '.join(c.describe() for c in self.candidates)}"
            )
        raise SchemaError(
            f"Field {self.name}: value {value!r} is ambiguous between "
            f"{', '.join(c.describe() for c in matching)}; add a type resolver (pdu_fieldtypes)"
        )

    def _candidate_for(self, chosen: Any) -> TypeInfo:
        if chosen is None:
            chosen = NoneType
        for candidate in self.candidates:
            if candidate.annotation is chosen or candidate.annotation == chosen:
                return candidate
            if candidate.kind is FieldKind.ABSENT and chosen is NoneType:
                return candidate
        raise SchemaError(
            f"Field {self.name}: type resolver returned {chosen!r}, "
            f"which is not a declared type of {self.annotation}"
        )

    def _evaluate_policy(self, ctx: FieldContext) -> Any:
        policy = self.length_policy
        return policy(ctx) if callable(policy) else policy

    def length(self, ctx: FieldContext, info: TypeInfo) -> Length:
        """Resolve the Length descriptor of a sequence value of this field."""
        if self.length_policy is NO_POLICY:
            if info.element is ElementKind.CHAR:
                return Length.varint()
            raise SchemaError(f"Field {self.name}: {info.describe()} sequence needs a length policy")
        return normalize_length(self._evaluate_policy(ctx))

    def budget(self, ctx: FieldContext) -> Optional[int]:
        """Resolve the byte budget of a nested record or opaque value.

        Returns:
            Concrete byte count, or None when the policy gives no concrete count
        """
        if self.length_policy is NO_POLICY:
            return None
        result = self._evaluate_policy(ctx)
        if result is None or result is UNKNOWN:
            return None
        return normalize_length(result).count


class RecordSchema:
    """Compiled schema of an entire record class.

    Example:
        >>> schema = RecordSchema.from_model(EthernetFrame)
        >>> [f.name for f in schema.fields]
        ['dstaddr', 'srcaddr', 'ethtype', 'payload', 'crc']
    """

    def __init__(self, model_class: type[BasePDU]) -> None:
        """Compile the schema of a record class.

        Args:
            model_class: BasePDU subclass to compile

        Raises:
            SchemaError: If the record declaration is invalid
        """
        if not (isinstance(model_class, type) and issubclass(model_class, BasePDU)):
            raise SchemaError(f"{model_class!r} is not a BasePDU subclass")
        self.model_class = model_class
        self.fields: tuple[FieldSchema, ...] = ()
        self._introspect()

    @classmethod
    def from_model(cls, model_class: type[BasePDU]) -> RecordSchema:
        """Return the (cached) schema of a record class."""
        return _compile(model_class)

    def _introspect(self) -> None:
        model = self.model_class
        names = list(model.model_fields)

        tables: Mapping[str, Mapping[str, Any]] = {
            "pdu_field_byteorder": model.pdu_field_byteorder,
            "pdu_lengths": model.pdu_lengths,
            "pdu_fieldtypes": model.pdu_fieldtypes,
        }
        for table_name, table in tables.items():
            unknown = sorted(set(table) - set(names))
            if unknown:
                raise SchemaError(
                    f"{model.__name__}.{table_name} names unknown field(s): {', '.join(unknown)}"
                )

        if not isinstance(model.pdu_byteorder, ByteOrder):
            raise SchemaError(f"{model.__name__}.pdu_byteorder must be a ByteOrder")

        fields = []
        for name, field_info in model.model_fields.items():
            fields.append(self._extract_field_schema(name, field_info.annotation, field_info.metadata))
        self.fields = tuple(fields)

        logger.debug(
            "Compiled schema for %s: %s",
            model.__name__,
            ", ".join(f"{f.name}:{'|'.join(c.kind.value for c in f.candidates)}" for f in self.fields),
        )

    def _extract_field_schema(
        self, name: str, annotation: Any, metadata: list[Any]
    ) -> FieldSchema:
        model = self.model_class

        union = is_union(annotation)
        if union:
            candidates = classify_candidates(annotation)
        else:
            candidates = (classify_type(annotation, tuple(metadata)),)

        byteorder = model.pdu_field_byteorder.get(name, model.pdu_byteorder)
        if not isinstance(byteorder, ByteOrder):
            raise SchemaError(f"Field {name}: byte order override must be a ByteOrder")

        length_policy = model.pdu_lengths.get(name, NO_POLICY)
        if length_policy is not NO_POLICY and not any(c.kind in _SIZED_KINDS for c in candidates):
            raise SchemaError(
                f"Field {name}: {model.__name__}.pdu_lengths gives a length policy, "
                f"but {' | '.join(c.describe() for c in candidates)} has a fixed width"
            )
        if length_policy is NO_POLICY:
            for candidate in candidates:
                if candidate.kind is FieldKind.SEQUENCE and candidate.element is not ElementKind.CHAR:
                    raise SchemaError(
                        f"Field {name}: {candidate.describe()} sequences need an explicit "
                        f"length policy in {model.__name__}.pdu_lengths "
                        f"(e.g. Length.varint() or a function of the context)"
                    )

        resolver = model.pdu_fieldtypes.get(name)
        if resolver is not None and not callable(resolver):
            raise SchemaError(f"Field {name}: type resolver must be callable")

        return FieldSchema(
            name=name,
            annotation=annotation,
            candidates=candidates,
            union=union,
            byteorder=byteorder,
            length_policy=length_policy,
            resolver=resolver,
        )

    def check_decodable(self) -> None:
        """Ensure every union field can be resolved at decode time.

        Raises:
            SchemaError: If a union field has no type resolver
        """
        for field in self.fields:
            if field.union and field.resolver is None:
                raise SchemaError(
                    f"{self.model_class.__name__}.{field.name}: union type {field.annotation} "
                    f"needs a type resolver (pdu_fieldtypes) to be decoded"
                )

    def fixed_size(self) -> Optional[int]:
        """Return the encoded size in bytes if no field is variable, else None."""
        total = 0
        for field in self.fields:
            if field.union or field.resolver is not None:
                return None
            info = field.candidates[0]
            if info.kind is FieldKind.RECORD:
                size = RecordSchema.from_model(info.base).fixed_size()
            else:
                size = info.fixed_size
            if size is None:
                return None
            total += size
        return total


@functools.lru_cache(maxsize=None)
def _compile(model_class: type[BasePDU]) -> RecordSchema:
    return RecordSchema(model_class)
