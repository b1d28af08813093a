"""Pydantic record modeling for pdukit.

This module provides the BasePDU class and the wire types used to declare
record fields.
"""

from __future__ import annotations

from .base import BasePDU
from .fields import (
    Bool,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    NTuple,
    Numeric,
    Opaque,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)

__all__ = [
    "BasePDU",
    "Numeric",
    "NTuple",
    "Opaque",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Float32",
    "Float64",
    "Bool",
]
