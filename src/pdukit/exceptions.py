"""Exception hierarchy for pdukit.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from PdukitError for easy catching of any pdukit-specific error.
"""

from __future__ import annotations


class PdukitError(Exception):
    """Base exception for all pdukit errors."""

    pass


class SchemaError(PdukitError):
    """Raised when a record schema is invalid or incomplete.

    Examples:
        - Union field decoded without a type resolver
        - Byte or numeric sequence field without a length policy
        - Field annotation with no wire representation (e.g. bare ``int``)
        - Configuration table naming a field that does not exist
        - Hook returning an instance of a different record type
    """

    pass


class EncodeError(PdukitError):
    """Raised when encoding a record fails.

    Examples:
        - Scalar value does not fit its wire width
        - Value type does not match any union candidate
    """

    pass


class DecodeError(PdukitError):
    """Raised when decoding binary data fails.

    Examples:
        - Truncated data (insufficient bytes)
        - Invalid UTF-8 in a character sequence
        - Post-decode validation failure
    """

    pass


class LengthError(EncodeError, DecodeError):
    """Raised when a resolved field length is inconsistent or unresolved.

    Examples:
        - Value longer than an exact or padded length
        - Value shorter than an exact length
        - Unframed length with no concrete count at decode time
        - Negative resolved length
        - Record exceeds pdu_max_bytes
    """

    pass


class TruncationError(DecodeError):
    """Raised when the byte source is exhausted before a field is fully read."""

    pass


class ValidationError(DecodeError):
    """Raised when a decoded record is rejected.

    Examples:
        - Checksum mismatch reported by a post-decode hook
        - Decoded values rejected by the record model's own validation
    """

    pass
