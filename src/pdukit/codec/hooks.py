"""Hook contract enforcement.

Records customise encoding and decoding through two methods:

- ``preencode(self)`` runs before encoding and returns the record to encode
  (for computed fields such as counts and checksums).
- ``postdecode(self)`` runs after decoding and returns the record to hand to
  the caller, or rejects it.

Hooks may return a new instance but never a different record type.
"""

from __future__ import annotations

from typing import TypeVar

from ..exceptions import PdukitError, SchemaError, ValidationError
from ..models.base import BasePDU

P = TypeVar("P", bound=BasePDU)


def _check_same_type(original: BasePDU, result: object, hook: str) -> None:
    if type(result) is not type(original):
        raise SchemaError(
            f"{type(original).__name__}.{hook}() must return a {type(original).__name__}, "
            f"got {type(result).__name__}"
        )


def run_preencode(pdu: P) -> P:
    """Run the pre-encode hook of ``pdu``.

    Raises:
        SchemaError: If the hook returns another type
    """
    result = pdu.preencode()
    _check_same_type(pdu, result, "preencode")
    return result


def run_postdecode(pdu: P) -> P:
    """Run the post-decode hook of ``pdu``.

    Raises:
        ValidationError: If the hook rejects the record
        SchemaError: If the hook returns another type
    """
    try:
        result = pdu.postdecode()
    except PdukitError:
        raise
    except ValueError as e:
        raise ValidationError(f"{type(pdu).__name__} rejected by postdecode: {e}") from e
    _check_same_type(pdu, result, "postdecode")
    return result
