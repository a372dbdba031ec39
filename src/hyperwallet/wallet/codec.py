"""Display <-> wire conversion for form fields.

Only ``[]uint8`` differs between the two: the user types text, the ledger
receives the UTF-8 bytes of that text as standard base64. Every other type
travels exactly as typed.
"""

from __future__ import annotations

from ..errors import CodecError
from ..utils import base64_decode, base64_encode
from .defaults import FieldKind, classify


def to_encoded(field_type: str, display: str) -> str:
    if classify(field_type) is FieldKind.BYTES:
        return base64_encode(display.encode("utf-8"))
    return display


def to_display(field_type: str, encoded: str) -> str:
    """Inverse of ``to_encoded``.

    Raises:
        CodecError: If a ``[]uint8`` value is not base64 of UTF-8 text
    """
    if classify(field_type) is not FieldKind.BYTES:
        return encoded
    try:
        return base64_decode(encoded).decode("utf-8")
    except (ValueError, UnicodeDecodeError) as exc:
        raise CodecError(f"Cannot decode {field_type} value {encoded!r}: {exc}") from exc
