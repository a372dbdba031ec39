"""
Field type classification and initial form values.

ABI field types form a small closed set. ``classify`` maps a type name to a
``FieldKind``; everything the form layer does per type dispatches on that
kind, with ``UNKNOWN`` as the explicit fallback for tags added later.
"""

from __future__ import annotations

import enum
import re

BYTES_TYPE = "[]uint8"
ADDRESS_TYPE = "Address"
STRING_TYPE = "string"

# Amount-like width that starts at one instead of zero
ONE_DEFAULT_TYPE = "uint64"

# Placeholder shown in address fields; not tied to any key
EXAMPLE_ADDRESS = "00cf77495ce1bdbf11e5e45463fad5a862cb6cc0a20e00e658c4ac3355dcdc64bb"

_UNSIGNED = re.compile(r"^uint(8|16|32|64)$")
_SIGNED = re.compile(r"^int(8|16|32|64)$")


class FieldKind(enum.Enum):
    ADDRESS = "address"
    STRING = "string"
    BYTES = "bytes"
    UNSIGNED = "unsigned"
    SIGNED = "signed"
    ARRAY = "array"
    UNKNOWN = "unknown"


def classify(field_type: str) -> FieldKind:
    if field_type == ADDRESS_TYPE:
        return FieldKind.ADDRESS
    if field_type == STRING_TYPE:
        return FieldKind.STRING
    if field_type == BYTES_TYPE:
        return FieldKind.BYTES
    if field_type.startswith("[]"):
        return FieldKind.ARRAY
    if _UNSIGNED.match(field_type):
        return FieldKind.UNSIGNED
    if _SIGNED.match(field_type):
        return FieldKind.SIGNED
    return FieldKind.UNKNOWN


def is_supported(field_type: str) -> bool:
    """Array fields other than ``[]uint8`` cannot be edited."""
    return classify(field_type) is not FieldKind.ARRAY


def resolve_default(field_type: str) -> str:
    kind = classify(field_type)
    if kind is FieldKind.ADDRESS:
        return EXAMPLE_ADDRESS
    if kind is FieldKind.BYTES or kind is FieldKind.STRING:
        return ""
    if kind is FieldKind.UNSIGNED:
        return "1" if field_type == ONE_DEFAULT_TYPE else "0"
    if kind is FieldKind.SIGNED:
        return "0"
    # ARRAY and UNKNOWN
    return ""
