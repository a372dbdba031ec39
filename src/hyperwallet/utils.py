from __future__ import annotations

import base64
import binascii
import hashlib
from datetime import datetime, timezone


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def base64_encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def base64_decode(value: str) -> bytes:
    try:
        return base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ValueError(f"Invalid base64: {value!r}") from exc


def clock_time(now: datetime | None = None) -> str:
    """Wall-clock ``HH:MM:SS`` used to stamp execution log lines."""
    now = now or datetime.now()
    return now.strftime("%H:%M:%S")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def from_millis(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def relative_age(then: datetime, now: datetime | None = None) -> str:
    """Render the distance between ``then`` and ``now`` as "n units ago".

    Timestamps in the future (clock skew between node and client) render as
    "just now".
    """
    now = now or utc_now()
    seconds = round((now - then).total_seconds())
    if seconds < 1:
        return "just now"
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            count = seconds // size
            break
    else:
        unit, count = "second", seconds
    suffix = "" if count == 1 else "s"
    return f"{count} {unit}{suffix} ago"
