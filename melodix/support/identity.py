from __future__ import annotations

import re
import secrets
from typing import Optional

DEVICE_HEADER = "x-device-id"

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def new_object_id() -> str:
    """Return a fresh 24-character hex identifier for a stored record."""
    return secrets.token_hex(12)


def is_valid_object_id(value: object) -> bool:
    return isinstance(value, str) and bool(_OBJECT_ID_RE.match(value))


def read_device_id(headers) -> Optional[str]:
    """Extract the device identifier from request headers.

    The value is trusted verbatim; there is no signature or token behind it.
    """
    raw = headers.get(DEVICE_HEADER)
    if raw is None:
        return None
    value = raw.strip()
    return value or None


__all__ = ["DEVICE_HEADER", "new_object_id", "is_valid_object_id", "read_device_id"]
