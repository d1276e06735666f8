"""
Path-safety primitives.

Untrusted path segments are rejected outright when they fail the allow-list
rules; nothing is normalized and re-checked afterwards. ``safe_join`` is the
only place request input is turned into a filesystem path.
"""

from __future__ import annotations

import re
from pathlib import Path

from syos_repo.core.errors import InvalidRequest

MAX_SEGMENT_BYTES = 255

# A segment is one or more characters, none of them a path separator or NUL.
_SEGMENT_PATTERN = re.compile(r"[^/\\\x00]+")


def validate_segment(value: str, field: str) -> str:
    """
    Check a single untrusted path segment and return it unchanged.

    Raises InvalidRequest for empty values, separators, NUL bytes, any ``..``
    sequence, or values longer than MAX_SEGMENT_BYTES once UTF-8 encoded.
    """
    if not isinstance(value, str) or not value:
        raise InvalidRequest(f"Invalid {field}: must not be empty")
    if not _SEGMENT_PATTERN.fullmatch(value):
        raise InvalidRequest(f"Invalid {field}: path separators and null bytes are not allowed")
    if ".." in value or value == ".":
        raise InvalidRequest(f"Invalid {field}: relative path components are not allowed")
    try:
        encoded = value.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidRequest(f"Invalid {field}: not valid UTF-8") from None
    if len(encoded) > MAX_SEGMENT_BYTES:
        raise InvalidRequest(f"Invalid {field}: longer than {MAX_SEGMENT_BYTES} bytes")
    return value


def safe_join(root: Path, *segments: str) -> Path:
    """
    Join validated segments below ``root``.

    Every segment is validated again here so no caller can bypass the rules.
    """
    path = root
    for segment in segments:
        path = path / validate_segment(segment, "path segment")
    return path
