"""
Error taxonomy for repository operations.

Every error carries a stable ``kind`` and a message that is safe to show to
the caller. Filesystem paths and other internals belong in the log, never in
``message``.
"""

from __future__ import annotations

from typing import ClassVar


class RepositoryError(Exception):
    """Base class for all repository failures."""

    kind: ClassVar[str] = "RepositoryError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequest(RepositoryError):
    """Malformed or unsafe input. Caller's fault, not retried."""

    kind = "InvalidRequest"


class NotFound(RepositoryError):
    """Referenced entity is absent. May become present later."""

    kind = "NotFound"


class CorruptState(RepositoryError):
    """Manifest exists but cannot be parsed; must be fixed out-of-band."""

    kind = "CorruptState"


class IOFailure(RepositoryError):
    """Transient filesystem error. Safe to retry."""

    kind = "IOFailure"


class InternalError(RepositoryError):
    """Catch-all used by the service layer's external contract."""

    kind = "InternalError"
