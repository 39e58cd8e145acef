"""Error types raised across the excavate package.

Detection entry points never raise: missing or malformed repository files are
treated as "no signal". The registry is the exception, since a registry that
cannot be loaded cannot answer any query.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    REGISTRY_LOAD_FAILED = "REGISTRY_LOAD_FAILED"
    REGISTRY_INVALID = "REGISTRY_INVALID"


class ExcavateError(Exception):
    """Base error carrying a machine-readable code."""

    def __init__(self, code: ErrorCode, message: str, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def to_dict(self) -> dict[str, object]:
        return {
            "code": self.code.value,
            "message": self.message,
            "recoverable": self.recoverable,
        }
