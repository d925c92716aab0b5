"""
Core domain package.

This package contains the song record, the database kernel and the secondary
operations built on top of it. It has no knowledge of the command line.

We intentionally keep exports minimal; consumers should usually import from the
specific module they need (e.g. `musicdb.core.database`).
"""

from __future__ import annotations

__all__: list[str] = [
    "CoreError",
    "DataFormatError",
    "DurationFormatError",
    "PreconditionViolation",
    "ResourceError",
    "UnknownKindError",
]


class CoreError(Exception):
    """Base class for core-layer exceptions."""


class PreconditionViolation(CoreError):
    """Raised when a caller breaks an operation's stated requirement."""


class UnknownKindError(PreconditionViolation):
    """Raised when a storage kind name is not registered."""


class DataFormatError(CoreError, ValueError):
    """
    Raised when a record line does not have the expected shape.

    `source` and `line_no` are set when the error comes from reading a file.
    """

    def __init__(self, message: str, *, source: str | None = None, line_no: int | None = None):
        if source is not None and line_no is not None:
            message = f"{source}:{line_no}: {message}"
        super().__init__(message)
        self.source = source
        self.line_no = line_no


class DurationFormatError(DataFormatError):
    """Raised when a duration is not `MM:SS` text."""


class ResourceError(CoreError):
    """Raised when a file cannot be opened, read or written."""
