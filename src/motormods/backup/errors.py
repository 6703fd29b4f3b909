"""Backup error types.

Every failure carries an :class:`ErrorKind` tag alongside the
human-readable message, so callers can branch on the kind while still
showing the message text to the user unchanged.
"""

from enum import Enum


class ErrorKind(Enum):
    PATH_RESOLUTION = "path_resolution"
    IO = "io"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"


class BackupError(Exception):
    """Base exception for backup operations."""

    kind: ErrorKind = ErrorKind.IO

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PathResolutionError(BackupError):
    """The application config directory could not be determined."""

    kind = ErrorKind.PATH_RESOLUTION


class BackupIOError(BackupError):
    """A copy, stat, remove or mkdir call failed."""

    kind = ErrorKind.IO

    @classmethod
    def wrap(cls, action: str, exc: OSError) -> "BackupIOError":
        """Build an error like ``"Failed to restore database: <os error>"``."""
        detail = exc.strerror or str(exc)
        if exc.filename:
            detail = f"{detail}: '{exc.filename}'"
        return cls(f"{action}: {detail}")


class NotFoundError(BackupError):
    """A referenced database or backup file does not exist."""

    kind = ErrorKind.NOT_FOUND


class InvalidInputError(BackupError):
    """Wrong file extension, malformed name or destination."""

    kind = ErrorKind.INVALID_INPUT
