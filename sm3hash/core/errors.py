"""
Error types raised while hashing files.
"""

from __future__ import annotations

import errno
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    FILE_NOT_FOUND = "file_not_found"
    PERMISSION_DENIED = "permission_denied"
    IO_FAULT = "io_fault"
    INTERNAL_FAULT = "internal_fault"


class HashError(Exception):
    """Base class for hashing failures."""


class FileHashError(HashError):
    """A single file could not be hashed. Other queued files are unaffected."""

    def __init__(self, path: str, kind: ErrorKind, message: str):
        self.path = path
        self.kind = kind
        self.message = message
        super().__init__(message)

    @classmethod
    def from_os_error(cls, path: str, exc: OSError, reading: bool = False) -> "FileHashError":
        """Map an OSError raised by open() or read() onto an error kind."""
        if reading:
            kind = ErrorKind.IO_FAULT
        elif isinstance(exc, FileNotFoundError) or exc.errno == errno.ENOENT:
            kind = ErrorKind.FILE_NOT_FOUND
        elif isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EPERM):
            kind = ErrorKind.PERMISSION_DENIED
        else:
            kind = ErrorKind.IO_FAULT

        detail = exc.strerror or str(exc)
        if kind == ErrorKind.FILE_NOT_FOUND:
            message = f"File not found: {path}"
        elif kind == ErrorKind.PERMISSION_DENIED:
            message = f"Permission denied: {path}"
        elif reading:
            message = f"Read failed for {path}: {detail}"
        else:
            message = f"Cannot open {path}: {detail}"
        return cls(path, kind, message)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "kind": self.kind.value,
            "message": self.message,
        }


def describe_exception(exc: BaseException, path: Optional[str] = None) -> str:
    """Short message for an unexpected exception caught at the worker boundary."""
    text = f"{type(exc).__name__}: {exc}"
    if path:
        return f"{text} (while processing {path})"
    return text
