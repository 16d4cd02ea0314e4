"""
Human-readable output lines for worker events.
Shared by the results log of the API and the command line tool.
"""

from __future__ import annotations

from typing import Optional

from sm3hash.core.errors import ErrorKind
from sm3hash.ops.events import (
    BatchQueued,
    Event,
    FileFailed,
    FileHashed,
    FileStarted,
)


def display_text(text: Optional[str]) -> Optional[str]:
    """
    Make a path or message safe to encode as UTF-8.

    File names that are not valid UTF-8 come back from the OS as surrogate
    escapes; those bytes are shown as `\\xNN` instead.
    """
    if text is None:
        return None
    try:
        raw = text.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        # lone surrogates that are not escaped bytes
        return text.encode("utf-8", "backslashreplace").decode("utf-8")
    return raw.decode("utf-8", "backslashreplace")


def format_size(size_bytes: int) -> str:
    return f"File size: {size_bytes} bytes"


def format_elapsed(seconds: float) -> str:
    return f"Elapsed: {seconds:.2f} s"


def format_event_lines(event: Event) -> list[str]:
    """
    Lines to append to the output log for an event.

    Progress and drain events produce no lines.
    """
    if isinstance(event, BatchQueued):
        return [f"Queued: {event.count} file(s)"]

    if isinstance(event, FileStarted):
        return [f"Hashing: {display_text(event.path)}"]

    if isinstance(event, FileHashed):
        lines = [f"SM3: {event.digest}"]
        if event.size_bytes is not None:
            lines.append(format_size(event.size_bytes))
        if event.elapsed_seconds is not None:
            lines.append(format_elapsed(event.elapsed_seconds))
        lines.append("Done.")
        return lines

    if isinstance(event, FileFailed):
        if event.kind == ErrorKind.INTERNAL_FAULT:
            return [f"Internal error: {display_text(event.message)}"]
        return [f"Error: {display_text(event.message)}"]

    return []
