"""
In-memory record of what the worker reported.
Subscribes to the event bus and keeps the current progress, a bounded
result history and the output log text.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sm3hash.core.errors import ErrorKind
from sm3hash.ops.events import (
    Event,
    EventBus,
    FileFailed,
    FileHashed,
    FileProgress,
    FileStarted,
    QueueDrained,
)
from sm3hash.utils.formatting import display_text, format_event_lines


@dataclass(frozen=True)
class ResultRecord:
    """Outcome of one file."""
    path: Optional[str]
    ok: bool
    completed_at: datetime
    digest: Optional[str] = None
    size_bytes: Optional[int] = None
    elapsed_seconds: Optional[float] = None
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None

    def to_dict(self) -> dict:
        """JSON-ready fields; undecodable file name bytes are escaped."""
        return {
            "path": display_text(self.path),
            "ok": self.ok,
            "completed_at": self.completed_at.isoformat(),
            "digest": self.digest,
            "size_bytes": self.size_bytes,
            "elapsed_seconds": self.elapsed_seconds,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "error_message": display_text(self.error_message),
        }


@dataclass(frozen=True)
class ProgressSnapshot:
    path: Optional[str]
    percent: int


class ResultStore:
    """Event subscriber backing the results and progress endpoints."""

    def __init__(self, history_limit: int = 1000, line_limit: Optional[int] = 10000):
        self._lock = threading.Lock()
        self._results: deque[ResultRecord] = deque(maxlen=history_limit)
        # oldest lines drop off once the log is full
        self._lines: deque[str] = deque(maxlen=line_limit)
        self._current_path: Optional[str] = None
        self._percent = 0
        self._unsubscribe = None

    def attach(self, events: EventBus) -> None:
        self.detach()
        self._unsubscribe = events.subscribe(self.handle)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def handle(self, event: Event) -> None:
        lines = format_event_lines(event)
        with self._lock:
            self._lines.extend(lines)

            if isinstance(event, FileStarted):
                self._current_path = event.path
                self._percent = 0
            elif isinstance(event, FileProgress):
                if event.path == self._current_path:
                    self._percent = event.percent
            elif isinstance(event, FileHashed):
                self._percent = 100
                self._results.append(ResultRecord(
                    path=event.path,
                    ok=True,
                    completed_at=event.completed_at,
                    digest=event.digest,
                    size_bytes=event.size_bytes,
                    elapsed_seconds=event.elapsed_seconds,
                ))
            elif isinstance(event, FileFailed):
                self._results.append(ResultRecord(
                    path=event.path,
                    ok=False,
                    completed_at=event.completed_at,
                    error_kind=event.kind,
                    error_message=event.message,
                ))
            elif isinstance(event, QueueDrained):
                self._current_path = None

    def progress(self) -> ProgressSnapshot:
        with self._lock:
            return ProgressSnapshot(path=self._current_path, percent=self._percent)

    def results(self) -> list[ResultRecord]:
        with self._lock:
            return list(self._results)

    def text(self) -> str:
        with self._lock:
            return "\n".join(self._lines)

    def clear(self) -> None:
        """Forget the history and the output log; progress is left alone."""
        with self._lock:
            self._results.clear()
            self._lines.clear()
