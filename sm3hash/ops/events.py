"""
Events emitted by the hashing worker and the bus that delivers them.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Union

from sm3hash.core.errors import ErrorKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchQueued:
    """Files were appended to the queue."""
    paths: tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.paths)


@dataclass(frozen=True)
class FileStarted:
    path: str


@dataclass(frozen=True)
class FileProgress:
    path: str
    percent: int


@dataclass(frozen=True)
class FileHashed:
    """
    A file was hashed successfully.

    `digest` is already in the case chosen by the report options; size and
    elapsed time are None when the options turn them off.
    """
    path: str
    digest: str
    size_bytes: Optional[int] = None
    elapsed_seconds: Optional[float] = None
    completed_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class FileFailed:
    """A file could not be hashed, or the worker hit an internal fault."""
    path: Optional[str]
    kind: ErrorKind
    message: str
    completed_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class QueueDrained:
    """The worker stopped; the queue is idle again."""
    processed: int


Event = Union[BatchQueued, FileStarted, FileProgress, FileHashed, FileFailed, QueueDrained]
Listener = Callable[[Event], None]


class EventBus:
    """
    Fan-out of worker events to subscribers.

    Listeners run on the emitting thread and should return quickly. A listener
    that raises is logged and does not affect the others or the worker.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it again."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: Event) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener %r failed on %s", listener, type(event).__name__)
