"""
Single-worker hashing queue.
Paths are appended from any thread; one background worker drains them in
FIFO order and reports each outcome on the event bus.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional

from sm3hash.core.errors import ErrorKind, FileHashError, describe_exception
from sm3hash.core.stream import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_PROGRESS_INTERVAL,
    DEFAULT_PROGRESS_STEP,
    ProgressThrottle,
    hash_file,
)
from sm3hash.ops.events import (
    BatchQueued,
    EventBus,
    FileFailed,
    FileHashed,
    FileProgress,
    FileStarted,
    QueueDrained,
)

logger = logging.getLogger(__name__)


class QueueState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class ReportOptions:
    """What a successful result carries. Read once per file when it starts."""
    uppercase: bool = True
    show_size: bool = True
    show_elapsed: bool = True


@dataclass(frozen=True)
class HashingOptions:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    progress_step: int = DEFAULT_PROGRESS_STEP
    progress_interval: float = DEFAULT_PROGRESS_INTERVAL


class WorkQueue:
    """
    FIFO of pending file paths plus a single-worker run flag.

    The pending list and the flag are only touched under `_lock`, which is
    never held while a file is being read.
    """

    def __init__(
        self,
        events: Optional[EventBus] = None,
        report_options: Optional[ReportOptions] = None,
        hashing_options: Optional[HashingOptions] = None,
    ):
        self.events = events or EventBus()
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._pending: deque[str] = deque()
        self._running = False
        self._worker: Optional[threading.Thread] = None
        self._current: Optional[str] = None
        self._processed = 0
        self._report_options = report_options or ReportOptions()
        self._hashing_options = hashing_options or HashingOptions()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> QueueState:
        with self._lock:
            return QueueState.RUNNING if self._running else QueueState.IDLE

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    @property
    def current_path(self) -> Optional[str]:
        with self._lock:
            return self._current

    @property
    def processed(self) -> int:
        """Files finished (either way) since this queue was created."""
        with self._lock:
            return self._processed

    def pending(self) -> list[str]:
        with self._lock:
            return list(self._pending)

    @property
    def report_options(self) -> ReportOptions:
        with self._lock:
            return self._report_options

    def set_report_options(self, **changes) -> ReportOptions:
        """Update report options; files already being hashed keep the old ones."""
        with self._lock:
            self._report_options = replace(self._report_options, **changes)
            return self._report_options

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no worker is running. Returns False on timeout."""
        with self._idle:
            return self._idle.wait_for(lambda: not self._running, timeout)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def enqueue(self, paths: Iterable[str]) -> int:
        """
        Append paths to the tail and make sure a worker is draining them.

        `BatchQueued` is emitted before the paths become visible to the
        worker, so it always precedes their `FileStarted` events.
        """
        batch = tuple(paths)
        if not batch:
            return 0

        logger.info("Queued %d file(s)", len(batch))
        self.events.emit(BatchQueued(paths=batch))
        with self._lock:
            self._pending.extend(batch)
            running = self._running

        if not running:
            self.start()
        return len(batch)

    def start(self) -> bool:
        """
        Spawn the worker unless one is running or there is nothing to do.

        Returns True when this call started a worker.
        """
        with self._lock:
            if self._running or not self._pending:
                return False
            self._running = True
            self._worker = threading.Thread(
                target=self._supervise,
                name="sm3-worker",
                daemon=True,
            )
            worker = self._worker

        logger.debug("Starting hashing worker")
        try:
            worker.start()
        except RuntimeError:
            with self._lock:
                self._running = False
                self._worker = None
                self._idle.notify_all()
            raise
        return True

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _next_path(self) -> Optional[str]:
        """Pop the head entry, or clear the run flag if there is none."""
        with self._lock:
            if not self._pending:
                self._running = False
                self._current = None
                self._worker = None
                self._idle.notify_all()
                return None
            self._current = self._pending.popleft()
            return self._current

    def _supervise(self) -> None:
        path: Optional[str] = None
        processed = 0
        try:
            while True:
                path = self._next_path()
                if path is None:
                    break
                self._process(path)
                processed += 1
                with self._lock:
                    self._processed += 1
                path = None
        except Exception as exc:
            logger.exception("Hashing worker crashed")
            if path is not None:
                # the faulted file is finished too
                processed += 1
                with self._lock:
                    self._processed += 1
            self.events.emit(FileFailed(
                path=path,
                kind=ErrorKind.INTERNAL_FAULT,
                message=describe_exception(exc, path),
            ))
        finally:
            with self._lock:
                # a new worker may already own the flag after a clean exit
                if self._worker is threading.current_thread():
                    self._running = False
                    self._current = None
                    self._worker = None
                    self._idle.notify_all()
            self.events.emit(QueueDrained(processed=processed))

    def _process(self, path: str) -> None:
        """Hash one file and emit its outcome. Per-file errors are not raised."""
        with self._lock:
            report = self._report_options
            hashing = self._hashing_options

        self.events.emit(FileStarted(path=path))
        throttle = ProgressThrottle(
            step=hashing.progress_step,
            interval=hashing.progress_interval,
        )

        def on_progress(percent: int) -> None:
            self.events.emit(FileProgress(path=path, percent=percent))

        try:
            result = hash_file(
                path,
                on_progress=on_progress,
                chunk_size=hashing.chunk_size,
                throttle=throttle,
            )
        except FileHashError as exc:
            logger.warning("Hashing failed: %s", exc.message)
            self.events.emit(FileFailed(path=path, kind=exc.kind, message=exc.message))
            return

        logger.info("Hashed %s", path)
        self.events.emit(FileHashed(
            path=path,
            digest=result.hexdigest(uppercase=report.uppercase),
            size_bytes=result.byte_length if report.show_size else None,
            elapsed_seconds=result.elapsed_seconds if report.show_elapsed else None,
        ))
