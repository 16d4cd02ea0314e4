"""
Streaming SM3 over files.
Reads large chunks, feeds 64-byte blocks to the compression function and
reports throttled progress percentages.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Optional

from sm3hash.core.errors import FileHashError
from sm3hash.core.sm3 import (
    BLOCK_SIZE,
    IV,
    ChainingValue,
    compress,
    finalize,
    words_to_bytes,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 256 * 1024
DEFAULT_PROGRESS_STEP = 1
DEFAULT_PROGRESS_INTERVAL = 0.2

ProgressCallback = Callable[[int], None]


@dataclass(frozen=True)
class HashResult:
    """Digest of one file plus the numbers the UI may show next to it."""
    path: str
    digest: bytes
    byte_length: int
    elapsed_seconds: float

    def hexdigest(self, uppercase: bool = False) -> str:
        text = self.digest.hex()
        return text.upper() if uppercase else text


class ProgressThrottle:
    """
    Decides which progress percentages are worth emitting.

    A value passes when it differs from the last emitted one and either rose by
    at least `step` or `interval` seconds went by since the last emission.
    Values below the last emitted one never pass.
    """

    def __init__(
        self,
        step: int = DEFAULT_PROGRESS_STEP,
        interval: float = DEFAULT_PROGRESS_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.step = max(1, step)
        self.interval = interval
        self._clock = clock
        self._last_percent = -1
        self._last_time = clock()

    @property
    def last_percent(self) -> int:
        return self._last_percent

    def mark(self, percent: int) -> None:
        """Record an emission made outside of offer()."""
        self._last_percent = percent
        self._last_time = self._clock()

    def offer(self, percent: int) -> bool:
        if percent <= self._last_percent:
            return False
        now = self._clock()
        if percent - self._last_percent >= self.step or now - self._last_time >= self.interval:
            self._last_percent = percent
            self._last_time = now
            return True
        return False


class BlockAccumulator:
    """
    Turns arbitrarily sized chunks into whole 64-byte blocks.

    Owns the chaining value for exactly one input; call digest() once at the end.
    """

    def __init__(self):
        self._state: ChainingValue = IV
        self._block = bytearray(BLOCK_SIZE)
        self._fill = 0
        self.total = 0

    def update(self, chunk: bytes) -> None:
        view = memoryview(chunk)
        size = len(view)
        self.total += size
        offset = 0

        if self._fill:
            take = min(BLOCK_SIZE - self._fill, size)
            self._block[self._fill:self._fill + take] = view[:take]
            self._fill += take
            offset = take
            if self._fill < BLOCK_SIZE:
                return
            self._state = compress(self._state, bytes(self._block))
            self._fill = 0

        state = self._state
        while size - offset >= BLOCK_SIZE:
            state = compress(state, view[offset:offset + BLOCK_SIZE])
            offset += BLOCK_SIZE
        self._state = state

        rest = size - offset
        if rest:
            self._block[:rest] = view[offset:]
            self._fill = rest

    def digest(self) -> bytes:
        words = finalize(self._state, self._block, self._fill, self.total * 8)
        return words_to_bytes(words)


def _percent(total: int, length: int) -> int:
    return min(100, total * 100 // length)


def hash_file(
    path: str,
    on_progress: Optional[ProgressCallback] = None,
    chunk_size: Optional[int] = None,
    throttle: Optional[ProgressThrottle] = None,
) -> HashResult:
    """
    Compute the SM3 digest of a file using streaming reads.

    Progress is reported as 0 first, then throttled percentages, then 100.

    Raises:
        FileHashError: the file cannot be opened or a read fails.
    """
    path = os.fspath(path)
    chunk_size = chunk_size or DEFAULT_CHUNK_SIZE
    started = time.perf_counter()

    try:
        handle = open(path, "rb")
    except OSError as exc:
        raise FileHashError.from_os_error(path, exc) from exc

    with handle:
        try:
            length = os.fstat(handle.fileno()).st_size
        except OSError as exc:
            raise FileHashError.from_os_error(path, exc) from exc

        throttle = throttle or ProgressThrottle()
        accumulator = BlockAccumulator()

        if on_progress is not None:
            throttle.mark(0)
            on_progress(0)

        while True:
            try:
                chunk = handle.read(chunk_size)
            except OSError as exc:
                raise FileHashError.from_os_error(path, exc, reading=True) from exc
            if not chunk:
                break
            accumulator.update(chunk)

            if on_progress is not None and length > 0:
                percent = _percent(accumulator.total, length)
                if throttle.offer(percent):
                    on_progress(percent)

        digest = accumulator.digest()

    if on_progress is not None and throttle.last_percent != 100:
        throttle.mark(100)
        on_progress(100)

    elapsed = time.perf_counter() - started
    logger.debug("Hashed %s (%d bytes) in %.3fs", path, accumulator.total, elapsed)
    return HashResult(
        path=path,
        digest=digest,
        byte_length=accumulator.total,
        elapsed_seconds=elapsed,
    )
