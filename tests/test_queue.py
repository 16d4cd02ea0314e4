from __future__ import annotations

import threading
from pathlib import Path

import pytest

from sm3hash.core.errors import ErrorKind
from sm3hash.ops import queue as queue_module
from sm3hash.ops.events import (
    BatchQueued,
    EventBus,
    FileFailed,
    FileHashed,
    FileProgress,
    FileStarted,
    QueueDrained,
)
from sm3hash.ops.queue import QueueState, ReportOptions, WorkQueue

ABC_DIGEST = "66c7f0f462eeedd9d1f2d46bdc10e4e24167c4875cf2f7a2297da02b8f4ba8e0"


class Recorder:
    """Collects events and signals when the worker drains."""

    def __init__(self, events: EventBus) -> None:
        self.events: list = []
        self._lock = threading.Lock()
        self.drained = threading.Event()
        events.subscribe(self)

    def __call__(self, event) -> None:
        with self._lock:
            self.events.append(event)
        if isinstance(event, QueueDrained):
            self.drained.set()

    def of(self, kind) -> list:
        with self._lock:
            return [event for event in self.events if isinstance(event, kind)]


def _files(tmp_path: Path, count: int) -> list[str]:
    paths = []
    for i in range(count):
        path = tmp_path / f"file{i}.bin"
        path.write_bytes(bytes([i]) * (100 + i))
        paths.append(str(path))
    return paths


def test_enqueue_processes_all_files_with_one_worker(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    paths = _files(tmp_path, 5)
    events = EventBus()
    recorder = Recorder(events)
    active = 0
    max_active = 0
    lock = threading.Lock()
    real_hash_file = queue_module.hash_file

    def tracking_hash_file(path, **kwargs):
        nonlocal active, max_active
        with lock:
            active += 1
            max_active = max(max_active, active)
        try:
            return real_hash_file(path, **kwargs)
        finally:
            with lock:
                active -= 1

    monkeypatch.setattr(queue_module, "hash_file", tracking_hash_file)
    queue = WorkQueue(events=events)

    assert queue.enqueue(paths) == 5
    assert queue.wait_idle(timeout=10)
    assert recorder.drained.wait(timeout=5)

    assert queue.state == QueueState.IDLE
    assert queue.pending() == []
    assert queue.processed == 5
    assert max_active == 1
    assert [event.path for event in recorder.of(FileHashed)] == paths
    assert recorder.of(BatchQueued)[0].paths == tuple(paths)
    assert len(recorder.of(QueueDrained)) == 1


def test_progress_events_start_at_zero_and_end_at_hundred(tmp_path: Path) -> None:
    paths = _files(tmp_path, 2)
    events = EventBus()
    recorder = Recorder(events)
    queue = WorkQueue(events=events)

    queue.enqueue(paths)
    assert queue.wait_idle(timeout=10)

    for path in paths:
        percents = [e.percent for e in recorder.of(FileProgress) if e.path == path]
        assert percents[0] == 0
        assert percents[-1] == 100
        assert percents == sorted(percents)


def test_failed_file_does_not_stop_batch(tmp_path: Path) -> None:
    good_one, good_two = _files(tmp_path, 2)
    missing = str(tmp_path / "missing.bin")
    events = EventBus()
    recorder = Recorder(events)
    queue = WorkQueue(events=events)

    queue.enqueue([good_one, missing, good_two])
    assert queue.wait_idle(timeout=10)

    assert [e.path for e in recorder.of(FileStarted)] == [good_one, missing, good_two]
    assert [e.path for e in recorder.of(FileHashed)] == [good_one, good_two]
    failures = recorder.of(FileFailed)
    assert len(failures) == 1
    assert failures[0].path == missing
    assert failures[0].kind == ErrorKind.FILE_NOT_FOUND
    assert queue.processed == 3


def test_enqueue_while_running_only_appends(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    first, second = _files(tmp_path, 2)
    gate = threading.Event()
    busy = threading.Event()
    threads = []
    real_hash_file = queue_module.hash_file

    def blocking_hash_file(path, **kwargs):
        threads.append(threading.current_thread())
        busy.set()
        gate.wait(timeout=10)
        return real_hash_file(path, **kwargs)

    monkeypatch.setattr(queue_module, "hash_file", blocking_hash_file)
    events = EventBus()
    recorder = Recorder(events)
    queue = WorkQueue(events=events)

    queue.enqueue([first])
    assert busy.wait(timeout=5)
    assert queue.state == QueueState.RUNNING
    assert queue.current_path == first

    queue.enqueue([second])
    assert queue.start() is False
    assert queue.pending() == [second]

    gate.set()
    assert queue.wait_idle(timeout=10)

    assert [e.path for e in recorder.of(FileHashed)] == [first, second]
    assert len(set(threads)) == 1


def test_internal_fault_leaves_queue_idle(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    first, second = _files(tmp_path, 2)
    real_hash_file = queue_module.hash_file

    def broken_hash_file(path, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(queue_module, "hash_file", broken_hash_file)
    events = EventBus()
    recorder = Recorder(events)
    queue = WorkQueue(events=events)

    queue.enqueue([first, second])
    assert queue.wait_idle(timeout=10)
    assert recorder.drained.wait(timeout=5)

    assert queue.state == QueueState.IDLE
    failures = recorder.of(FileFailed)
    assert len(failures) == 1
    assert failures[0].kind == ErrorKind.INTERNAL_FAULT
    assert failures[0].path == first
    assert "boom" in failures[0].message
    # the worker stopped; the rest waits for the next start
    assert queue.pending() == [second]
    assert queue.processed == 1
    assert recorder.of(QueueDrained)[0].processed == 1

    monkeypatch.setattr(queue_module, "hash_file", real_hash_file)
    assert queue.start() is True
    assert queue.wait_idle(timeout=10)
    assert [e.path for e in recorder.of(FileHashed)] == [second]
    assert queue.processed == 2


def test_batch_is_announced_before_its_files_start(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    first, second = _files(tmp_path, 2)
    gate = threading.Event()
    busy = threading.Event()
    real_hash_file = queue_module.hash_file

    def blocking_hash_file(path, **kwargs):
        busy.set()
        gate.wait(timeout=10)
        return real_hash_file(path, **kwargs)

    monkeypatch.setattr(queue_module, "hash_file", blocking_hash_file)
    events = EventBus()
    recorder = Recorder(events)
    queue = WorkQueue(events=events)

    queue.enqueue([first])
    assert busy.wait(timeout=5)
    gate.set()
    queue.enqueue([second])
    assert queue.wait_idle(timeout=10)

    kinds = [
        (type(event), getattr(event, "path", None))
        for event in recorder.events
        if isinstance(event, (BatchQueued, FileStarted))
    ]
    assert kinds == [
        (BatchQueued, None),
        (FileStarted, first),
        (BatchQueued, None),
        (FileStarted, second),
    ]


def test_start_is_noop_when_empty() -> None:
    queue = WorkQueue()

    assert queue.start() is False
    assert queue.state == QueueState.IDLE
    assert queue.enqueue([]) == 0
    assert queue.wait_idle(timeout=0.1)


def test_report_options_shape_results(tmp_path: Path) -> None:
    path = tmp_path / "abc.txt"
    path.write_bytes(b"abc")
    events = EventBus()
    recorder = Recorder(events)
    queue = WorkQueue(events=events, report_options=ReportOptions(uppercase=True))

    queue.enqueue([str(path)])
    assert queue.wait_idle(timeout=10)

    queue.set_report_options(uppercase=False, show_size=False, show_elapsed=False)
    queue.enqueue([str(path)])
    assert queue.wait_idle(timeout=10)

    upper, lower = recorder.of(FileHashed)
    assert upper.digest == ABC_DIGEST.upper()
    assert upper.size_bytes == 3
    assert upper.elapsed_seconds is not None
    assert lower.digest == ABC_DIGEST
    assert lower.size_bytes is None
    assert lower.elapsed_seconds is None


def test_listener_errors_do_not_break_worker(tmp_path: Path) -> None:
    paths = _files(tmp_path, 2)
    events = EventBus()

    def bad_listener(event) -> None:
        raise ValueError("listener bug")

    events.subscribe(bad_listener)
    recorder = Recorder(events)
    queue = WorkQueue(events=events)

    queue.enqueue(paths)
    assert queue.wait_idle(timeout=10)

    assert len(recorder.of(FileHashed)) == 2
    assert recorder.of(FileFailed) == []


def test_unsubscribe_stops_delivery() -> None:
    events = EventBus()
    seen = []
    unsubscribe = events.subscribe(seen.append)

    events.emit(QueueDrained(processed=0))
    unsubscribe()
    events.emit(QueueDrained(processed=1))

    assert seen == [QueueDrained(processed=0)]
