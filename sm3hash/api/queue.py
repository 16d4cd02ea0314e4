"""
Queue API endpoints.
Accepts dropped/browsed paths, starts the worker and reports its progress.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from sm3hash.api.deps import get_queue, get_results
from sm3hash.files.expander import expand_paths
from sm3hash.models import (
    EnqueueRequest,
    EnqueueResponse,
    QueueStatusResponse,
    StartResponse,
)
from sm3hash.ops.queue import WorkQueue
from sm3hash.ops.results import ResultStore
from sm3hash.utils.formatting import display_text

router = APIRouter(prefix="/queue", tags=["queue"])


@router.post("", response_model=EnqueueResponse)
async def enqueue_paths(
    request: EnqueueRequest,
    queue: WorkQueue = Depends(get_queue),
) -> EnqueueResponse:
    """
    Expand files and folders and append them to the hashing queue.
    Returns immediately; hashing happens on the background worker.
    """
    files = expand_paths(request.paths)
    if not files:
        raise HTTPException(
            status_code=400,
            detail="No files found in the given paths",
        )

    accepted = queue.enqueue(files)
    return EnqueueResponse(
        accepted=accepted,
        files=[display_text(path) for path in files],
        state=queue.state,
    )


@router.post("/start", response_model=StartResponse)
async def start_worker(queue: WorkQueue = Depends(get_queue)) -> StartResponse:
    """Start the worker if files are waiting and none is running."""
    started = queue.start()
    return StartResponse(started=started, state=queue.state)


@router.get("", response_model=QueueStatusResponse)
async def get_queue_status(
    queue: WorkQueue = Depends(get_queue),
    results: ResultStore = Depends(get_results),
) -> QueueStatusResponse:
    """Get the worker state and the progress of the current file."""
    progress = results.progress()
    current = queue.current_path
    return QueueStatusResponse(
        state=queue.state,
        pending=len(queue.pending()),
        processed=queue.processed,
        current_path=display_text(current),
        percent=progress.percent if current and progress.path == current else 0,
    )
