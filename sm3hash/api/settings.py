"""
Settings API endpoints for the report options.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from sm3hash.api.deps import get_queue
from sm3hash.config import get_settings
from sm3hash.models import SettingsResponse, SettingsUpdateRequest
from sm3hash.ops.queue import WorkQueue


router = APIRouter(prefix="/settings", tags=["settings"])


def _to_response(queue: WorkQueue) -> SettingsResponse:
    options = queue.report_options
    return SettingsResponse(
        uppercase=options.uppercase,
        show_size=options.show_size,
        show_elapsed=options.show_elapsed,
        chunk_size=get_settings().chunk_size,
    )


@router.get("", response_model=SettingsResponse)
async def get_current_settings(queue: WorkQueue = Depends(get_queue)) -> SettingsResponse:
    """Get current report options."""
    return _to_response(queue)


@router.put("", response_model=SettingsResponse)
async def update_settings(
    request: SettingsUpdateRequest,
    queue: WorkQueue = Depends(get_queue),
) -> SettingsResponse:
    """
    Update report options.
    Changes apply from the next file the worker starts.
    """
    changes = request.model_dump(exclude_none=True)
    if changes:
        queue.set_report_options(**changes)
    return _to_response(queue)
