"""
Health check endpoint for the SM3 hasher API.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from sm3hash.api.deps import get_queue
from sm3hash.models import HealthResponse
from sm3hash.ops.queue import WorkQueue


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(queue: WorkQueue = Depends(get_queue)) -> HealthResponse:
    """
    Health check endpoint.
    Returns OK if the API is running, along with the worker state.
    """
    return HealthResponse(
        status="ok",
        version="0.1.0",
        queue=queue.state,
    )
