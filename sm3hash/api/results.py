"""
Results API endpoints: structured results and the output log.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from sm3hash.api.deps import get_results
from sm3hash.models import (
    FileResultResponse,
    OutputTextResponse,
    ResultListResponse,
)
from sm3hash.ops.results import ResultStore


router = APIRouter(prefix="/results", tags=["results"])


@router.get("", response_model=ResultListResponse)
async def list_results(results: ResultStore = Depends(get_results)) -> ResultListResponse:
    """List completed files, oldest first."""
    records = results.results()
    items = [FileResultResponse(**record.to_dict()) for record in records]
    succeeded = sum(1 for item in items if item.ok)
    return ResultListResponse(
        total=len(items),
        succeeded=succeeded,
        failed=len(items) - succeeded,
        items=items,
    )


@router.get("/text", response_model=OutputTextResponse)
async def get_output_text(results: ResultStore = Depends(get_results)) -> OutputTextResponse:
    """The output log, ready to copy or save."""
    return OutputTextResponse(text=results.text())


@router.delete("")
async def clear_results(results: ResultStore = Depends(get_results)) -> dict:
    """Clear the result history and the output log."""
    results.clear()
    return {"message": "Results cleared"}
