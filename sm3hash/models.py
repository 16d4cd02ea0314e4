"""
Pydantic models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional

from sm3hash.core.errors import ErrorKind
from sm3hash.ops.queue import QueueState


# Request models
class EnqueueRequest(BaseModel):
    """Files and/or folders to hash."""
    paths: list[str] = Field(..., min_length=1, description="Files or folders (expanded recursively)")


class SettingsUpdateRequest(BaseModel):
    """Request to update report options."""
    uppercase: Optional[bool] = None
    show_size: Optional[bool] = None
    show_elapsed: Optional[bool] = None


# Response models
class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    version: str = "0.1.0"
    queue: QueueState = QueueState.IDLE


class EnqueueResponse(BaseModel):
    accepted: int
    files: list[str] = Field(default_factory=list)
    state: QueueState


class StartResponse(BaseModel):
    started: bool
    state: QueueState


class QueueStatusResponse(BaseModel):
    """Current worker state and progress of the file being hashed."""
    state: QueueState
    pending: int = 0
    processed: int = 0
    current_path: Optional[str] = None
    percent: int = Field(default=0, ge=0, le=100)


class FileResultResponse(BaseModel):
    path: Optional[str] = None
    ok: bool
    completed_at: datetime
    digest: Optional[str] = None
    size_bytes: Optional[int] = None
    elapsed_seconds: Optional[float] = None
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None


class ResultListResponse(BaseModel):
    total: int
    succeeded: int
    failed: int
    items: list[FileResultResponse] = Field(default_factory=list)


class OutputTextResponse(BaseModel):
    text: str


class SettingsResponse(BaseModel):
    uppercase: bool
    show_size: bool
    show_elapsed: bool
    chunk_size: int
