"""
Request dependencies giving routers access to the queue and result store.
"""

from __future__ import annotations

from fastapi import Request

from sm3hash.ops.queue import WorkQueue
from sm3hash.ops.results import ResultStore


def get_queue(request: Request) -> WorkQueue:
    return request.app.state.queue


def get_results(request: Request) -> ResultStore:
    return request.app.state.results
