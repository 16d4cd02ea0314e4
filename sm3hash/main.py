"""
SM3 Hasher Backend - FastAPI Application

Main entry point for the local hashing API.
Runs on localhost only; the desktop shell talks to it over HTTP.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from sm3hash.config import get_settings
from sm3hash.logging_config import configure_logging
from sm3hash.ops.events import EventBus
from sm3hash.ops.queue import WorkQueue
from sm3hash.ops.results import ResultStore
from sm3hash.api import health, queue, results, settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Creates the hashing queue and its result store on startup.
    """
    config = get_settings()
    events = EventBus()
    store = ResultStore(
        history_limit=config.result_history_limit,
        line_limit=config.output_line_limit,
    )
    store.attach(events)

    app.state.queue = WorkQueue(
        events=events,
        report_options=config.report_options(),
        hashing_options=config.hashing_options(),
    )
    app.state.results = store
    logger.info("SM3 hasher backend started")

    yield

    # The worker is a daemon thread; an unfinished file is abandoned on exit.
    if app.state.queue.is_running:
        logger.warning("Shutting down with %d file(s) pending", len(app.state.queue.pending()))
    store.detach()
    logger.info("SM3 hasher backend stopped")


# Create FastAPI application
app = FastAPI(
    title="SM3 Hasher API",
    description="Queue files for SM3 hashing and follow their progress",
    version="0.1.0",
    lifespan=lifespan,
)


# Include API routers
app.include_router(health.router)
app.include_router(queue.router, prefix="/api")
app.include_router(results.router, prefix="/api")
app.include_router(settings.router, prefix="/api")


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "SM3 Hasher API",
        "version": "0.1.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    settings_instance = get_settings()
    configure_logging(settings_instance.log_level)
    uvicorn.run(
        "sm3hash.main:app",
        host=settings_instance.host,
        port=settings_instance.port,
        reload=settings_instance.debug,
    )
