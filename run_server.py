#!/usr/bin/env python3
"""
Entry point script for running the SM3 hasher backend server.
"""

import uvicorn

from sm3hash.config import get_settings
from sm3hash.logging_config import configure_logging


def main():
    """Run the FastAPI server."""
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "sm3hash.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":
    main()
