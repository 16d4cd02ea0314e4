"""
Logging setup shared by the server and the command line tool.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Send log records to stderr at the given level.
    Leaves existing root handlers alone (uvicorn, test runners).
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.basicConfig(level=numeric, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("sm3hash").setLevel(numeric)
