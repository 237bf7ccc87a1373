"""
Logging setup for the demo entry points and ad-hoc scripts.

Engine modules only create ``logging.getLogger(__name__)`` loggers; this is
the one place that decides where their records go.
"""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP and tracing clients used by the optional supervisor
CLIENT_LOGGERS = ("httpx", "groq", "langsmith")


def configure_logging(level: Optional[str] = None) -> None:
    """
    Send optimizer logs to stdout, replacing any handlers set earlier.

    Args:
        level: Level name; defaults to $LOG_LEVEL, then INFO. Unknown names
            fall back to INFO with a warning.
    """
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    numeric_level = logging.getLevelName(name)
    known = isinstance(numeric_level, int)

    logging.basicConfig(
        level=numeric_level if known else logging.INFO,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    if not known:
        logging.getLogger(__name__).warning("Unknown log level %r, using INFO", name)

    for client in CLIENT_LOGGERS:
        logging.getLogger(client).setLevel(logging.WARNING)
