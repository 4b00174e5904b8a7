"""
Logging configuration for a transport process.

Only the standalone command configures the root logger; a transport
embedded in another application logs through its module loggers and
inherits the host's configuration. Payloads and header values other than
the correlation id are never logged.
"""

import logging
import sys
from typing import Optional

from pmg_http_transport.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Server and client libraries log every connection at INFO.
QUIET_LOGGERS = ("uvicorn.access", "uvicorn.error", "httpx", "httpcore")


def resolve_level(level: Optional[str] = None) -> int:
    """Return the numeric level for ``level``, or for ``settings.log_level``."""
    name = (level or settings.log_level).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Optional[str] = None) -> int:
    """Configure process-wide logging for a standalone transport.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR). Defaults to
            ``settings.log_level``.

    Returns:
        The numeric level applied to the root logger.
    """
    resolved = resolve_level(level)
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    quiet_level = max(resolved, logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
    return resolved
