"""Logging configuration for Scriptorium processes.

Library modules only create module-level loggers; the hosting process calls
`configure_logging()` once at startup.
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "scriptorium"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a single stderr handler to the package logger and set its level.

    Calling this more than once replaces the handler instead of stacking them.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO
    else:
        resolved = level

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_scriptorium", False):
            logger.removeHandler(handler)

    # stdout is reserved for the stdio MCP transport
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._scriptorium = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(resolved)
    logger.propagate = False

    # APScheduler is chatty at INFO about every job submission
    logging.getLogger("apscheduler").setLevel(max(resolved, logging.WARNING))
    return logger
