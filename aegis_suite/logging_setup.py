"""
Structured logging setup for the desktop app and the test suite.

- Level comes from LOG_LEVEL (default INFO).
- Output goes to stdout; run_boot.py redirects stdout into logs/boot.log,
  so every event ends up there when the app is launched from the EXE.
- AEGIS_LOG_JSON=1 switches the console renderer to JSON lines.
"""

from __future__ import annotations
import logging
import os
import sys
import structlog

from . import __version__


def configure_logging():
    """
    Configure structlog on top of the stdlib logging module.

    returns:
    - structlog.BoundLogger bound with app name and version.
    """
    level = os.getenv("LOG_LEVEL", "INFO").upper()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level, logging.INFO),
    )

    if os.getenv("AEGIS_LOG_JSON") == "1":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger("aegis_suite").bind(app="Aegis Suite", version=__version__)
