"""
Logging configuration using structlog.

Logs go to stderr so stdout stays free for the run's result (the new pull
request number).
"""

import sys
from typing import Any, Literal

import structlog

LogFormat = Literal["json", "console"]


def configure_logging(log_level: str = "INFO", log_format: LogFormat = "json") -> None:
    """Configure structured logging.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: ``json`` for one JSON object per line, ``console`` for
            human-readable coloured output
    """
    renderer: Any
    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level.upper()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
