"""
Structured Logging

structlog over the standard library. Every record carries a ``stage`` tag
given at the call site, and the ``session_id`` of the stream connection or
consumer run it was emitted from.
"""

import logging
import sys
import uuid

import structlog

from stream_relay.core.config.settings import get_settings


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Configure structlog for the process.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (defaults to settings)
        log_format: 'json' for aggregation, 'console' for local runs
    """
    settings = get_settings()
    log_level = log_level or settings.logging.LOG_LEVEL
    log_format = log_format or settings.logging.LOG_FORMAT

    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=getattr(logging, log_level.upper())
    )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,  # session_id
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.info("Connecting", stage=Stage.STREAM_CONNECT, url=url)
    """
    return structlog.get_logger(name)


def bind_session(session_id: str | None = None) -> str:
    """
    Start a new logging session in the current task and return its id.

    Called once per stream connection attempt and once per consumer loop
    run; a fresh uuid is generated unless one is given.
    """
    session_id = session_id or str(uuid.uuid4())
    structlog.contextvars.bind_contextvars(session_id=session_id)
    return session_id
