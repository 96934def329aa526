"""
Structured logging configuration using structlog.
Library code never prints; every event is a snake_case name plus context.
"""

import logging
import sys
from contextlib import AbstractContextManager
from typing import Any

import structlog

from saypay.config import settings


def configure_logging() -> None:
    """
    Configure structured logging for the application.

    Uses structlog with JSON or console output based on settings.
    Fields bound with bind_log_context (such as session_id) are merged
    into every event.
    """
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Configured structlog logger

    Example:
        logger = get_logger(__name__)
        logger.info("expense_saved", expense_id=str(record.id), amount=25.5)
    """
    return structlog.get_logger(name)


def bind_log_context(**fields: Any) -> AbstractContextManager[None]:
    """
    Attach fields to every event logged inside the block.

    Module loggers (transcription, extraction, storage) pick the fields up
    through merge_contextvars, so one voice session can be followed across
    components.

    Example:
        with bind_log_context(session_id=session.session_id):
            await transcriber.transcribe(audio)
    """
    return structlog.contextvars.bound_contextvars(**fields)
