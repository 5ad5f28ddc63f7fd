"""
sentrylog Core Logging Module

Provides structured logging and attaches the Sentry log writer to the
standard library root logger. Supports console and JSON output.

Usage:
    from sentrylog.core.logging import setup_logging, get_logger
    from sentrylog.log import SentryLogger

    sentry = SentryLogger.factory(env="production")

    # Initialize logging (call once at startup)
    setup_logging(
        level="INFO",
        json_output=True,
        adaptor=sentry.adaptor,
    )

    logger = get_logger(__name__)
    logger.info("Processing order", order_id="ORD-001")
    logger.error("Payment declined", order_id="ORD-001")  # sent to Sentry
"""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from sentrylog.adaptor.sentry_adaptor import SentryAdaptor

# Context variables for request tracing
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_var: ContextVar[str | None] = ContextVar("user_id", default=None)


def add_context_processor(
    logger: structlog.typing.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add request/user context to log events."""
    if request_id := request_id_var.get():
        event_dict["request_id"] = request_id
    if user_id := user_id_var.get():
        event_dict["user_id"] = user_id
    return event_dict


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: str | None = None,
    adaptor: SentryAdaptor | None = None,
) -> None:
    """
    Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Output JSON format
        log_file: Optional file path for logging
        adaptor: Sentry adaptor; records at or above its configured
            log_level are forwarded to Sentry
    """
    # Get level from environment or parameter
    log_level = os.environ.get("SENTRYLOG_CONSOLE_LEVEL", level).upper()

    shared_processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_context_processor,
        structlog.processors.UnicodeDecoder(),
    ]

    # exc_info stays in the event dict until a formatter renders it, so the
    # Sentry handler still sees the live exception
    if json_output:
        formatter = _json_formatter(shared_processors)
    else:
        formatter = structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(colors=True),
            ],
            foreign_pre_chain=shared_processors,
        )

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    handlers: list[logging.Handler] = [handler]
    if log_file or os.environ.get("SENTRYLOG_LOG_FILE"):
        file_path = log_file or os.environ.get("SENTRYLOG_LOG_FILE")
        file_handler = logging.FileHandler(file_path)
        file_handler.setFormatter(_json_formatter(shared_processors))
        handlers.append(file_handler)

    if adaptor is not None:
        from sentrylog.log.handler import SentryLogHandler

        handlers.append(SentryLogHandler(adaptor))

    root_logger = logging.getLogger()
    root_logger.handlers = handlers
    root_logger.setLevel(getattr(logging, log_level))

    # sentry_sdk and its transport log through these; keep them out of Sentry
    logging.getLogger("sentry_sdk.errors").propagate = False
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _json_formatter(
    shared_processors: list[structlog.typing.Processor],
) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=shared_processors,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


def set_request_context(request_id: str, user_id: str | None = None) -> None:
    """Set request context for logging."""
    request_id_var.set(request_id)
    if user_id:
        user_id_var.set(user_id)


def clear_request_context() -> None:
    """Clear request context."""
    request_id_var.set(None)
    user_id_var.set(None)


__all__ = [
    "setup_logging",
    "get_logger",
    "set_request_context",
    "clear_request_context",
    "request_id_var",
    "user_id_var",
]
