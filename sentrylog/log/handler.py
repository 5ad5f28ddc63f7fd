"""
Sentry log writer.

A logging.Handler that forwards records to Sentry through a SentryAdaptor.
Records carrying exception info are sent as exception events with the live
scope; everything else is sent as a message event with the scope rebuilt
from the adaptor's context.

Works with plain stdlib records and with records produced by structlog's
ProcessorFormatter.wrap_for_formatter, whose ``msg`` is the event dict.
"""

from __future__ import annotations

import copy
import logging
import sys
import traceback
from typing import Any

from sentry_sdk import Scope

from sentrylog.adaptor.context import ContextField
from sentrylog.adaptor.helpers import normalise_key
from sentrylog.adaptor.sentry_adaptor import SentryAdaptor

# structlog bookkeeping keys that are not user data
_RESERVED_KEYS = frozenset(
    {"event", "exc_info", "stack_info", "level", "logger", "timestamp"}
)


class SentryLogHandler(logging.Handler):
    """Forward log records to Sentry."""

    def __init__(self, adaptor: SentryAdaptor, level: int | None = None):
        if level is None:
            level = adaptor.config.log_level_number
        super().__init__(level)
        self.adaptor = adaptor

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.send(record)
        except Exception:
            self.handleError(record)

    def send(self, record: logging.LogRecord) -> str | None:
        """
        Send a single record.

        Returns:
            Sentry event ID if the client accepted the event, None otherwise.
        """
        message, fields, exc_info = _unpack_record(record)

        self.adaptor.set_context(ContextField.LEVEL, record.levelno)

        if exc_info is not None:
            scope = copy.copy(self.adaptor.scope)
        else:
            scope = self.adaptor.get_context()

        self._apply_record(scope, record, fields)

        if exc_info is not None:
            return self.adaptor.capture_exception(exc_info[1], scope=scope)

        return self.adaptor.capture_message(message, level=record.levelno, scope=scope)

    def _apply_record(
        self, scope: Scope, record: logging.LogRecord, fields: dict[str, Any]
    ) -> None:
        scope.set_tag("logger", record.name)

        for key, value in fields.items():
            if key := normalise_key(key):
                scope.set_extra(key, value)

        if self.adaptor.config.custom_stacktrace:
            stack = record.stack_info or "".join(traceback.format_stack())
            scope.set_extra("stacktrace", stack)


def _unpack_record(
    record: logging.LogRecord,
) -> tuple[str, dict[str, Any], tuple | None]:
    """Split a record into message text, extra fields and exception info."""
    if isinstance(record.msg, dict):
        event_dict = record.msg
        message = str(event_dict.get("event", ""))
        fields = {
            key: value
            for key, value in event_dict.items()
            if key not in _RESERVED_KEYS and not key.startswith("_")
        }
        exc_info = _resolve_exc_info(record.exc_info or event_dict.get("exc_info"))
    else:
        message = record.getMessage()
        fields = {}
        exc_info = _resolve_exc_info(record.exc_info)

    return message, fields, exc_info


def _resolve_exc_info(value: Any) -> tuple | None:
    if isinstance(value, BaseException):
        return (type(value), value, value.__traceback__)
    if isinstance(value, tuple):
        return value if value[0] is not None else None
    if value:
        current = sys.exc_info()
        return current if current[0] is not None else None
    return None
