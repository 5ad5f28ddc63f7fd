"""
sentrylog Exceptions

Errors raised by the adaptor and the configuration loader. SDK construction
and transport failures are not wrapped; they propagate from sentry_sdk.
"""

from __future__ import annotations


class SentryLogWriterError(Exception):
    """Base class for sentrylog errors."""


class UnsupportedContextField(SentryLogWriterError, ValueError):
    """Raised when a context update names a field the adaptor does not know."""

    def __init__(self, field: object, caller: str = "set_context"):
        self.field = field
        self.caller = caller
        super().__init__(f'Unknown field "{field}" passed to {caller}().')


class ConfigurationError(SentryLogWriterError):
    """Raised when configuration loading or validation fails."""
