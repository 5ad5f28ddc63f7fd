"""
sentrylog - forward application logging to Sentry.
"""

from sentrylog.adaptor import ContextField, SentryAdaptor, normalise_key
from sentrylog.core import (
    ConfigurationError,
    SentryConfig,
    SentryLogWriterError,
    UnsupportedContextField,
    load_config,
    process_severity,
    setup_logging,
)
from sentrylog.log import SentryLogger, SentryLogHandler

__version__ = "1.0.0"

__all__ = [
    "SentryAdaptor",
    "ContextField",
    "normalise_key",
    "process_severity",
    "SentryConfig",
    "load_config",
    "setup_logging",
    "SentryLogger",
    "SentryLogHandler",
    "SentryLogWriterError",
    "UnsupportedContextField",
    "ConfigurationError",
]
