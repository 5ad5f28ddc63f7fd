"""sentrylog Core Module."""

from sentrylog.core.exceptions import (
    ConfigurationError,
    SentryLogWriterError,
    UnsupportedContextField,
)
from sentrylog.core.severity import SentrySeverity, process_severity
from sentrylog.core.config import SentryConfig, load_config
from sentrylog.core.logging import (
    clear_request_context,
    get_logger,
    set_request_context,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_request_context",
    "clear_request_context",
    "SentryConfig",
    "load_config",
    "SentrySeverity",
    "process_severity",
    "SentryLogWriterError",
    "UnsupportedContextField",
    "ConfigurationError",
]
