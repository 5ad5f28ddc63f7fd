"""sentrylog Log Writer Module."""

from sentrylog.log.factory import SentryLogger, default_extra, default_tags
from sentrylog.log.handler import SentryLogHandler

__all__ = [
    "SentryLogger",
    "SentryLogHandler",
    "default_tags",
    "default_extra",
]
