"""sentrylog web framework integration."""

from sentrylog.api.middleware import SentryContextMiddleware, request_user

__all__ = [
    "SentryContextMiddleware",
    "request_user",
]
