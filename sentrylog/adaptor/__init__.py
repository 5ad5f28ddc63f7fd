"""sentrylog Adaptor Module."""

from sentrylog.adaptor.context import Context, ContextField
from sentrylog.adaptor.helpers import MAX_KEY_LENGTH, normalise_key
from sentrylog.adaptor.sentry_adaptor import SentryAdaptor

__all__ = [
    "SentryAdaptor",
    "Context",
    "ContextField",
    "normalise_key",
    "MAX_KEY_LENGTH",
]
