"""
Context value object held by the adaptor.

The context mirrors what has been written to the live Sentry scope so that a
fresh scope can be rebuilt for message events.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from sentry_sdk import Scope

from sentrylog.adaptor.helpers import normalise_key
from sentrylog.core.exceptions import UnsupportedContextField


class ContextField(str, Enum):
    """Context fields accepted by SentryAdaptor.set_context()."""

    ENV = "env"
    TAGS = "tags"
    USER = "user"
    EXTRA = "extra"
    LEVEL = "level"

    @classmethod
    def parse(cls, field: Any, caller: str = "set_context") -> "ContextField":
        """Resolve a field name, raising UnsupportedContextField if unknown."""
        if isinstance(field, cls):
            return field
        try:
            return cls(field)
        except ValueError:
            raise UnsupportedContextField(field, caller) from None


class Context(BaseModel):
    """Locally readable copy of the context sent to Sentry."""

    env: str | None = Field(default=None, description="Deployment environment")
    tags: dict[str, Any] = Field(default_factory=dict, description="Normalised tags")
    user: dict[str, Any] | None = Field(default=None, description="Current actor")
    extra: dict[str, Any] = Field(default_factory=dict, description="Normalised extra data")
    level: str | None = Field(default=None, description="Sentry severity")

    def to_scope(self) -> Scope:
        """
        Build a fresh Scope carrying user, tags and extra.

        Keys are normalised again on the way out. ``env`` and ``level`` are
        not applied: env lives on the client options and level on the live
        scope.
        """
        scope = Scope()

        if self.user is not None:
            scope.set_user(dict(self.user))

        for key, value in self.tags.items():
            if key := normalise_key(key):
                scope.set_tag(key, value)

        for key, value in self.extra.items():
            if key := normalise_key(key):
                scope.set_extra(key, value)

        return scope
