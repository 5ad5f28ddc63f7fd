"""
Logger factory.

Builds a SentryAdaptor, seeds it with the process-level context every event
should carry, and pairs it with a log writer.

Usage:
    from sentrylog.log import SentryLogger

    sentry = SentryLogger.factory(env="production", tags={"service": "billing"})
    sentry.attach()  # forward root logger records to Sentry
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from typing import Any

import sentry_sdk
import structlog

from sentrylog.adaptor.context import ContextField
from sentrylog.adaptor.sentry_adaptor import SentryAdaptor
from sentrylog.core.config import SentryConfig
from sentrylog.log.handler import SentryLogHandler

logger = structlog.get_logger(__name__)


def default_tags() -> dict[str, Any]:
    """Tags describing the running process."""
    return {
        "python_version": platform.python_version(),
        "platform": sys.platform,
        "request_type": "cli",
    }


def default_extra() -> dict[str, Any]:
    """Extra data describing the running process."""
    return {
        "process_id": os.getpid(),
        "executable": sys.executable,
    }


class SentryLogger:
    """An adaptor and the log writer bound to it."""

    def __init__(self, adaptor: SentryAdaptor, handler: SentryLogHandler):
        self.adaptor = adaptor
        self.handler = handler

    @classmethod
    def factory(
        cls,
        config: SentryConfig | None = None,
        env: str | None = None,
        user: dict[str, Any] | None = None,
        tags: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
        level: Any = None,
        client: sentry_sdk.Client | None = None,
    ) -> "SentryLogger":
        """
        Build an adaptor with default context.

        Args:
            config: Resolved configuration. Loaded from file/env if omitted.
            env: Environment name. Falls back to the ``environment`` option.
            user: Current actor.
            tags: Tags merged over default_tags().
            extra: Extra data merged over default_extra().
            level: Initial severity.
            client: Pre-built sentry_sdk client.
        """
        adaptor = SentryAdaptor(config=config, client=client)

        env = env or adaptor.config.opts.get("environment")
        if env:
            adaptor.set_context(ContextField.ENV, env)

        adaptor.set_context(ContextField.TAGS, {**default_tags(), **(tags or {})})
        adaptor.set_context(ContextField.EXTRA, {**default_extra(), **(extra or {})})

        if user:
            adaptor.set_context(ContextField.USER, user)

        if level is not None:
            adaptor.set_context(ContextField.LEVEL, level)

        logger.debug("sentry_logger_created", env=env)
        return cls(adaptor, SentryLogHandler(adaptor))

    def attach(self, target: logging.Logger | None = None) -> SentryLogHandler:
        """Add the log writer to a stdlib logger (the root logger by default)."""
        target = target if target is not None else logging.getLogger()
        if self.handler not in target.handlers:
            target.addHandler(self.handler)
        return self.handler

    def detach(self, target: logging.Logger | None = None) -> None:
        """Remove the log writer from a stdlib logger."""
        target = target if target is not None else logging.getLogger()
        target.removeHandler(self.handler)
