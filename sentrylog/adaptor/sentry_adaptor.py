"""
Sentry Adaptor

Bridges the logging pipeline and the sentry_sdk client. The adaptor owns one
client and one live scope, applies context updates to both the scope and a
locally readable Context, and sends events through the client.

Usage:
    from sentrylog.adaptor import SentryAdaptor

    adaptor = SentryAdaptor()
    adaptor.set_context("env", "production")
    adaptor.set_context("tags", {"Release Name": "v1.2"})

    try:
        process()
    except Exception as e:
        adaptor.capture_exception(e)

    adaptor.capture_message("Cache miss ratio high", level="warning")
"""

from __future__ import annotations

import copy
import sys
from collections.abc import Mapping
from typing import Any

import sentry_sdk
import structlog
from sentry_sdk import Scope
from sentry_sdk.utils import event_from_exception, exc_info_from_error

from sentrylog.adaptor.context import Context, ContextField
from sentrylog.adaptor.helpers import normalise_key
from sentrylog.core.severity import process_severity
from sentrylog.core.config import PROXY_OPTIONS, SentryConfig, load_config
from sentrylog.core.exceptions import UnsupportedContextField

logger = structlog.get_logger(__name__)


class SentryAdaptor:
    """Functionality bridge between sentry_sdk and the log writer."""

    def __init__(
        self,
        config: SentryConfig | None = None,
        client: sentry_sdk.Client | None = None,
    ):
        """
        Build the adaptor.

        Args:
            config: Resolved configuration. Loaded with load_config() if omitted.
            client: Pre-built client. Built from the resolved options if omitted.
        """
        self.config = config if config is not None else load_config()

        if client is None:
            client = sentry_sdk.Client(**_client_options(self.get_opts()))
            logger.debug(
                "sentry_client_created",
                dsn_configured=bool(self.config.opts.get("dsn")),
            )

        self._client = client
        self._scope = Scope()
        self._scope.set_client(client)
        self.context = Context()

    # =========================================================================
    # Client
    # =========================================================================

    def get_sdk(self) -> sentry_sdk.Client:
        """Return the client owned by this adaptor."""
        return self._client

    @property
    def scope(self) -> Scope:
        """The live scope attached to exception events."""
        return self._scope

    def install(self) -> None:
        """
        Make this adaptor's client the process-wide sentry_sdk client.

        Only needed for code that reports through the sentry_sdk module-level
        API. Call once per process.
        """
        sentry_sdk.get_global_scope().set_client(self._client)
        logger.info("sentry_client_installed")

    # =========================================================================
    # Context
    # =========================================================================

    def set_context(self, field: ContextField | str, data: Any) -> None:
        """
        Apply a context update to the live scope and the local Context.

        Args:
            field: One of env, tags, user, extra, level.
            data: Payload for the field. Mappings for tags, user and extra.

        Raises:
            UnsupportedContextField: If field is not a known context field.
        """
        try:
            context_field = ContextField.parse(field, caller="set_context")
        except UnsupportedContextField:
            logger.error("unsupported_context_field", field=str(field))
            raise

        # Sentry's own stacktrace unless the log writer builds one
        self._client.options["attach_stacktrace"] = not self.config.custom_stacktrace

        if context_field is ContextField.ENV:
            self._client.options["environment"] = data
            self.context.env = data

        elif context_field is ContextField.TAGS:
            for tag_name, tag_value in _items(data):
                tag_name = normalise_key(tag_name)
                if not tag_name:
                    logger.debug("empty_context_key_skipped", field="tags")
                    continue
                self._scope.set_tag(tag_name, tag_value)
                self.context.tags[tag_name] = tag_value

        elif context_field is ContextField.USER:
            user = dict(data) if data is not None else None
            self._scope.set_user(user)
            self.context.user = user

        elif context_field is ContextField.EXTRA:
            for extra_key, extra_value in _items(data):
                extra_key = normalise_key(extra_key)
                if not extra_key:
                    logger.debug("empty_context_key_skipped", field="extra")
                    continue
                self._scope.set_extra(extra_key, extra_value)
                self.context.extra[extra_key] = extra_value

        elif context_field is ContextField.LEVEL:
            severity = process_severity(data)
            self._scope.set_level(severity)
            self.context.level = severity

    def get_context(self) -> Scope:
        """
        Rebuild a Scope from the local Context for message events.

        The client does not attach the live scope's data to message events
        sent without one, so the log writer passes this scope explicitly.
        """
        return self.context.to_scope()

    # =========================================================================
    # Options
    # =========================================================================

    def get_opts(self, opt: str | None = None) -> Any:
        """
        Return the resolved client options.

        Args:
            opt: Single option name. When absent or unset the whole mapping
                is returned.
        """
        opts = copy.deepcopy(dict(self.config.opts))
        if opt and opts.get(opt) is not None:
            return opts[opt]
        return opts

    # =========================================================================
    # Capture
    # =========================================================================

    def capture_exception(
        self,
        error: BaseException | None = None,
        scope: Scope | None = None,
    ) -> str | None:
        """
        Send an exception event.

        Args:
            error: Exception to report. Defaults to the one being handled.
            scope: Scope to apply. Defaults to the live scope.

        Returns:
            Sentry event ID if the client accepted the event, None otherwise.
        """
        exc_info = exc_info_from_error(error) if error is not None else sys.exc_info()
        if exc_info[0] is None:
            return None

        event, hint = event_from_exception(exc_info, client_options=self._client.options)
        return self._client.capture_event(
            event, hint=hint, scope=scope if scope is not None else self._scope
        )

    def capture_message(
        self,
        message: str,
        level: Any = None,
        scope: Scope | None = None,
    ) -> str | None:
        """
        Send a message event.

        Args:
            message: Message text.
            level: Severity token. Defaults to the context level, else info.
            scope: Scope to apply. Defaults to get_context().

        Returns:
            Sentry event ID if the client accepted the event, None otherwise.
        """
        if level is None:
            level = self.context.level
        event = {"message": message, "level": process_severity(level)}
        return self._client.capture_event(
            event, scope=scope if scope is not None else self.get_context()
        )


def _client_options(opts: dict[str, Any]) -> dict[str, Any]:
    """Give scheme-less proxy addresses the http scheme urllib3 requires."""
    for name in PROXY_OPTIONS:
        proxy = opts.get(name)
        if isinstance(proxy, str) and proxy and "://" not in proxy:
            opts[name] = f"http://{proxy}"
    return opts


def _items(data: Any):
    if isinstance(data, Mapping):
        return list(data.items())
    return list(data)
