"""
Request context middleware for FastAPI/Starlette applications.

Seeds the adaptor with per-request tags, user and extra data so events logged
while handling a request describe that request.

Usage:
    from fastapi import FastAPI
    from sentrylog.api import SentryContextMiddleware

    app = FastAPI()
    app.add_middleware(SentryContextMiddleware, adaptor=sentry.adaptor)
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from sentrylog.adaptor.context import ContextField
from sentrylog.adaptor.sentry_adaptor import SentryAdaptor
from sentrylog.core.logging import clear_request_context, set_request_context

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class SentryContextMiddleware(BaseHTTPMiddleware):
    """Populate Sentry context from the incoming request."""

    def __init__(self, app: ASGIApp, adaptor: SentryAdaptor):
        super().__init__(app)
        self.adaptor = adaptor

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        user = request_user(request)

        set_request_context(request_id, user_id=str(user["id"]) if "id" in user else None)

        self.adaptor.set_context(
            ContextField.TAGS,
            {
                "request_method": request.method,
                "request_type": "web",
                "request_path": request.url.path,
            },
        )
        self.adaptor.set_context(ContextField.USER, user)
        self.adaptor.set_context(
            ContextField.EXTRA,
            {
                "request_id": request_id,
                "user_agent": request.headers.get("user-agent", ""),
            },
        )

        try:
            response = await call_next(request)
        finally:
            clear_request_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def request_user(request: Request) -> dict[str, Any]:
    """The current actor: ``request.state.user`` if set, else the client address."""
    user = getattr(request.state, "user", None)
    if isinstance(user, dict):
        return dict(user)
    return {"ip_address": request.client.host if request.client else None}
