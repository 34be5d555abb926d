"""
Photo Gallery — Request ID Middleware
=======================================

What:  Assigns a short ID to each request and returns it in X-Request-ID.
Why:   Lets a user's error report ("request_id": "a1b2c3d4") be matched with
       the server log lines of that request.
How:   Reuses a client-provided X-Request-ID or generates one, stores it in a
       ContextVar (per-coroutine) and on request.state.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one thread each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Correlation ID per request, echoed back in the response headers."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 hex chars are enough for correlation and stay readable in logs
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
