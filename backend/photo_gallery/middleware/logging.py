"""
Photo Gallery — Request Logging Middleware
============================================

What:  One access log line per HTTP request.
Why:   Shows who listed, uploaded or deleted what, and how long it took.
How:   Measures the handler duration and logs method, path, status, request
       ID and client IP on the "photo_gallery.access" logger.

Log level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Not logged: request bodies (photo bytes) and query strings. Static photo
downloads under /photos and health probes are skipped; they would drown
out the API traffic.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from photo_gallery.middleware.request_id import request_id_var

logger = logging.getLogger("photo_gallery.access")

QUIET_PATH_PREFIXES = ("/health", "/photos/")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status, duration and client for each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path.startswith(QUIET_PATH_PREFIXES):
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
