"""
Photo Gallery — Security Headers Middleware
=============================================

What:  Adds conservative browser security headers to every response.
Why:   The gallery is served on a home network and often exposed through a
       reverse proxy; these headers stop MIME sniffing of uploaded files,
       framing by other sites and referrer leaks of photo URLs.

Content-Security-Policy is not set; it belongs to whatever serves the frontend.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-site",
    "X-DNS-Prefetch-Control": "off",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            # Handlers may set their own value
            if name not in response.headers:
                response.headers[name] = value
        return response
