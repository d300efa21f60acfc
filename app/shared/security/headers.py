"""
Secure HTTP headers middleware.

Adds security-related headers to every HTTP response:
- X-Content-Type-Options
- X-Frame-Options
- Referrer-Policy
- Content-Security-Policy (skipped on the interactive docs pages)
- Cache-Control (API responses carry tokens and personal data)

No business logic. Pure cross-cutting concern.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

CSP_HEADER = "Content-Security-Policy"

SECURE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    CSP_HEADER: "default-src 'self'",
    "Cache-Control": "no-store",
}

# Swagger UI and ReDoc load their assets from a CDN.
DOCS_PATHS = ("/docs", "/redoc")


def headers_for_path(path: str) -> dict[str, str]:
    """Return the secure headers that apply to a request path."""
    if path.startswith(DOCS_PATHS):
        return {k: v for k, v in SECURE_HEADERS.items() if k != CSP_HEADER}
    return SECURE_HEADERS


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware that adds secure HTTP headers to every response.

    Headers a route already set are left untouched.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for header_name, header_value in headers_for_path(request.url.path).items():
            response.headers.setdefault(header_name, header_value)
        return response
