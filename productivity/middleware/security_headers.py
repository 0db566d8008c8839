"""Security headers middleware."""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# Sent on every response; API payloads carry tokens and personal data
STATIC_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cache-Control": "no-store",
}

API_CSP = "default-src 'none'; frame-ancestors 'none'"

# Swagger UI needs scripts and styles; only served when debug is on
DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")


def _is_https(request: Request) -> bool:
    return request.url.scheme == "https" or request.headers.get("x-forwarded-proto") == "https"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds hardening headers to every response, error responses included."""

    def __init__(self, app: ASGIApp, hsts_max_age: int = 31536000):
        super().__init__(app)
        self.hsts_value = f"max-age={hsts_max_age}; includeSubDomains"

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        response.headers.update(STATIC_HEADERS)
        if not request.url.path.startswith(DOCS_PATHS):
            response.headers["Content-Security-Policy"] = API_CSP
        if _is_https(request):
            response.headers["Strict-Transport-Security"] = self.hsts_value

        return response
