"""Middleware and request gate for the productivity API."""

from productivity.middleware.auth import CurrentUser, RequestGate, extract_bearer_token
from productivity.middleware.security_headers import SecurityHeadersMiddleware

__all__ = ["CurrentUser", "RequestGate", "SecurityHeadersMiddleware", "extract_bearer_token"]
