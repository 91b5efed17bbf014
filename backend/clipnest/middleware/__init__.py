"""Middleware and auth dependencies for the FastAPI application."""

from clipnest.middleware.security_middleware import (
    SecurityHeadersMiddleware,
    HTTPSRedirectMiddleware,
    RequestValidationMiddleware,
    AuditLogMiddleware
)

__all__ = [
    "SecurityHeadersMiddleware",
    "HTTPSRedirectMiddleware",
    "RequestValidationMiddleware",
    "AuditLogMiddleware"
]
