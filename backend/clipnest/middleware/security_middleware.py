"""
HTTP middleware: security headers, HTTPS redirect, request screening and
request audit logging.
"""

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable
import time

from clipnest.config import settings
from clipnest.services.logging_service import app_metrics, logger
from clipnest.utils.api_response import error_body

ACCOUNT_PATH = "/api/v1/users"

# Media is served from the media host, the API only answers JSON
SECURITY_HEADERS = {
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Content-Security-Policy": "; ".join([
        "default-src 'self'",
        "img-src 'self' data: https:",
        "media-src 'self' https:",
        "frame-ancestors 'none'",
    ]),
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, private",
    "Pragma": "no-cache",
}


def _reject(status_code: int, message: str, headers: dict = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(status_code, message), headers=headers)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add the fixed security headers; account responses are never cached."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers.update(SECURITY_HEADERS)
        if request.url.path.startswith(ACCOUNT_PATH):
            response.headers.update(NO_STORE_HEADERS)

        return response


class HTTPSRedirectMiddleware(BaseHTTPMiddleware):
    """301 plain-HTTP requests to HTTPS, production only."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if settings.ENVIRONMENT == "production" and request.url.scheme == "http":
            return _reject(
                status.HTTP_301_MOVED_PERMANENTLY,
                "Please use HTTPS",
                headers={"Location": str(request.url.replace(scheme="https"))}
            )

        return await call_next(request)


class RequestValidationMiddleware(BaseHTTPMiddleware):
    """
    Reject oversized bodies and suspicious paths before routing.

    Only the declared Content-Length is checked; rejections use the failure
    envelope like every other error.
    """

    suspicious_patterns = ("../", "..\\", "<script", "javascript:")

    def __init__(self, app, max_content_length: int = settings.MAX_UPLOAD_BYTES):
        super().__init__(app)
        self.max_content_length = max_content_length

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_content_length:
            return _reject(
                status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                f"Request body too large. Maximum: {self.max_content_length} bytes"
            )

        path = request.url.path.lower()
        if any(pattern in path for pattern in self.suspicious_patterns):
            return _reject(status.HTTP_400_BAD_REQUEST, "Invalid request path")

        return await call_next(request)


class AuditLogMiddleware(BaseHTTPMiddleware):
    """
    Log every API request and feed the request counters.

    Account endpoints and state-changing calls are logged at info level, reads at debug.
    """

    def _is_sensitive(self, path: str, method: str) -> bool:
        return path.startswith(ACCOUNT_PATH) or method in ("POST", "PUT", "PATCH", "DELETE")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        path = request.url.path
        route = request.scope.get("route")
        endpoint = getattr(route, "path", path)
        app_metrics.increment_request(f"{request.method} {endpoint}", success=response.status_code < 500)

        user = getattr(request.state, "user", None)
        fields = {
            "method": request.method,
            "path": path,
            "status": response.status_code,
            "duration_ms": duration_ms,
            "user_id": str(user.id) if user else "anonymous",
            "ip": request.client.host if request.client else "unknown"
        }
        if self._is_sensitive(path, request.method):
            logger.info("request", **fields)
        else:
            logger.debug("request", **fields)

        return response
