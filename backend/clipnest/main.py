"""FastAPI main application."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clipnest.config import settings
from clipnest.database import init_db
from clipnest.routers import users, videos, tweets, comments, likes, subscriptions, dashboard, health
from clipnest.middleware import (
    SecurityHeadersMiddleware,
    HTTPSRedirectMiddleware,
    RequestValidationMiddleware,
    AuditLogMiddleware
)
from clipnest.services.error_tracking import capture_exception
from clipnest.services.logging_service import logger
from clipnest.utils.api_error import ApiError
from clipnest.utils.api_response import api_response, error_body

API_PREFIX = "/api/v1"

# Create FastAPI application
app = FastAPI(
    title="Clipnest API",
    description="Video hosting and microblogging API",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS; credentials are required for the auth cookies
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(HTTPSRedirectMiddleware)
app.add_middleware(RequestValidationMiddleware, max_content_length=settings.MAX_UPLOAD_BYTES)
app.add_middleware(AuditLogMiddleware)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message, exc.errors),
        headers=exc.headers
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Framework errors (unknown route, wrong method) in the failure envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query params are client errors: 400, one entry per field."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "")
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    capture_exception(exc, context={"request": {"method": request.method, "path": request.url.path}})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
    )


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    # Initialize database (create tables if they don't exist)
    init_db()

    logger.info(
        "Clipnest API started",
        environment=settings.ENVIRONMENT,
        database=settings.DATABASE_URL.split("@")[1] if "@" in settings.DATABASE_URL else "configured"
    )


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Clipnest API shutting down")


@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return api_response(status.HTTP_200_OK, {
        "name": "Clipnest API",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs"
    }, "operational")


# Include routers
app.include_router(health.router, tags=["Health & Monitoring"])
app.include_router(users.router, prefix=f"{API_PREFIX}/users", tags=["Users"])
app.include_router(videos.router, prefix=f"{API_PREFIX}/videos", tags=["Videos"])
app.include_router(tweets.router, prefix=f"{API_PREFIX}/tweets", tags=["Tweets"])
app.include_router(comments.router, prefix=f"{API_PREFIX}/comments", tags=["Comments"])
app.include_router(likes.router, prefix=f"{API_PREFIX}/likes", tags=["Likes"])
app.include_router(subscriptions.router, prefix=f"{API_PREFIX}/subscriptions", tags=["Subscriptions"])
app.include_router(dashboard.router, prefix=f"{API_PREFIX}/dashboard", tags=["Dashboard"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clipnest.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
