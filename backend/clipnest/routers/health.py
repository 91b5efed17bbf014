"""Health check and monitoring endpoints for production."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
import psutil
import os

from clipnest.config import settings
from clipnest.database import get_db
from clipnest.services.logging_service import app_metrics
from clipnest.utils.api_error import ApiError
from clipnest.utils.api_response import ApiResponse, api_response

router = APIRouter()


@router.get("/health", response_model=ApiResponse[dict])
async def health_check():
    """
    Basic health check endpoint.

    Returns 200 if application is running.
    Used by load balancers for liveness probes.
    """
    return api_response(status.HTTP_200_OK, {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
        "pid": os.getpid()
    }, "OK")


@router.get("/health/ready", response_model=ApiResponse[dict])
async def readiness_check(db: Session = Depends(get_db)):
    """
    Readiness probe.

    Checks that the database answers; 503 otherwise.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        raise ApiError(status.HTTP_503_SERVICE_UNAVAILABLE, "Service not ready", errors=[f"Database: {e}"])

    return api_response(status.HTTP_200_OK, {
        "status": "ready",
        "checks": {"database": True},
        "timestamp": datetime.utcnow().isoformat()
    }, "Ready")


@router.get("/health/detailed", response_model=ApiResponse[dict])
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Detailed health check with component status.

    Provides database state, media host configuration, host metrics and the
    in-process request counters.
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION,
        "components": {},
        "system": {}
    }

    # Database health
    try:
        db.execute(text("SELECT 1"))
        health_status["components"]["database"] = {
            "status": "healthy",
            "type": db.get_bind().dialect.name
        }
    except SQLAlchemyError as e:
        health_status["components"]["database"] = {
            "status": "unhealthy",
            "error": str(e)
        }
        health_status["status"] = "degraded"

    # Media host is only checked for configuration; uploads report their own failures
    health_status["components"]["media"] = {
        "status": "configured" if settings.CLOUDINARY_CLOUD_NAME else "unconfigured",
        "provider": "cloudinary"
    }

    # System metrics
    try:
        health_status["system"] = {
            "cpu_percent": psutil.cpu_percent(interval=None),
            "memory_percent": psutil.virtual_memory().percent,
            "disk_percent": psutil.disk_usage('/').percent,
            "process_count": len(psutil.pids())
        }
    except (psutil.Error, OSError) as e:
        health_status["system"] = {
            "error": f"Unable to gather system metrics: {str(e)}"
        }

    metrics = app_metrics.get_metrics()
    health_status["metrics"] = {
        "uptime_seconds": metrics["uptime_seconds"],
        "requests": {
            "total": metrics["requests"]["total"],
            "error_rate_percent": round(app_metrics.get_error_rate(), 2)
        },
        "media": metrics["media"]
    }

    return api_response(status.HTTP_200_OK, health_status, health_status["status"])
