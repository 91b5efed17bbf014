"""
Error tracking.

Unhandled exceptions are always logged as JSON; when SENTRY_DSN is set they
are also reported to Sentry, minus health probes and client errors.
"""

from typing import Any, Dict, Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from clipnest.config import settings
from clipnest.services.logging_service import logger

# Exceptions that carry an HTTP status chosen by the application
EXPECTED_ERRORS = {"HTTPException", "ApiError", "RequestValidationError"}


def drop_expected_events(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Sentry before_send hook: None drops the event."""
    url = event.get("request", {}).get("url", "")
    if "/health" in url:
        return None

    raised = event.get("exception", {}).get("values", [])
    if any(value.get("type") in EXPECTED_ERRORS for value in raised):
        return None

    return event


class ErrorTracker:
    """Logs exceptions and forwards them to Sentry when configured."""

    def __init__(self, dsn: Optional[str] = None):
        self.sentry_enabled = False

        sentry_dsn = settings.SENTRY_DSN if dsn is None else dsn
        if sentry_dsn:
            self._init_sentry(sentry_dsn)

    def _init_sentry(self, dsn: str):
        try:
            sentry_sdk.init(
                dsn=dsn,
                environment=settings.ENVIRONMENT,
                release=f"clipnest@{settings.APP_VERSION}",
                traces_sample_rate=0.1,
                integrations=[FastApiIntegration(), SqlalchemyIntegration()],
                before_send=drop_expected_events,
                send_default_pii=False
            )
        except Exception as e:
            logger.error("Sentry initialisation failed", error=str(e))
            return

        self.sentry_enabled = True
        logger.info("Sentry error tracking enabled", environment=settings.ENVIRONMENT)

    def capture_exception(
        self,
        exception: Exception,
        context: Optional[Dict[str, Any]] = None,
        tags: Optional[Dict[str, str]] = None
    ):
        """
        Record an exception.

        Args:
            exception: The exception to capture
            context: Named context blocks (e.g. {"request": {...}})
            tags: Sentry tags for filtering
        """
        # Handlers run outside the original except block, so hand over the exception itself
        logger.exception(
            f"Unhandled {type(exception).__name__}: {exception}",
            exc_info=exception,
            error_type=type(exception).__name__,
            **(context or {})
        )

        if not self.sentry_enabled:
            return

        with sentry_sdk.new_scope() as scope:
            for key, value in (context or {}).items():
                scope.set_context(key, value)
            for key, value in (tags or {}).items():
                scope.set_tag(key, value)
            sentry_sdk.capture_exception(exception)

    def set_user_context(self, user_id: str):
        """Attach the signed-in user's id to later Sentry events."""
        if self.sentry_enabled:
            sentry_sdk.set_user({"id": user_id})


error_tracker = ErrorTracker()


def capture_exception(exception: Exception, **kwargs):
    error_tracker.capture_exception(exception, **kwargs)
