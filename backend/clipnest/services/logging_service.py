"""
Structured logging and in-process request metrics.

Everything under the "clipnest" logger is written as one JSON object per
line, so module loggers (``logging.getLogger(__name__)``) and the keyword
style StructuredLogger end up in the same stream.
"""

import json
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Optional

from clipnest.config import settings

ROOT_LOGGER = "clipnest"


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.utcfromtimestamp(record.created).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "fields", {}))

        if record.exc_info and "traceback" not in entry:
            entry["traceback"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach JSON handlers to the package logger once.

    Args:
        level: Minimum level name
        log_file: Optional file that receives the same lines as stderr
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # uvicorn --reload and test re-imports must not stack handlers
    if not root.handlers:
        handlers = [logging.StreamHandler()]
        if log_file:
            handlers.append(logging.FileHandler(log_file))
        for handler in handlers:
            handler.setFormatter(JsonFormatter())
            root.addHandler(handler)

    return root


class StructuredLogger:
    """Keyword-argument front end: ``logger.info("request", path=..., status=...)``."""

    def __init__(self, name: str = ROOT_LOGGER):
        self.logger = logging.getLogger(name)

    def _log(self, level: int, message: str, fields: Dict[str, Any], exc_info=None):
        self.logger.log(level, message, exc_info=exc_info, extra={"fields": fields})

    def info(self, message: str, **fields):
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, **fields):
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, **fields):
        self._log(logging.ERROR, message, fields)

    def debug(self, message: str, **fields):
        self._log(logging.DEBUG, message, fields)

    def exception(self, message: str, exc_info=True, **fields):
        """
        Log at ERROR level with a traceback.

        Args:
            message: Error message
            exc_info: Pass False when the caller already put a "traceback" field
        """
        self._log(logging.ERROR, message, fields, exc_info=exc_info)


class ApplicationMetrics:
    """
    Request and media counters kept in memory for /health/detailed.

    Counts reset on restart; they are a quick look, not a time series.
    """

    def __init__(self):
        self.start_time = datetime.utcnow()
        self.requests = {"total": 0, "success": 0, "error": 0}
        self.by_endpoint = defaultdict(lambda: {"total": 0, "success": 0, "error": 0})
        self.media = {"uploads": 0, "upload_failures": 0, "deletes": 0, "delete_failures": 0}

    def increment_request(self, endpoint: str, success: bool = True):
        """
        Count one finished request.

        Args:
            endpoint: "METHOD /route/template"
            success: False for 5xx responses
        """
        outcome = "success" if success else "error"
        for counters in (self.requests, self.by_endpoint[endpoint]):
            counters["total"] += 1
            counters[outcome] += 1

    def increment_media(self, operation: str, success: bool = True):
        """Count one provider call; operation is "upload" or "delete"."""
        key = f"{operation}s" if success else f"{operation}_failures"
        if key in self.media:
            self.media[key] += 1

    def get_metrics(self) -> Dict[str, Any]:
        return {
            "requests": dict(self.requests, by_endpoint=dict(self.by_endpoint)),
            "media": dict(self.media),
            "uptime_seconds": (datetime.utcnow() - self.start_time).total_seconds(),
        }

    def get_error_rate(self) -> float:
        """Percentage of requests that ended in a 5xx."""
        total = self.requests["total"]
        if total == 0:
            return 0.0
        return self.requests["error"] / total * 100


configure_logging(settings.LOG_LEVEL)

# Global instances
logger = StructuredLogger()
app_metrics = ApplicationMetrics()
