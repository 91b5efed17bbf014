"""Tests for JSON logging and the in-process metrics."""

import json
import logging

import pytest

from clipnest.services.error_tracking import drop_expected_events
from clipnest.services.logging_service import ApplicationMetrics, JsonFormatter


def _record(message, **fields):
    record = logging.LogRecord("clipnest.test", logging.INFO, __file__, 1, message, None, None)
    record.fields = fields
    return record


@pytest.mark.unit
class TestJsonFormatter:

    def test_fields_are_merged(self):
        line = JsonFormatter().format(_record("request", path="/api/v1/videos", status=200))
        entry = json.loads(line)

        assert entry["message"] == "request"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "clipnest.test"
        assert entry["path"] == "/api/v1/videos"
        assert entry["status"] == 200

    def test_plain_record_without_fields(self):
        record = logging.LogRecord("clipnest.x", logging.WARNING, __file__, 1, "temp file %s kept", ("a.mp4",), None)
        entry = json.loads(JsonFormatter().format(record))

        assert entry["message"] == "temp file a.mp4 kept"
        assert entry["level"] == "WARNING"

    def test_exception_traceback(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            record = logging.LogRecord(
                "clipnest", logging.ERROR, __file__, 1, "failed", None, (type(e), e, e.__traceback__)
            )

        entry = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: boom" in entry["traceback"]


@pytest.mark.unit
class TestApplicationMetrics:

    def test_request_counters(self):
        metrics = ApplicationMetrics()
        metrics.increment_request("GET /api/v1/videos")
        metrics.increment_request("GET /api/v1/videos")
        metrics.increment_request("POST /api/v1/videos", success=False)

        snapshot = metrics.get_metrics()
        assert snapshot["requests"]["total"] == 3
        assert snapshot["requests"]["error"] == 1
        assert snapshot["requests"]["by_endpoint"]["GET /api/v1/videos"]["success"] == 2
        assert metrics.get_error_rate() == pytest.approx(100 / 3)

    def test_error_rate_without_requests(self):
        assert ApplicationMetrics().get_error_rate() == 0.0

    def test_media_counters(self):
        metrics = ApplicationMetrics()
        metrics.increment_media("upload")
        metrics.increment_media("delete", success=False)

        assert metrics.get_metrics()["media"] == {
            "uploads": 1, "upload_failures": 0, "deletes": 0, "delete_failures": 1
        }


@pytest.mark.unit
class TestSentryFilter:

    def test_health_events_dropped(self):
        assert drop_expected_events({"request": {"url": "http://api/health/ready"}}, {}) is None

    def test_api_errors_dropped(self):
        event = {"exception": {"values": [{"type": "ApiError"}]}}
        assert drop_expected_events(event, {}) is None

    def test_other_events_kept(self):
        event = {"request": {"url": "http://api/api/v1/videos"}, "exception": {"values": [{"type": "KeyError"}]}}
        assert drop_expected_events(event, {}) is event
