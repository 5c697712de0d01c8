"""
Tests for structured logging functionality.

Validates:
- Logging configuration is applied correctly
- Request ID is generated and unique per request
- Contextual fields are present in log records
- JSON logging works in production mode
- Human-readable logging works in development mode
- Contact form values never reach a log record
"""

import json
import logging
import sys
import uuid

import pytest
from flask import g

from smokehouse.app.logging_config import (
    REDACTED,
    ContextualJsonFormatter,
    DevelopmentFormatter,
    SubmissionRedactionFilter,
    resolve_log_level,
)


def _make_record(msg="Test message", exc_info=None):
    logger = logging.getLogger("test")
    return logger.makeRecord(
        name="test.logger",
        level=logging.INFO,
        fn="test.py",
        lno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestLoggingConfiguration:
    """Test logging configuration setup."""

    def test_logging_configured_on_app_creation(self, app):
        assert app.logger is not None
        assert len(app.logger.handlers) > 0

    def test_test_env_uses_warning_level(self, app):
        assert app.config["APP_ENV"] == "test"
        assert app.logger.level >= logging.WARNING

    def test_explicit_log_level_wins(self, make_app):
        app = make_app(LOG_LEVEL="error")
        assert app.logger.level == logging.ERROR

    def test_json_formatter_when_enabled(self, make_app):
        app = make_app(LOG_JSON_ENABLED=True)
        formatters = [handler.formatter for handler in app.logger.handlers]
        assert any(isinstance(f, ContextualJsonFormatter) for f in formatters)


class TestRequestContextLogging:
    """Test request context and request_id functionality."""

    def test_request_id_is_unique(self, client, valid_payload):
        first = client.post("/api/contact", json=valid_payload)
        second = client.post("/api/contact", json=valid_payload)

        first_id = first.headers["X-Request-ID"]
        second_id = second.headers["X-Request-ID"]
        assert first_id != second_id
        uuid.UUID(first_id)

    def test_request_completed_logged_with_status(self, app, client, valid_payload, caplog):
        caplog.set_level(logging.INFO, logger=app.logger.name)
        client.post("/api/contact", json={})

        completed = [r for r in caplog.records if getattr(r, "event", None) == "request.completed"]
        assert completed
        assert completed[-1].status_code == 400


class TestStructuredLogFields:
    """Test structured logging fields and formatters."""

    def test_json_formatter_adds_standard_fields(self):
        formatter = ContextualJsonFormatter(app_env="production")

        log_data = json.loads(formatter.format(_make_record()))

        assert log_data["level"] == "INFO"
        assert log_data["logger"] == "test.logger"
        assert log_data["message"] == "Test message"
        assert log_data["app_env"] == "production"
        assert "timestamp" in log_data
        assert "request_id" not in log_data

    def test_json_formatter_with_request_context(self, app):
        formatter = ContextualJsonFormatter(app_env="test")

        with app.test_request_context(
            "/api/contact",
            method="POST",
            environ_base={"REMOTE_ADDR": "198.51.100.4"},
        ):
            g.request_id = str(uuid.uuid4())
            log_data = json.loads(formatter.format(_make_record("With context")))

            assert log_data["request_id"] == g.request_id
            assert log_data["method"] == "POST"
            assert log_data["path"] == "/api/contact"
            assert log_data["remote_addr"] == "198.51.100.4"

    def test_json_formatter_includes_exception(self):
        formatter = ContextualJsonFormatter(app_env="production")
        try:
            raise ValueError("bad coals")
        except ValueError:
            record = _make_record("Failure", exc_info=sys.exc_info())

        log_data = json.loads(formatter.format(record))
        assert "ValueError: bad coals" in log_data["exception"]

    def test_development_formatter_is_human_readable(self, app):
        formatter = DevelopmentFormatter()

        with app.test_request_context("/api/contact", method="POST"):
            g.request_id = "abcdef1234567890"
            output = formatter.format(_make_record("Readable"))

        assert "INFO" in output
        assert "Readable" in output
        assert "request_id=abcdef12" in output
        assert "POST /api/contact" in output


@pytest.mark.parametrize(
    "app_env, configured, expected",
    [
        ("production", None, logging.INFO),
        ("development", None, logging.DEBUG),
        ("test", None, logging.WARNING),
        ("development", "error", logging.ERROR),
        ("production", "verbose", logging.INFO),
    ],
)
def test_resolve_log_level(app_env, configured, expected):
    assert resolve_log_level(app_env, configured) == expected


class TestSubmissionRedaction:
    """Form values are replaced before any handler sees the record."""

    def test_form_value_keys_are_redacted(self):
        record = _make_record()
        record.email = "jane@example.com"
        record.contact_message = "Great ribs!"
        record.status_code = 200

        assert SubmissionRedactionFilter().filter(record) is True
        assert record.email == REDACTED
        assert record.contact_message == REDACTED
        assert record.status_code == 200

    def test_email_addresses_in_message_are_scrubbed(self):
        record = _make_record("Reply to %s soon")
        record.args = ("jane.doe+ribs@example.com",)

        SubmissionRedactionFilter().filter(record)

        assert record.getMessage() == f"Reply to {REDACTED} soon"

    def test_plain_message_is_untouched(self):
        record = _make_record("Request completed")

        SubmissionRedactionFilter().filter(record)

        assert record.msg == "Request completed"

    def test_json_output_carries_no_form_values(self):
        formatter = ContextualJsonFormatter(app_env="production")
        record = _make_record("Contact from jane@example.com")
        record.contact_name = "Jane Doe"

        SubmissionRedactionFilter().filter(record)
        log_data = json.loads(formatter.format(record))

        assert log_data["message"] == f"Contact from {REDACTED}"
        assert log_data["contact_name"] == REDACTED

    def test_app_logger_redacts_before_propagating(self, app, caplog):
        caplog.set_level(logging.WARNING, logger=app.logger.name)

        app.logger.warning("Bounce from jane@example.com", extra={"email": "jane@example.com"})

        assert "jane@example.com" not in caplog.text
        assert caplog.records[-1].email == REDACTED

    def test_filter_installed_once(self, make_app):
        make_app()
        app = make_app()

        logger_filters = [f for f in app.logger.filters if isinstance(f, SubmissionRedactionFilter)]
        assert len(logger_filters) == 1
        for handler in app.logger.handlers:
            if isinstance(handler.formatter, (ContextualJsonFormatter, DevelopmentFormatter)):
                assert any(isinstance(f, SubmissionRedactionFilter) for f in handler.filters)
