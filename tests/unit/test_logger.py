"""
Unit tests for structured logging utility (tour_booking/utils/logger.py)

Covers:
- Token and email masking
- JSON log formatting with required fields
- Operation timing decorator
"""

import json
import logging

import pytest

from tour_booking.utils.logger import (
    StructuredLogger,
    get_logger,
    log_operation,
    mask_email,
    mask_token,
)


class TestMaskToken:
    """Tests for bearer token masking."""

    def test_keeps_last_four_characters(self):
        result = mask_token("eyJhbGciOiJIUzI1NiJ9.payload.sig1234")
        assert result == "****1234"
        assert "payload" not in result

    def test_short_token_fully_masked(self):
        assert mask_token("abc") == "****"

    def test_missing_token(self):
        assert mask_token(None) == "none"
        assert mask_token("") == "none"


class TestMaskEmail:
    """Tests for email masking."""

    def test_keeps_first_char_and_domain(self):
        assert mask_email("alice@example.com") == "a***@example.com"

    def test_invalid_email(self):
        assert mask_email("not-an-email") == "invalid"
        assert mask_email("@example.com") == "invalid"

    def test_missing_email(self):
        assert mask_email(None) == "unknown"


class TestStructuredLogger:
    """Tests for StructuredLogger JSON output."""

    def test_format_log_contains_required_fields(self):
        logger = StructuredLogger("test.format")
        entry = json.loads(
            logger._format_log(
                "INFO",
                "User logged in",
                operation="login",
                context={"user_id": "42"},
                duration_ms=12.3456,
            )
        )

        assert entry["level"] == "INFO"
        assert entry["message"] == "User logged in"
        assert entry["operation"] == "login"
        assert entry["context"] == {"user_id": "42"}
        assert entry["duration_ms"] == 12.35
        assert entry["timestamp"].endswith("Z")

    def test_optional_fields_omitted(self):
        logger = StructuredLogger("test.optional")
        entry = json.loads(logger._format_log("DEBUG", "plain"))

        assert "operation" not in entry
        assert "context" not in entry
        assert "error" not in entry

    def test_error_emitted_as_json(self, caplog):
        logger = get_logger("test.error")
        with caplog.at_level(logging.DEBUG, logger="test.error"):
            logger.error("Request failed", operation="sign_in", error="boom")

        entry = json.loads(caplog.records[-1].getMessage())
        assert entry["level"] == "ERROR"
        assert entry["error"] == "boom"

    def test_handler_not_duplicated(self):
        StructuredLogger("test.handlers")
        second = StructuredLogger("test.handlers")
        assert len(second.logger.handlers) == 1


class TestLogOperation:
    """Tests for the log_operation decorator."""

    def test_logs_completion_with_duration(self, caplog):
        @log_operation("sample_op")
        def sample(value):
            return value * 2

        with caplog.at_level(logging.DEBUG, logger=__name__):
            assert sample(21) == 42

        entries = [json.loads(r.getMessage()) for r in caplog.records if r.name == __name__]
        assert entries[0]["message"] == "Starting sample_op"
        assert entries[-1]["message"] == "Completed sample_op"
        assert "duration_ms" in entries[-1]

    def test_masks_sensitive_kwargs(self, caplog):
        @log_operation("sign_in")
        def sign_in(email=None, token=None):
            return True

        with caplog.at_level(logging.DEBUG, logger=__name__):
            sign_in(email="bob@example.com", token="secret-token-9876")

        output = " ".join(r.getMessage() for r in caplog.records if r.name == __name__)
        assert "bob@example.com" not in output
        assert "secret-token-9876" not in output
        assert "b***@example.com" in output
        assert "****9876" in output

    def test_reraises_and_logs_failure(self, caplog):
        @log_operation("failing_op")
        def failing():
            raise ValueError("bad input")

        with caplog.at_level(logging.DEBUG, logger=__name__):
            with pytest.raises(ValueError):
                failing()

        entry = json.loads(caplog.records[-1].getMessage())
        assert entry["message"] == "Failed failing_op"
        assert entry["error"] == "bad input"

    def test_context_carries_ids_and_service(self, caplog):
        class FakeClient:
            base_url = "http://tours.test"

            @log_operation("delete_tour")
            def delete_tour(self, tour_id, token=None):
                return ["a", "b"]

        with caplog.at_level(logging.DEBUG, logger=__name__):
            FakeClient().delete_tour(9, "jwt-secret-4321")

        entries = [json.loads(r.getMessage()) for r in caplog.records if r.name == __name__]
        completed = entries[-1]["context"]
        assert completed["service"] == "FakeClient"
        assert completed["tour_id"] == 9
        assert completed["token_masked"] == "****4321"
        assert completed["result_count"] == 2
        assert "result_count" not in entries[0]["context"]
