"""
Unit tests for Settings and SecretRedactionFilter.
"""

import logging

import pytest
from unittest.mock import Mock

from tour_booking.api.enrichment import FailurePolicy
from tour_booking.auth.dynamodb_store import DynamoDBSessionStore
from tour_booking.auth.session_store import FileSessionStore, MemorySessionStore
from tour_booking.config.settings import (
    ConfigurationError,
    SecretRedactionFilter,
    Settings,
)


def _write(tmp_path, text, name="config.yaml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestSettingsDefaults:
    """Settings with no file and no environment."""

    def test_defaults(self):
        settings = Settings(environ={})

        assert settings.user_service_url == "http://127.0.0.1:8443"
        assert settings.destination_service_url == "http://127.0.0.1:3000"
        assert settings.request_timeout == 10.0
        assert settings.enrichment_workers == 4
        assert settings.enrichment_policy is FailurePolicy.FAIL_FAST
        assert settings.session_backend == "memory"
        assert settings.token_ttl_seconds == 86400

    def test_default_store_is_memory(self):
        assert isinstance(Settings(environ={}).build_session_store(), MemorySessionStore)


class TestSettingsEnvironment:
    """Environment variable overrides."""

    def test_overrides_are_converted(self):
        settings = Settings(
            environ={
                "TOUR_USER_SERVICE_URL": "https://users.example.com",
                "TOUR_REQUEST_TIMEOUT": "2.5",
                "TOUR_ENRICHMENT_WORKERS": "8",
                "TOUR_ENRICHMENT_POLICY": "best_effort",
                "TOUR_TOKEN_TTL_SECONDS": "600",
            }
        )

        assert settings.user_service_url == "https://users.example.com"
        assert settings.request_timeout == 2.5
        assert settings.enrichment_workers == 8
        assert settings.enrichment_policy is FailurePolicy.BEST_EFFORT
        assert settings.token_ttl_seconds == 600

    def test_empty_value_is_ignored(self):
        settings = Settings(environ={"TOUR_ENRICHMENT_WORKERS": ""})

        assert settings.enrichment_workers == 4

    def test_non_numeric_value(self):
        with pytest.raises(ConfigurationError, match="TOUR_ENRICHMENT_WORKERS"):
            Settings(environ={"TOUR_ENRICHMENT_WORKERS": "many"})

    def test_out_of_range_workers(self):
        with pytest.raises(ConfigurationError):
            Settings(environ={"TOUR_ENRICHMENT_WORKERS": "0"})

    def test_unknown_backend(self):
        with pytest.raises(ConfigurationError):
            Settings(environ={"TOUR_SESSION_BACKEND": "redis"})


class TestSettingsFile:
    """YAML configuration file loading."""

    def test_file_values(self, tmp_path):
        path = _write(
            tmp_path,
            "services:\n"
            "  destination_service_url: http://dest.internal:3000\n"
            "enrichment:\n"
            "  workers: 2\n"
            "session:\n"
            "  backend: file\n"
            f"  file_path: {tmp_path / 'session.json'}\n",
        )

        settings = Settings(config_path=path, environ={})

        assert settings.destination_service_url == "http://dest.internal:3000"
        assert settings.enrichment_workers == 2
        assert isinstance(settings.build_session_store(), FileSessionStore)

    def test_path_from_environment(self, tmp_path):
        path = _write(tmp_path, "enrichment:\n  policy: best_effort\n")

        settings = Settings(environ={"TOUR_CONFIG_FILE": path})

        assert settings.enrichment_policy is FailurePolicy.BEST_EFFORT

    def test_environment_beats_file(self, tmp_path):
        path = _write(tmp_path, "enrichment:\n  workers: 2\n")

        settings = Settings(config_path=path, environ={"TOUR_ENRICHMENT_WORKERS": "6"})

        assert settings.enrichment_workers == 6

    def test_empty_file(self, tmp_path):
        settings = Settings(config_path=_write(tmp_path, ""), environ={})

        assert settings.session_backend == "memory"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            Settings(config_path=str(tmp_path / "absent.yaml"), environ={})

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            Settings(config_path=_write(tmp_path, "services: [unclosed\n"), environ={})

    def test_non_mapping_root(self, tmp_path):
        with pytest.raises(ConfigurationError, match="mapping"):
            Settings(config_path=_write(tmp_path, "- a\n- b\n"), environ={})

    def test_unknown_key_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError):
            Settings(config_path=_write(tmp_path, "services:\n  retries: 3\n"), environ={})


class TestBuildSessionStore:
    """Backend selection."""

    def test_dynamodb_backend_uses_given_resource(self):
        settings = Settings(
            environ={"TOUR_SESSION_BACKEND": "dynamodb", "TOUR_SESSION_TABLE": "tour-session"}
        )
        resource = Mock()

        store = settings.build_session_store(dynamodb_resource=resource)

        assert isinstance(store, DynamoDBSessionStore)
        resource.Table.assert_called_once_with("tour-session")


class TestSecretRedactionFilter:
    """Tests for SecretRedactionFilter."""

    def _record(self, msg, args=None):
        return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)

    def test_redacts_message(self):
        redaction = SecretRedactionFilter(["eyJhbGciOi.secret"])
        record = self._record("token=eyJhbGciOi.secret sent")

        assert redaction.filter(record) is True
        assert record.msg == "token=***REDACTED*** sent"

    def test_redacts_args(self):
        redaction = SecretRedactionFilter(["hunter22"])
        record = self._record("password %s", ("hunter22",))

        redaction.filter(record)

        assert record.args == ("***REDACTED***",)

    def test_short_values_ignored(self):
        redaction = SecretRedactionFilter()
        redaction.add_secret("abc")
        redaction.add_secret(None)

        assert redaction.redacted_values == set()

    def test_setup_attaches_to_handlers(self):
        test_logger = logging.getLogger("tour_booking.test_redaction")
        handler = logging.NullHandler()
        test_logger.addHandler(handler)
        try:
            redaction = Settings.setup_redaction_filter(test_logger, ["late-token-value"])

            assert redaction in test_logger.filters
            assert redaction in handler.filters
        finally:
            test_logger.removeHandler(handler)
            test_logger.removeFilter(redaction)
