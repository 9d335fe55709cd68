"""
Configuration loader for the tour booking client.

Reads an optional YAML file validated against a bundled JSON schema, then
applies environment variable overrides. Also provides a logging filter that
redacts session tokens and passwords.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import boto3
import jsonschema
import yaml

from tour_booking.api.enrichment import FailurePolicy
from tour_booking.auth.dynamodb_store import DynamoDBSessionStore
from tour_booking.auth.session_store import (
    DEFAULT_TTL_SECONDS,
    FileSessionStore,
    MemorySessionStore,
    SessionStore,
)

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Exception raised for configuration-related errors."""

    pass


SCHEMA_PATH = Path(__file__).with_name("settings.schema.json")

DEFAULT_USER_SERVICE_URL = "http://127.0.0.1:8443"
DEFAULT_DESTINATION_SERVICE_URL = "http://127.0.0.1:3000"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_ENRICHMENT_WORKERS = 4
DEFAULT_SESSION_FILE = ".local/session.json"
DEFAULT_SESSION_TABLE = "session"
DEFAULT_AWS_REGION = "ap-northeast-2"

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "TOUR_USER_SERVICE_URL": ("services", "user_service_url"),
    "TOUR_DESTINATION_SERVICE_URL": ("services", "destination_service_url"),
    "TOUR_REQUEST_TIMEOUT": ("services", "request_timeout"),
    "TOUR_ENRICHMENT_WORKERS": ("enrichment", "workers"),
    "TOUR_ENRICHMENT_POLICY": ("enrichment", "policy"),
    "TOUR_SESSION_BACKEND": ("session", "backend"),
    "TOUR_SESSION_FILE": ("session", "file_path"),
    "TOUR_SESSION_TABLE": ("session", "table_name"),
    "TOUR_SESSION_REGION": ("session", "region"),
    "TOUR_TOKEN_TTL_SECONDS": ("session", "token_ttl_seconds"),
}

_INT_KEYS = {"workers", "token_ttl_seconds"}
_FLOAT_KEYS = {"request_timeout"}


class SecretRedactionFilter(logging.Filter):
    """
    Logging filter that redacts secret values from log records.
    Replaces secret substrings with ***REDACTED*** to prevent accidental leakage.
    """

    def __init__(self, secrets: Optional[Iterable[str]] = None):
        super().__init__()
        self.redacted_values: set[str] = set()
        for secret in secrets or []:
            self.add_secret(secret)

    def add_secret(self, secret: Optional[str]) -> None:
        """Register a value to redact; very short strings are ignored."""
        if isinstance(secret, str) and len(secret) > 3:
            self.redacted_values.add(secret)

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter and redact log record."""
        try:
            record.msg = self._redact_string(str(record.msg))
            if record.args:
                if isinstance(record.args, dict):
                    record.args = {k: self._redact_string(str(v)) for k, v in record.args.items()}
                elif isinstance(record.args, (list, tuple)):
                    record.args = tuple(self._redact_string(str(arg)) for arg in record.args)
        except Exception as e:
            logger.warning(f"Error during secret redaction: {e}")
        return True

    def _redact_string(self, text: str) -> str:
        for secret in self.redacted_values:
            if secret in text:
                text = text.replace(secret, "***REDACTED***")
        return text


class Settings:
    """
    Resolved client configuration.

    Precedence: environment variables, then the YAML file, then defaults.
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        environ: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Settings.

        Args:
            config_path: YAML config file; defaults to $TOUR_CONFIG_FILE if set
            environ: Environment mapping (defaults to os.environ)

        Raises:
            ConfigurationError: If the file or any override is invalid
        """
        env = os.environ if environ is None else environ
        self.config_path = config_path or env.get("TOUR_CONFIG_FILE")

        config: Dict[str, Dict[str, Any]] = {}
        if self.config_path:
            config = self.load_config_file(self.config_path)

        self._apply_env_overrides(config, env)
        self._validate(config, source="environment overrides")

        services = config.get("services", {})
        enrichment = config.get("enrichment", {})
        session = config.get("session", {})

        self.user_service_url: str = services.get("user_service_url", DEFAULT_USER_SERVICE_URL)
        self.destination_service_url: str = services.get(
            "destination_service_url", DEFAULT_DESTINATION_SERVICE_URL
        )
        self.request_timeout: float = float(
            services.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)
        )
        self.enrichment_workers: int = enrichment.get("workers", DEFAULT_ENRICHMENT_WORKERS)
        self.enrichment_policy = FailurePolicy(enrichment.get("policy", FailurePolicy.FAIL_FAST.value))
        self.session_backend: str = session.get("backend", "memory")
        self.session_file: str = session.get("file_path", DEFAULT_SESSION_FILE)
        self.session_table: str = session.get("table_name", DEFAULT_SESSION_TABLE)
        self.session_region: str = session.get("region", DEFAULT_AWS_REGION)
        self.token_ttl_seconds: int = session.get("token_ttl_seconds", DEFAULT_TTL_SECONDS)

        logger.debug(
            f"Settings resolved: backend={self.session_backend}, "
            f"workers={self.enrichment_workers}, policy={self.enrichment_policy.value}"
        )

    @staticmethod
    def _load_schema() -> Dict[str, Any]:
        try:
            with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot load settings schema {SCHEMA_PATH}: {e}") from e

    @classmethod
    def _validate(cls, config: Dict[str, Any], source: str) -> None:
        try:
            jsonschema.validate(instance=config, schema=cls._load_schema())
        except jsonschema.ValidationError as e:
            logger.error(f"Configuration from {source} failed schema validation: {e.message}")
            raise ConfigurationError(f"Invalid configuration in {source}: {e.message}") from e

    @classmethod
    def load_config_file(cls, path: str) -> Dict[str, Any]:
        """
        Load and validate a YAML configuration file.

        Raises:
            ConfigurationError: If the file is missing, not YAML, or fails validation
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {path}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if not content:
            logger.warning(f"Empty configuration file: {path}")
            return {}
        if not isinstance(content, dict):
            raise ConfigurationError(f"Configuration root in {path} must be a mapping")

        cls._validate(content, source=path)
        logger.info(f"Loaded configuration from {path}")
        return content

    @staticmethod
    def _apply_env_overrides(config: Dict[str, Dict[str, Any]], env: Dict[str, str]) -> None:
        for var, (section, key) in ENV_OVERRIDES.items():
            raw = env.get(var)
            if raw is None or raw == "":
                continue
            value: Any = raw
            try:
                if key in _INT_KEYS:
                    value = int(raw)
                elif key in _FLOAT_KEYS:
                    value = float(raw)
            except ValueError as e:
                raise ConfigurationError(f"{var} must be numeric, got {raw!r}") from e
            config.setdefault(section, {})[key] = value

    def build_session_store(self, dynamodb_resource: Optional[Any] = None) -> SessionStore:
        """Instantiate the configured session store backend."""
        if self.session_backend == "file":
            return FileSessionStore(self.session_file)
        if self.session_backend == "dynamodb":
            resource = dynamodb_resource or boto3.resource(
                "dynamodb", region_name=self.session_region
            )
            return DynamoDBSessionStore(table_name=self.session_table, dynamodb_resource=resource)
        return MemorySessionStore()

    @staticmethod
    def setup_redaction_filter(
        logger_instance: logging.Logger, secrets: Optional[Iterable[str]] = None
    ) -> SecretRedactionFilter:
        """
        Attach a redaction filter to a logger and every one of its handlers.

        Returns:
            The filter, so callers can register tokens issued later
        """
        redaction_filter = SecretRedactionFilter(secrets)
        logger_instance.addFilter(redaction_filter)
        for handler in logger_instance.handlers:
            handler.addFilter(redaction_filter)
        return redaction_filter


def setup_logging_redaction(secrets: Optional[Iterable[str]] = None) -> SecretRedactionFilter:
    """Setup logging redaction for root logger."""
    return Settings.setup_redaction_filter(logging.getLogger(), secrets)
