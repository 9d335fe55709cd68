"""
Structured logging utility for the tour booking client.

Provides JSON-formatted logging with credential masking,
context injection, and operation timing.
"""

import inspect
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from functools import wraps


def mask_token(token: Optional[str]) -> str:
    """
    Mask a bearer token so only its tail is visible in logs.

    Args:
        token: JWT or other opaque session token

    Returns:
        Masked token string

    Example:
        >>> mask_token("eyJhbGciOiJIUzI1NiJ9.payload.sig1234")
        "****1234"
    """
    if not token:
        return "none"

    if len(token) <= 8:
        return "****"

    return f"****{token[-4:]}"


def mask_email(email: Optional[str]) -> str:
    """
    Mask an email address, keeping the first character and the domain.

    Example:
        >>> mask_email("alice@example.com")
        "a***@example.com"
    """
    if not email:
        return "unknown"

    local, sep, domain = email.partition("@")
    if not sep or not local:
        return "invalid"

    return f"{local[0]}***@{domain}"


class StructuredLogger:
    """
    JSON-formatted logger with context injection and operation timing.

    Every record is a single JSON object so it can be shipped to a log
    collector unchanged.
    """

    def __init__(self, name: str):
        """
        Args:
            name: Logger name (typically __name__ from calling module)
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter("%(message)s"))
            self.logger.addHandler(handler)

    def _format_log(
        self,
        level: str,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[float] = None,
        error: Optional[str] = None,
    ) -> str:
        """
        Format log entry as JSON.

        Optional fields are left out of the entry when empty. Values that
        are not JSON-native (enums, datetimes) are written with ``str``.
        """
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "message": message,
        }
        optional = {
            "operation": operation,
            "context": context,
            "duration_ms": round(duration_ms, 2) if duration_ms is not None else None,
            "error": error,
        }
        log_entry.update({key: value for key, value in optional.items() if value not in (None, "", {})})

        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def _emit(
        self,
        level: int,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[float] = None,
        error: Optional[str] = None,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(
            level,
            self._format_log(
                logging.getLevelName(level), message, operation, context, duration_ms, error
            ),
        )

    def debug(self, message: str, **fields: Any) -> None:
        self._emit(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self._emit(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit(logging.WARNING, message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self._emit(logging.ERROR, message, **fields)


# Call arguments copied verbatim into the operation context
CONTEXT_ARGUMENTS = ("tour_id", "booking_id", "state_id", "user_id")

# Call arguments that are logged only in masked form
MASKED_ARGUMENTS = {"email": mask_email, "token": mask_token}


def _operation_context(func, args, kwargs) -> Dict[str, Any]:
    """Build log context from a call's bound arguments."""
    try:
        bound = inspect.signature(func).bind_partial(*args, **kwargs).arguments
    except TypeError:
        bound = dict(kwargs)

    context: Dict[str, Any] = {}
    owner = bound.get("self")
    if owner is not None and hasattr(owner, "base_url"):
        context["service"] = type(owner).__name__

    for name in CONTEXT_ARGUMENTS:
        if bound.get(name) is not None:
            context[name] = bound[name]
    for name, mask in MASKED_ARGUMENTS.items():
        if bound.get(name) is not None:
            context[f"{name}_masked"] = mask(bound[name])
    return context


def log_operation(operation_name: str):
    """
    Decorator that logs the start, duration and outcome of a client call.

    Ids such as ``tour_id`` are copied into the log context; ``email`` and
    ``token`` are masked. When the call returns a list its length is logged
    as ``result_count``.

    Usage:
        @log_operation("delete_tour")
        def delete_tour(self, tour_id, token=None):
            ...
    """

    def decorator(func):
        logger = StructuredLogger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            context = _operation_context(func, args, kwargs)
            logger.debug(f"Starting {operation_name}", operation=operation_name, context=context)

            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Failed {operation_name}",
                    operation=operation_name,
                    context=context,
                    error=str(e),
                    duration_ms=(time.time() - start_time) * 1000,
                )
                raise

            outcome = dict(context)
            if isinstance(result, list):
                outcome["result_count"] = len(result)
            logger.info(
                f"Completed {operation_name}",
                operation=operation_name,
                context=outcome,
                duration_ms=(time.time() - start_time) * 1000,
            )
            return result

        return wrapper

    return decorator


def get_logger(name: str) -> StructuredLogger:
    """Return a StructuredLogger for ``name`` (typically the module's __name__)."""
    return StructuredLogger(name)
