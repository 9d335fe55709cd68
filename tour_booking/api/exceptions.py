"""
Exception hierarchy for the tour service HTTP clients.
"""

from typing import Optional

import requests


class TourAPIError(RuntimeError):
    """Raised when a tour service request fails or returns a non-success status."""

    def __init__(
        self,
        operation: str,
        status_code: Optional[int] = None,
        response_snippet: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        status_fragment = f" (HTTP {status_code})" if status_code is not None else ""
        snippet_fragment = (
            f" - {response_snippet.strip()}" if response_snippet and response_snippet.strip() else ""
        )
        text = message or f"Tour service failure during {operation}{status_fragment}{snippet_fragment}"
        super().__init__(text)
        self.operation = operation
        self.status_code = status_code
        self.response_snippet = response_snippet
        self.server_message = message


class AuthenticationError(TourAPIError):
    """Raised when the service rejects credentials or the bearer token (401/403)."""


class NotFoundError(TourAPIError):
    """Raised when the requested resource does not exist (404)."""


def error_from_response(
    response: requests.Response, operation: str, message: Optional[str] = None
) -> TourAPIError:
    """Build the exception matching a failed response's status code."""
    status_code = getattr(response, "status_code", None)
    response_snippet = None
    try:
        response_snippet = response.text[:200]
    except Exception:  # noqa: BLE001
        response_snippet = None

    if status_code in (401, 403):
        error_cls = AuthenticationError
    elif status_code == 404:
        error_cls = NotFoundError
    else:
        error_cls = TourAPIError

    return error_cls(
        operation=operation,
        status_code=status_code,
        response_snippet=response_snippet,
        message=message,
    )
