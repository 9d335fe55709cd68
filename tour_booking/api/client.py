"""
Shared plumbing for the tour service HTTP clients.

Each client wraps a requests.Session bound to one service base URL and
translates transport and HTTP failures into the TourAPIError hierarchy.
"""

from typing import Any, Dict, Optional

import requests

from tour_booking.utils.logger import get_logger
from .exceptions import TourAPIError, error_from_response

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10


class BaseServiceClient:
    """
    Base class for clients of a single REST service.

    Attributes:
        base_url: Service root, without trailing slash
        session: requests.Session used for every call (injectable for tests)
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def _auth_headers(token: Optional[str]) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send(self, method: str, path: str, operation: str, **kwargs: Any) -> requests.Response:
        """
        Issue a request and translate failures.

        Raises:
            AuthenticationError: On HTTP 401/403
            NotFoundError: On HTTP 404
            TourAPIError: On any other HTTP error or transport failure
        """
        url = self._url(path)
        kwargs.setdefault("timeout", self.timeout)
        sender = getattr(self.session, method.lower())

        try:
            response = sender(url, **kwargs)
        except requests.RequestException as e:
            logger.error(
                "Request failed before a response was received",
                operation=operation,
                context={"url": url, "method": method.upper()},
                error=str(e),
            )
            raise TourAPIError(operation=operation, message=str(e)) from e

        try:
            response.raise_for_status()
        except requests.HTTPError as http_err:
            failed = getattr(http_err, "response", None)
            if failed is None:
                failed = response
            error = error_from_response(failed, operation, self._server_message(failed))
            logger.error(
                "Service returned an error status",
                operation=operation,
                context={"url": url, "status": error.status_code or "unknown"},
                error=str(http_err),
            )
            raise error from http_err

        return response

    @staticmethod
    def _server_message(response: Any) -> Optional[str]:
        """Pull the ``message`` field out of an error body, if there is one."""
        try:
            body = response.json()
        except Exception:  # noqa: BLE001
            return None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return None

    @staticmethod
    def _json(response: requests.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TourAPIError(
                operation=operation,
                status_code=getattr(response, "status_code", None),
                message=f"Invalid JSON from {operation}: {e}",
            ) from e
