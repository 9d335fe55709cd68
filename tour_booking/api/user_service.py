"""
User/booking service client.

Handles credential checks and the per-user booking listing.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from tour_booking.utils.logger import get_logger, mask_email
from .client import BaseServiceClient, DEFAULT_TIMEOUT
from .exceptions import TourAPIError, error_from_response

logger = get_logger(__name__)


@dataclass
class SignInResponse:
    """Body of a successful ``POST /users/signin``."""

    jwt: str
    user_id: str
    role: Optional[str]


class UserServiceClient(BaseServiceClient):
    """Client for the user/booking service (``/users``, ``/v2/bookings``)."""

    DEFAULT_BASE_URL = "http://127.0.0.1:8443"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        super().__init__(base_url, session=session, timeout=timeout)

    def sign_in(self, email: str, password: str) -> SignInResponse:
        """
        Check credentials against ``POST /users/signin``.

        Only HTTP 200 counts as success; any other status raises with the
        server's ``message`` attached.

        Raises:
            AuthenticationError: On 401/403
            TourAPIError: On any other non-200 status, transport failure,
                or malformed body
        """
        operation = "sign_in"
        url = self._url("/users/signin")
        logger.debug(
            "Signing in",
            operation=operation,
            context={"email_masked": mask_email(email)},
        )

        try:
            response = self.session.post(
                url,
                json={"email": email, "password": password},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TourAPIError(operation=operation, message=str(e)) from e

        if response.status_code != 200:
            raise error_from_response(response, operation, self._server_message(response))

        body = self._json(response, operation)
        try:
            role = body.get("role")
            return SignInResponse(
                jwt=str(body["jwt"]),
                user_id=str(body["userId"]),
                role=str(role) if role is not None else None,
            )
        except (AttributeError, KeyError, TypeError) as e:
            raise TourAPIError(
                operation=operation,
                status_code=response.status_code,
                message=f"Sign-in response missing field: {e}",
            ) from e

    def get_user_bookings(self, user_id: str, token: str) -> List[Dict[str, Any]]:
        """
        List raw booking rows for a user via ``GET /v2/bookings/user/{userId}``.

        Returns:
            The ``rows`` array of the response, in server order
        """
        operation = "get_user_bookings"
        response = self._send(
            "GET",
            f"/v2/bookings/user/{user_id}",
            operation,
            headers=self._auth_headers(token),
        )
        body = self._json(response, operation)
        rows = body.get("rows") if isinstance(body, dict) else None
        if rows is None:
            rows = []
        if not isinstance(rows, list):
            raise TourAPIError(
                operation=operation,
                status_code=response.status_code,
                message="Bookings response 'rows' is not a list",
            )

        logger.debug(
            f"Retrieved {len(rows)} booking rows",
            operation=operation,
            context={"user_id": user_id},
        )
        return rows
