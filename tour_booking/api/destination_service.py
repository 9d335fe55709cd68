"""
Destination-lookup service client.

Resolves booked state ids into destination records and removes bookings.
"""

from typing import Any, Optional

import requests

from tour_booking.domain.tour import Destination
from tour_booking.utils.logger import get_logger
from .client import BaseServiceClient, DEFAULT_TIMEOUT
from .exceptions import TourAPIError

logger = get_logger(__name__)


class DestinationServiceClient(BaseServiceClient):
    """Client for the destination service (``/get``, ``/removeBooking``)."""

    DEFAULT_BASE_URL = "http://127.0.0.1:3000"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        super().__init__(base_url, session=session, timeout=timeout)

    def get_destination(self, state_id: Any) -> Destination:
        """
        Fetch one destination record via ``GET /get/{stateId}``.

        Raises:
            TourAPIError: On HTTP/transport failure or when ``data`` is absent
        """
        operation = "get_destination"
        response = self._send("GET", f"/get/{state_id}", operation)
        body = self._json(response, operation)

        if not isinstance(body, dict) or "data" not in body:
            raise TourAPIError(
                operation=operation,
                status_code=response.status_code,
                message=f"Destination response for state {state_id} has no 'data'",
            )

        return Destination.from_dict(body["data"])

    def remove_booking(self, booking_id: Any) -> Any:
        """
        Delete a booking via ``POST /removeBooking/{id}``.

        Returns:
            Parsed JSON body, or None when the service answered without JSON
        """
        operation = "remove_booking"
        response = self._send("POST", f"/removeBooking/{booking_id}", operation)
        try:
            return response.json()
        except ValueError:
            logger.debug(
                "removeBooking returned a non-JSON body",
                operation=operation,
                context={"booking_id": booking_id},
            )
            return None
