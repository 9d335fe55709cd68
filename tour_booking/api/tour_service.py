"""
Tour catalogue client.

CRUD over tour packages hosted by the user service. Backs the update and
delete actions wired into the tour card.
"""

from typing import Any, List, Optional
from urllib.parse import quote

import requests

from tour_booking.domain.result import ApiResponse
from tour_booking.domain.tour import Tour
from tour_booking.utils.logger import get_logger, log_operation
from .client import BaseServiceClient, DEFAULT_TIMEOUT
from .exceptions import TourAPIError
from .user_service import UserServiceClient

logger = get_logger(__name__)

# ApiResponse statuses the tour endpoints use for a completed write
SUCCESS_STATUSES = {"OK", "CREATED"}


class TourServiceClient(BaseServiceClient):
    """
    Client for ``/tours`` endpoints.

    A bearer token is optional for reads and required by the server for
    writes; pass it at construction or per call.
    """

    def __init__(
        self,
        base_url: str = UserServiceClient.DEFAULT_BASE_URL,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        super().__init__(base_url, session=session, timeout=timeout)
        self.token = token

    def _headers(self, token: Optional[str]) -> dict:
        return self._auth_headers(token or self.token)

    def _parse_tours(self, body: Any, operation: str) -> List[Tour]:
        if not isinstance(body, list):
            raise TourAPIError(operation=operation, message="Expected a list of tours")
        return [Tour.from_dict(item) for item in body if item is not None]

    def _api_response(self, response: requests.Response, operation: str) -> ApiResponse:
        """
        Parse a write response and check its ``status`` field.

        The service can report a rejected write (e.g. a duplicate tour) in the
        body under a 2xx HTTP code; that is raised like an HTTP error.
        """
        result = ApiResponse.from_dict(self._json(response, operation))
        if result.status is not None and result.status.upper() not in SUCCESS_STATUSES:
            logger.error(
                "Service rejected the request",
                operation=operation,
                context={"status": result.status},
                error=result.message,
            )
            raise TourAPIError(
                operation=operation,
                status_code=getattr(response, "status_code", None),
                message=result.message or f"{operation} rejected with status {result.status}",
            )
        return result

    @log_operation("list_tours")
    def list_tours(self, token: Optional[str] = None) -> List[Tour]:
        """Return every tour with its destinations."""
        response = self._send("GET", "/tours", "list_tours", headers=self._headers(token))
        return self._parse_tours(self._json(response, "list_tours"), "list_tours")

    def get_tour(self, tour_id: Any, token: Optional[str] = None) -> Tour:
        """
        Fetch one tour including accommodation details.

        Raises:
            NotFoundError: If no tour has this id
        """
        response = self._send("GET", f"/tours/{tour_id}", "get_tour", headers=self._headers(token))
        tour = Tour.from_dict(self._json(response, "get_tour"))
        if tour.tour_id is None:
            tour.tour_id = tour_id
        return tour

    def find_tours_by_title(self, title: str, token: Optional[str] = None) -> List[Tour]:
        """
        Return tours whose title matches exactly.

        Raises:
            NotFoundError: When the server finds no tour with this title
        """
        path = f"/tours/title/{quote(title, safe='')}"
        response = self._send("GET", path, "find_tours_by_title", headers=self._headers(token))
        return self._parse_tours(
            self._json(response, "find_tours_by_title"), "find_tours_by_title"
        )

    @log_operation("add_tour")
    def add_tour(self, tour: Tour, token: Optional[str] = None) -> ApiResponse:
        """
        Create a tour package.

        A tour with the same title and start date is rejected with a
        ``BAD_REQUEST`` status, either as the HTTP code or in the body;
        both surface as TourAPIError.
        """
        response = self._send(
            "POST", "/tours", "add_tour", json=tour.to_dict(), headers=self._headers(token)
        )
        return self._api_response(response, "add_tour")

    @log_operation("update_tour")
    def update_tour(self, tour_id: Any, tour: Tour, token: Optional[str] = None) -> ApiResponse:
        """Replace the fields and destinations of an existing tour."""
        response = self._send(
            "PUT",
            f"/tours/{tour_id}",
            "update_tour",
            json=tour.to_dict(),
            headers=self._headers(token),
        )
        return self._api_response(response, "update_tour")

    @log_operation("delete_tour")
    def delete_tour(self, tour_id: Any, token: Optional[str] = None) -> ApiResponse:
        response = self._send(
            "DELETE", f"/tours/{tour_id}", "delete_tour", headers=self._headers(token)
        )
        return self._api_response(response, "delete_tour")
