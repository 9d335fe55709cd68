"""
Unit tests for the domain models.
"""

from datetime import datetime, timedelta, timezone

from tour_booking.domain.result import ApiResponse, OperationResult
from tour_booking.domain.session import Role, Session, StoredSession
from tour_booking.domain.tour import Destination, Tour


class TestRole:
    """Role parsing."""

    def test_parse(self):
        assert Role.parse("ADMIN") is Role.ADMIN
        assert Role.parse("admin") is Role.ADMIN
        assert Role.parse("USER") is Role.USER
        assert Role.parse("GUIDE") is Role.USER
        assert Role.parse(None) is Role.USER

    def test_parse_non_string(self):
        assert Role.parse(1) is Role.USER
        assert Role.parse(["ADMIN"]) is Role.USER


class TestSession:
    """In-memory session helpers."""

    def test_is_admin(self):
        assert Session("1", Role.ADMIN).is_admin
        assert not Session("2", Role.USER).is_admin

    def test_to_dict(self):
        assert Session("1", Role.ADMIN).to_dict() == {"userId": "1", "role": "ADMIN"}


class TestStoredSession:
    """Persisted session expiry."""

    def test_issue_sets_expiry(self):
        stored = StoredSession.issue("1", "tok", ttl_seconds=60)

        assert not stored.is_expired()
        assert stored.is_expired(now=datetime.now(timezone.utc) + timedelta(seconds=61))

    def test_no_expiry_never_expires(self):
        assert not StoredSession("1", "tok", expires_at=None).is_expired()


class TestTour:
    """Wire conversion of tours and destinations."""

    def test_from_dict(self):
        tour = Tour.from_dict(
            {
                "tourId": 5,
                "title": "Alpine Week",
                "imageLink": "https://img/alps.jpg",
                "startDate": "2024-07-01",
                "destinations": [
                    {
                        "destName": "Zermatt",
                        "state": "VS",
                        "accommodation": {"name": "Hotel Matterhorn", "checkIn": "15:00"},
                        "rating": 5,
                    }
                ],
            }
        )

        assert tour.tour_id == 5
        assert tour.image_link == "https://img/alps.jpg"
        destination = tour.destinations[0]
        assert destination.dest_name == "Zermatt"
        assert destination.accommodation.check_in == "15:00"
        assert destination.extra_fields == {"rating": 5}

    def test_to_dict_omits_missing_id(self):
        payload = Tour(title="New tour").to_dict()

        assert "tourId" not in payload
        assert payload["title"] == "New tour"
        assert payload["destinations"] == []

    def test_destination_keeps_unknown_keys(self):
        payload = Destination.from_dict({"destName": "Kyoto", "season": "spring"}).to_dict()

        assert payload["season"] == "spring"
        assert payload["destName"] == "Kyoto"


class TestOperationResult:
    """Result contract helpers."""

    def test_ok(self):
        result = OperationResult.ok([1, 2], source="cache")

        assert result
        assert result.data == [1, 2]
        assert result.details == {"source": "cache"}

    def test_fail(self):
        result = OperationResult.fail("nope", "http_error", status_code=500)

        assert not result
        assert result.message == "nope"
        assert result.error_code == "http_error"
        assert result.details["status_code"] == 500

    def test_api_response_from_dict(self):
        response = ApiResponse.from_dict({"status": "OK", "message": "Tour added"})

        assert response.status == "OK"
        assert response.message == "Tour added"
