"""API module - HTTP clients for the user, destination and tour services."""

from .destination_service import DestinationServiceClient
from .enrichment import BookingEnricher, EnrichmentError, EnrichmentFailure, FailurePolicy
from .exceptions import AuthenticationError, NotFoundError, TourAPIError
from .tour_service import TourServiceClient
from .user_service import SignInResponse, UserServiceClient

__all__ = [
    "AuthenticationError",
    "BookingEnricher",
    "DestinationServiceClient",
    "EnrichmentError",
    "EnrichmentFailure",
    "FailurePolicy",
    "NotFoundError",
    "SignInResponse",
    "TourAPIError",
    "TourServiceClient",
    "UserServiceClient",
]
