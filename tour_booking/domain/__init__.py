"""Domain models - sessions, tours, and operation results."""

from .result import ApiResponse, OperationResult
from .session import Role, Session, StoredSession
from .tour import Accommodation, Destination, Tour

__all__ = [
    "Accommodation",
    "ApiResponse",
    "Destination",
    "OperationResult",
    "Role",
    "Session",
    "StoredSession",
    "Tour",
]
