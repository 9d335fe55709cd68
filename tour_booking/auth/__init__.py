"""Auth module - session provider, session stores and navigation"""

from .dynamodb_store import DynamoDBSessionStore
from .navigation import Navigator
from .provider import AuthProvider
from .session_store import FileSessionStore, MemorySessionStore, SessionStore

__all__ = [
    "AuthProvider",
    "DynamoDBSessionStore",
    "FileSessionStore",
    "MemorySessionStore",
    "Navigator",
    "SessionStore",
]
