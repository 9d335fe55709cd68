"""
Exception hierarchy for session persistence.

Stores translate backend-specific failures (file I/O, DynamoDB) into these
so the auth provider can handle them uniformly.
"""


class SessionStoreError(Exception):
    """
    Base exception for all session store errors.
    """

    pass


class StoreThrottlingError(SessionStoreError):
    """
    Raised when DynamoDB keeps throttling after retry exhaustion.
    """

    pass


class StoreNetworkError(SessionStoreError):
    """
    Raised when the store backend cannot be reached (connection timeout, DNS failure, etc.).
    """

    pass


class StorePermissionError(SessionStoreError):
    """
    Raised when IAM permissions are insufficient for the store operation.
    """

    pass
