"""
Result contract shared by every auth provider operation.

Operations never raise to their callers; they return an OperationResult
that is either a success carrying data or a failure carrying a message.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class OperationResult:
    """
    Outcome of a provider operation.

    Attributes:
        success: True when the operation completed
        data: Operation payload on success
        message: Human-readable failure reason
        error_code: Machine-readable failure category
            ("not_authenticated", "http_error", "network_error", ...)
    """

    success: bool
    data: Any = None
    message: Optional[str] = None
    error_code: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any = None, **details: Any) -> "OperationResult":
        return cls(success=True, data=data, details=details)

    @classmethod
    def fail(
        cls, message: Optional[str], error_code: str = "error", **details: Any
    ) -> "OperationResult":
        return cls(success=False, message=message, error_code=error_code, details=details)

    def __bool__(self) -> bool:
        return self.success


@dataclass
class ApiResponse:
    """``{status, message}`` body returned by the tour write endpoints."""

    status: Optional[str]
    message: Optional[str]

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ApiResponse":
        data = data or {}
        status = data.get("status")
        return cls(status=str(status) if status is not None else None, message=data.get("message"))
