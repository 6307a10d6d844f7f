"""Exception types raised by the storefront services.

Each carries the HTTP status the API layer answers with, so services can
raise without knowing about FastAPI.
"""

from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """Base exception for storefront errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class ValidationError(StorefrontError):
    """Raised when a request is missing required fields or references bad data."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=400, details=details)


class NotFoundError(StorefrontError):
    """Raised when no row matches the requested id."""

    def __init__(self, resource: str, resource_id: Any = None, message: Optional[str] = None):
        super().__init__(
            message=message or f"{resource} not found",
            status_code=404,
            details={"resource": resource, "id": resource_id},
        )


class StoreError(StorefrontError):
    """Raised when the database fails: lost connection, constraint or query errors."""

    def __init__(self, operation: str, error: Exception):
        message = f"{operation} failed: {error}"
        super().__init__(
            message=message,
            status_code=500,
            details={
                "operation": operation,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )

