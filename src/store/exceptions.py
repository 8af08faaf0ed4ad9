"""
Record Proxy Custom Exceptions

Remote store faults are returned as values (see src.store.results); the
exceptions here cover request-level problems raised inside the routers and
rendered by the apps' exception handlers.
"""

from typing import Optional


class ProxyException(Exception):
    """
    Base exception class for all request-level errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        """
        Initialize ProxyException.

        Args:
            message: Human-readable error message
            status_code: HTTP status code to return
            details: Additional error details (optional)
            request_id: Request ID associated with this error (optional)
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details
        self.request_id = request_id

    def to_dict(self) -> dict:
        """Convert exception to dict for JSON response."""
        result = {
            "error": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.request_id:
            result["request_id"] = self.request_id
        return result


class AuthenticationRequired(ProxyException):
    """Exception raised when an auth-gated route is called without a bearer token."""

    def __init__(
        self,
        message: str = "Unauthenticated.",
        details: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            status_code=401,
            details=details,
        )


class InvalidRequestBody(ProxyException):
    """Exception raised when the request body is neither a form nor a JSON object."""

    def __init__(
        self,
        message: str = "Request body must be a form or a JSON object",
        details: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            status_code=400,
            details=details,
        )
