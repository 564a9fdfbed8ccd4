"""Custom exceptions for client-side error handling."""

from __future__ import annotations

from typing import Optional, Dict, Any


class HelpdeskClientException(Exception):
    """Base exception for all client errors."""

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for logs and CLI output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "status_code": self.status_code,
            "details": self.details,
        }


# ===== REMOTE API EXCEPTIONS =====


class ApiError(HelpdeskClientException):
    """Raised when the helpdesk API answers with a non-2xx status.

    ``message`` carries the body's ``message`` field when the server sent one,
    otherwise the operation's generic fallback text.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: str = "API_ERROR",
    ):
        super().__init__(message, error_code=error_code, details=details, status_code=status_code)


class AuthenticationError(ApiError):
    """Raised when a protected call is rejected (401/403)."""

    def __init__(self, message: str = "Not authenticated", *, status_code: int = 401):
        super().__init__(message, status_code=status_code, error_code="NOT_AUTHENTICATED")


class NotFoundError(ApiError):
    """Raised when a requested resource does not exist."""

    def __init__(self, message: str = "not_found", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=404, details=details, error_code="NOT_FOUND")


class ApiConnectionError(HelpdeskClientException):
    """Raised when the API cannot be reached after all retries."""

    def __init__(self, message: str = "Failed to connect to the helpdesk API", *, url: Optional[str] = None):
        details = {"url": url} if url else {}
        super().__init__(message, error_code="API_CONNECTION_ERROR", details=details)


class ResponseShapeError(HelpdeskClientException):
    """Raised when a 2xx body does not match the documented contract."""

    def __init__(self, message: str = "Unexpected response from the helpdesk API", *, path: Optional[str] = None):
        details = {"path": path} if path else {}
        super().__init__(message, error_code="BAD_RESPONSE_SHAPE", details=details)


# ===== LOCAL EXCEPTIONS =====


class PreconditionError(HelpdeskClientException):
    """Raised before any network call when a local precondition fails.

    ``level`` is the notice level to show: ``"error"`` for invalid input,
    ``"info"`` for a no-op such as re-assigning to the current assignee.
    """

    def __init__(self, message: str, *, level: str = "error"):
        super().__init__(message, error_code="PRECONDITION_FAILED")
        self.level = level


class InvalidConfigurationError(HelpdeskClientException):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, setting: Optional[str] = None):
        details = {"setting": setting} if setting else {}
        super().__init__(message, error_code="INVALID_CONFIG", details=details)
