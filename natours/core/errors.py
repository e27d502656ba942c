"""Operational error hierarchy.

Every error a handler raises on purpose is an ``AppError``. Its message is
safe to show to the client and its status code is deliberate. Anything else
reaching the error handlers is treated as a programming error.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """Base operational error with an HTTP status code."""

    status_code = 500
    is_operational = True

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def status(self) -> str:
        """``fail`` for client errors, ``error`` for server errors."""
        return "fail" if 400 <= self.status_code < 500 else "error"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for API responses."""
        return {"status": self.status, "message": self.message}


class BadRequestError(AppError):
    """Raised when the request is malformed (missing params, bad ids)."""

    status_code = 400


class ValidationError(AppError):
    """Raised when input fails a domain rule."""

    status_code = 400


class AuthenticationError(AppError):
    """Raised when the caller is not (or no longer) authenticated."""

    status_code = 401

    def __init__(self, message: str = "You are not logged in! Please log in to get access."):
        super().__init__(message)


class AuthorizationError(AppError):
    """Raised when the user lacks permission for an operation."""

    status_code = 403

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message)


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"No {resource} found with that ID")
        self.resource = resource


class PayloadTooLargeError(AppError):
    """Raised when the request body exceeds the configured cap."""

    status_code = 413


class RateLimitError(AppError):
    """Raised when a client exceeds its request budget."""

    status_code = 429

    def __init__(
        self,
        message: str = "Too many requests from this IP, please try again in an hour!",
        retry_after: Optional[int] = None,
    ):
        super().__init__(message)
        self.retry_after = retry_after
