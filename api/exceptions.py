"""Standard exception classes for Unlingo.

All domain errors inherit from UnlingoException and include:
- message: Human-readable error message shown directly to the user
- error_code: Machine-readable error code (e.g., "NOT_FOUND")
- details: Optional dictionary with additional context

Services raise these; the HTTP layer renders them (see error_handlers).
"""

from typing import Any, Optional


class UnlingoException(Exception):
    """Base exception for all Unlingo errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for client handling
        details: Optional dictionary with additional error context
        status_code: HTTP status code (set by subclasses)
    """

    status_code: int = 500
    default_error_code: str = "INTERNAL_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result = {
            "code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class AuthenticationError(UnlingoException):
    """No caller identity present, or the token is invalid (HTTP 401)."""

    status_code = 401
    default_error_code = "UNAUTHENTICATED"
    default_message = "Not authenticated"


class AccessDeniedError(UnlingoException):
    """Identity present but an ownership-chain check failed.

    Rendered exactly like a missing record (HTTP 404, NOT_FOUND) so the
    response does not reveal whether the record exists in another tenant.
    """

    status_code = 404
    default_error_code = "NOT_FOUND"
    default_message = "Not found or access denied"


class NotFoundError(UnlingoException):
    """Referenced record does not exist (HTTP 404)."""

    status_code = 404
    default_error_code = "NOT_FOUND"
    default_message = "Not found or access denied"


class ValidationError(UnlingoException):
    """Format, length or pattern violation (HTTP 400)."""

    status_code = 400
    default_error_code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class InvalidReferenceError(ValidationError):
    """A referenced record is outside the expected parent scope (HTTP 400).

    Raised by release manifests and key mappings whose identifiers do not
    form a valid chain.
    """

    default_error_code = "INVALID_REFERENCE"
    default_message = "Invalid reference"


class DuplicateError(UnlingoException):
    """Scoped uniqueness constraint violated (HTTP 409)."""

    status_code = 409
    default_error_code = "DUPLICATE"
    default_message = "Resource already exists"


class LimitReachedError(UnlingoException):
    """Usage counter at or above the plan limit (HTTP 403)."""

    status_code = 403
    default_error_code = "LIMIT_REACHED"
    default_message = "Plan limit reached. Please upgrade your plan."

    def __init__(
        self,
        message: Optional[str] = None,
        resource_type: Optional[str] = None,
        limit: Optional[int] = None,
        current: Optional[int] = None,
    ):
        details = {}
        if resource_type is not None:
            details = {"resource_type": resource_type, "limit": limit, "current": current}
        super().__init__(message, details=details)
        self.resource_type = resource_type
        self.limit = limit
        self.current = current
