"""Custom exception hierarchy for the portfolio CMS."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Auth
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    RATE_LIMITED = "RATE_LIMITED"

    # Input
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Lookup
    NOT_FOUND = "NOT_FOUND"

    # Workflow / integrity
    INVALID_STATE = "INVALID_STATE"
    HAS_CONTENT = "HAS_CONTENT"
    CONFLICT = "CONFLICT"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class PortfolioError(Exception):
    """
    Base exception for all portfolio CMS errors.

    Provides structured error responses with:
    - Human-readable message (safe to show in the admin UI verbatim)
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class AuthenticationError(PortfolioError):
    """Request lacks a valid session."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message,
            ErrorCode.UNAUTHENTICATED,
            status_code=401,
        )


class ForbiddenError(PortfolioError):
    """Authenticated actor lacks ownership, role, or write permission."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
        )


class ValidationError(PortfolioError):
    """Validation failed for user input.

    Length violations carry the limit and the measured length so the admin
    UI can show exactly how far over the ceiling the value is.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        limit: Optional[int] = None,
        length: Optional[int] = None,
    ):
        details: Dict[str, Any] = {}
        if field:
            details["field"] = field
        if limit is not None:
            details["limit"] = limit
        if length is not None:
            details["length"] = length
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class NotFoundError(PortfolioError):
    """Referenced entity (or its parent) does not exist."""

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        details: Dict[str, Any] = {"resource": resource}
        if resource_id is not None:
            details["id"] = resource_id
        super().__init__(
            "Resource not found.",
            ErrorCode.NOT_FOUND,
            status_code=404,
            details=details
        )


class InvalidStateError(PortfolioError):
    """State-machine transition attempted from a state that does not permit it."""

    def __init__(self, message: str, expected: Any = None, actual: Optional[str] = None):
        details: Dict[str, Any] = {}
        if expected is not None:
            details["expected"] = expected
        if actual is not None:
            details["actual"] = actual
        super().__init__(
            message,
            ErrorCode.INVALID_STATE,
            status_code=409,
            details=details
        )


class HasContentError(PortfolioError):
    """Platform menu cannot be deleted while content rows reference it."""

    def __init__(self, menu_id: str, content_counts: Optional[Dict[str, int]] = None):
        super().__init__(
            "Cannot delete: this menu has section content. Remove or reassign the content first.",
            ErrorCode.HAS_CONTENT,
            status_code=409,
            details={"menu_id": menu_id, "content": content_counts or {}}
        )


class ConflictError(PortfolioError):
    """Uniqueness violation (duplicate slug, menu key, email)."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.CONFLICT,
            status_code=409,
            details=details
        )


class DatabaseError(PortfolioError):
    """Database operation failed."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            status_code=500,
        )
