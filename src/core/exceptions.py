"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"

    # Not found errors (404)
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    ROLE_REQUEST_NOT_FOUND = "ROLE_REQUEST_NOT_FOUND"
    NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ROLE = "INVALID_ROLE"

    # Conflict errors (409)
    DUPLICATE_ROLE_REQUEST = "DUPLICATE_ROLE_REQUEST"
    ROLE_REQUEST_NOT_PENDING = "ROLE_REQUEST_NOT_PENDING"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    PROFILE_CREATION_FAILED = "PROFILE_CREATION_FAILED"
    ROLE_REVIEW_FAILED = "ROLE_REVIEW_FAILED"

    # Upstream errors (502)
    AUTH_PROVIDER_ERROR = "AUTH_PROVIDER_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Not authenticated",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authenticated, but the caller's role does not permit the action."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class InvalidRoleError(AppException):
    """Requested role is not one a user may ask for."""

    def __init__(self, role: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_ROLE,
            message="Invalid role",
            status_code=400,
            details={"role": role},
        )


class DuplicateRoleRequestError(AppException):
    """The user already has a pending role request."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_ROLE_REQUEST,
            message="You already have a pending role request",
            status_code=409,
        )


class RoleRequestNotFoundError(AppException):
    """Role request not found."""

    def __init__(self, request_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ROLE_REQUEST_NOT_FOUND,
            message="Request not found",
            status_code=404,
            details={"request_id": request_id},
        )


class RoleRequestNotPendingError(AppException):
    """Role request was already approved or rejected."""

    def __init__(self, request_id: str, status: str) -> None:
        super().__init__(
            error_code=ErrorCode.ROLE_REQUEST_NOT_PENDING,
            message=f"Role request has already been {status}",
            status_code=409,
            details={"request_id": request_id, "status": status},
        )


class ProfileNotFoundError(AppException):
    """Profile not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message="Profile not found",
            status_code=404,
            details={"user_id": user_id},
        )


class ProfileCreationError(AppException):
    """The profile row could not be created for a reason other than a race."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_CREATION_FAILED,
            message="Failed to create profile",
            status_code=500,
        )


class RoleReviewError(AppException):
    """A storage step of approve/reject failed; nothing was applied."""

    def __init__(self, message: str, request_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ROLE_REVIEW_FAILED,
            message=message,
            status_code=500,
            details={"request_id": request_id},
        )


class NotificationNotFoundError(AppException):
    """Notification not found (or not owned by the caller)."""

    def __init__(self, notification_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOTIFICATION_NOT_FOUND,
            message=f"Notification not found: {notification_id}",
            status_code=404,
            details={"notification_id": notification_id},
        )


class AuthProviderError(AppException):
    """The hosted auth provider rejected or failed a call."""

    def __init__(self, message: str = "Authentication provider error") -> None:
        super().__init__(
            error_code=ErrorCode.AUTH_PROVIDER_ERROR,
            message=message,
            status_code=502,
        )


class GateRedirect(Exception):
    """Raised by page guards; rendered as a redirect, not an error body."""

    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(location)
