"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- A fixed HTTP status per error class

Exception Hierarchy:
    BaseApplicationError (base, 500)
    ├── ValidationError - Input validation failures (400)
    ├── AuthenticationError - Bad credentials, bad or expired tokens (401)
    ├── PermissionDeniedError - Authorization failures (403)
    ├── NotFoundError - Resource not found (404)
    ├── ConflictError - State conflicts such as duplicates (409)
    └── ExternalServiceError - Third-party service failures (502)

Usage:
    from core.exceptions import AuthenticationError, ConflictError

    raise ConflictError("Email already exists", error_code="EMAIL_EXISTS")

    raise AuthenticationError(
        "Account suspended. Please contact support.",
        error_code="ACCOUNT_SUSPENDED",
    )

Note:
    core.exception_handler.api_exception_handler turns these into
    ``{"error": ..., "code": ...}`` responses with ``status_code``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
        status_code: HTTP status the API layer responds with

    Example:
        try:
            user = AuthService.login(email, password)
        except AuthenticationError as e:
            logger.info(f"Login rejected: {e.error_code}")
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dict with error, code, and (when present) details keys

        Example:
            {
                "error": "Account not verified",
                "code": "ACCOUNT_PENDING"
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails in the service layer.

    Use for:
    - Weak passwords
    - Invalid or expired single-use tokens
    - Values outside an allowed set (roles)

    Note:
        Request shape validation is done by DRF serializers. Use this for
        rules checked inside services.
    """

    default_error_code: str = "VALIDATION_ERROR"
    status_code: int = 400


class AuthenticationError(BaseApplicationError):
    """
    Raised when the caller cannot be authenticated.

    Use for:
    - Wrong email/password combinations
    - Accounts that are not active (pending, suspended)
    - Missing, unknown or expired refresh tokens
    - Tampered or expired access tokens

    Example:
        raise AuthenticationError(
            "Account not verified. Please check your email for verification link.",
            error_code="ACCOUNT_PENDING",
        )
    """

    default_error_code: str = "UNAUTHORIZED"
    status_code: int = 401


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Example:
        user = User.objects.filter(id=user_id).first()
        if not user:
            raise NotFoundError(
                f"User with ID {user_id} not found",
                error_code="USER_NOT_FOUND",
                details={"user_id": user_id}
            )
    """

    default_error_code: str = "NOT_FOUND"
    status_code: int = 404


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when an authenticated user lacks permission for an operation.

    Use for:
    - Role-based access control violations
    - Acting on another user's resources

    Note:
        For authentication failures (missing/invalid token), use
        AuthenticationError. Use this for authorization failures.
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = 403


class ConflictError(BaseApplicationError):
    """
    Raised when operation conflicts with current resource state.

    Use for:
    - Duplicate entries (unique constraint violations)
    - Invalid state transitions

    Example:
        try:
            User.objects.create_user(email=email, password=password)
        except IntegrityError:
            raise ConflictError("Email already exists", error_code="EMAIL_EXISTS")
    """

    default_error_code: str = "CONFLICT"
    status_code: int = 409


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Use for:
    - OAuth provider token exchange failures
    - Provider userinfo endpoint failures
    - Network timeouts

    Example:
        try:
            response = client.post(token_url, data=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                "Google token exchange failed",
                error_code="google_token_error",
                details={"provider": "google"},
            ) from e

    Note:
        Log the original error for debugging but don't expose
        internal details to clients.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
    status_code: int = 502
