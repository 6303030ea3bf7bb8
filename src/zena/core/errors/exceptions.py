"""Domain exceptions for the application.

These exceptions represent business-logic errors and are automatically
converted to RFC 7807 Problem Details responses by the exception handlers.

Authentication and authorization failures carry a deliberately generic
public message. The specific cause is kept on the exception (``reason``)
for structured logs and never rendered to clients.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("Project not found", resource="project")
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when there's a conflict with existing data."""

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class ValidationError(AppException):
    """Raised when request data fails validation."""

    message = "Validation error"
    error_code = "validation_error"
    status_code = 422

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)


class UnauthorizedError(AppException):
    """Raised when authentication is required but not provided or invalid."""

    message = "Authentication required"
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(AppException):
    """Raised when user lacks permission to access a resource."""

    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403


class BadRequestError(AppException):
    """Raised for general client errors."""

    message = "Bad request"
    error_code = "bad_request"
    status_code = 400


class RateLimitError(AppException):
    """Raised when rate limit is exceeded.

    Example:
        raise RateLimitError(
            "Too many requests",
            details={"retry_after": 60}
        )
    """

    message = "Rate limit exceeded"
    error_code = "rate_limit_exceeded"
    status_code = 429


class ServiceUnavailableError(AppException):
    """Raised when a required service is unavailable."""

    message = "Service temporarily unavailable"
    error_code = "service_unavailable"
    status_code = 503


# ============================================================
# Authentication
# ============================================================


class AuthenticationError(UnauthorizedError):
    """Raised when credentials cannot be authenticated.

    Every subclass renders the same public message so that callers
    cannot distinguish an unknown identity from a wrong password or a
    locked account.
    """

    message = "Authentication failed"
    error_code = "authentication_failed"
    reason: str = "authentication_failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message=message)


class InvalidCredentialsError(AuthenticationError):
    """Unknown identity, wrong password or inactive account."""

    reason = "invalid_credentials"


class AccountLockedError(AuthenticationError):
    """Too many failed attempts for this identity."""

    reason = "account_locked"


class TokenError(UnauthorizedError):
    """Raised when a session token cannot be accepted.

    Attributes:
        reason: Internal cause, for logs only
    """

    message = "Unauthenticated"
    error_code = "unauthenticated"
    reason: str = "invalid_token"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message=message)


class MalformedTokenError(TokenError):
    """The token is not a structurally valid session token."""

    reason = "malformed"


class ExpiredTokenError(TokenError):
    """The token's expiry has passed."""

    reason = "expired"


class InvalidSignatureError(TokenError):
    """The token's signature does not verify."""

    reason = "signature_invalid"


class RevokedTokenError(TokenError):
    """The token was revoked, or every token of its subject was."""

    reason = "revoked"


# ============================================================
# Authorization
# ============================================================


class PermissionDeniedError(ForbiddenError):
    """Raised when a policy denies an action.

    The response is identical for a missing entity and an entity owned
    by another tenant.
    """

    message = "Forbidden"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message=message)


class TenantMismatchError(ForbiddenError):
    """Raised when a write targets a tenant other than the caller's.

    Attributes:
        expected: Tenant of the active context
        actual: Tenant the operation tried to touch
    """

    message = "Forbidden"
    error_code = "tenant_mismatch"

    def __init__(self, expected: Any = None, actual: Any = None, entity_type: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        self.entity_type = entity_type
        super().__init__()


# ============================================================
# Audit
# ============================================================


class AuditWriteError(AppException):
    """Raised when an audit record could not be persisted and the
    action is configured as audit-fatal."""

    message = "Audit record could not be written"
    error_code = "audit_write_failed"
    status_code = 500
