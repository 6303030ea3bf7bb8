"""Error handling module with RFC 7807 Problem Details."""

from zena.core.errors.exceptions import (
    AccountLockedError,
    AppException,
    AuditWriteError,
    AuthenticationError,
    BadRequestError,
    ConflictError,
    ExpiredTokenError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidSignatureError,
    MalformedTokenError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    RevokedTokenError,
    ServiceUnavailableError,
    TenantMismatchError,
    TokenError,
    UnauthorizedError,
    ValidationError,
)
from zena.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    "AccountLockedError",
    "AppException",
    "AuditWriteError",
    "AuthenticationError",
    "BadRequestError",
    "ConflictError",
    "ExpiredTokenError",
    "FieldError",
    "ForbiddenError",
    "InvalidCredentialsError",
    "InvalidSignatureError",
    "MalformedTokenError",
    "NotFoundError",
    "PermissionDeniedError",
    "ProblemDetail",
    "RateLimitError",
    "RevokedTokenError",
    "ServiceUnavailableError",
    "TenantMismatchError",
    "TokenError",
    "UnauthorizedError",
    "ValidationError",
    "register_exception_handlers",
]
