"""Identity and token service: credentials, session tokens and request context."""

from zena.core.auth.backend import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from zena.core.auth.dependencies import (
    BearerToken,
    CurrentUser,
    RequestContext,
    get_current_user,
    get_request_context,
)
from zena.core.auth.lockout import LoginLockout, get_login_lockout
from zena.core.auth.middleware import RequestIdMiddleware, TenantContextMiddleware
from zena.core.auth.schemas import IssuedToken, TokenClaims
from zena.core.auth.service import AuthService


__all__ = [
    # Service
    "AuthService",
    "LoginLockout",
    # Dependencies
    "BearerToken",
    "CurrentUser",
    "RequestContext",
    "get_current_user",
    "get_login_lockout",
    "get_request_context",
    # Middleware
    "RequestIdMiddleware",
    "TenantContextMiddleware",
    # Schemas
    "IssuedToken",
    "TokenClaims",
    # Token utilities
    "create_access_token",
    "decode_token",
    # Password utilities
    "hash_password",
    "verify_password",
]
