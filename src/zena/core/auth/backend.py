"""Authentication backend for JWT and password handling.

This module provides core authentication utilities including:
- Password hashing with bcrypt
- Signing and verifying session tokens

Expiry is checked against an explicit ``now`` rather than the wall clock
inside python-jose, so callers (and tests) control time.
"""

import secrets
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any
from uuid import UUID

from jose import jwt
from jose.exceptions import JOSEError
from passlib.context import CryptContext

from zena.config import settings
from zena.core.auth.schemas import IssuedToken, TokenClaims
from zena.core.constants import ACCESS_TOKEN_JTI_LENGTH
from zena.core.database.base import utcnow
from zena.core.errors import ExpiredTokenError, InvalidSignatureError, MalformedTokenError


TOKEN_TYPE_ACCESS = "access"
REQUIRED_CLAIMS = ("sub", "iat", "exp", "jti", "auth_time")


# ============================================================
# Password Utilities
# ============================================================


@lru_cache(maxsize=1)
def get_password_context() -> CryptContext:
    """Bcrypt context built from the configured cost factor."""
    return CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
        bcrypt__rounds=settings.bcrypt_rounds,
    )


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash of the password
    """
    return get_password_context().hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Bcrypt hash to verify against

    Returns:
        True if password matches, False otherwise
    """
    return get_password_context().verify(plain_password, hashed_password)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return get_password_context().hash(secrets.token_urlsafe(16))


def burn_password_check(plain_password: str) -> None:
    """Spend the cost of one password check without a real hash.

    Used for unknown identities so that response time does not reveal
    whether an account exists.
    """
    get_password_context().verify(plain_password, _dummy_hash())


# ============================================================
# JWT Token Utilities
# ============================================================


def _timestamp(moment: datetime) -> int:
    return int(moment.timestamp())


def _from_timestamp(value: Any) -> datetime:
    if not isinstance(value, int | float) or isinstance(value, bool):
        raise MalformedTokenError()
    return datetime.fromtimestamp(value, tz=UTC)


def create_access_token(
    user_id: UUID,
    tenant_id: UUID | None,
    *,
    token_version: int = 0,
    auth_time: datetime | None = None,
    now: datetime | None = None,
    expires_delta: timedelta | None = None,
) -> IssuedToken:
    """Create a signed access token.

    Args:
        user_id: The subject's UUID
        tenant_id: The subject's tenant, None for system-global subjects
        token_version: Current token version of the subject
        auth_time: Time of the original login, defaults to ``now``
        now: Issue time, defaults to the current time
        expires_delta: Lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        The encoded token with its claims
    """
    issued_at = (now or utcnow()).replace(microsecond=0)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = TokenClaims(
        user_id=user_id,
        tenant_id=tenant_id,
        jti=secrets.token_urlsafe(ACCESS_TOKEN_JTI_LENGTH),
        issued_at=issued_at,
        expires_at=issued_at + lifetime,
        auth_time=(auth_time or issued_at).replace(microsecond=0),
        version=token_version,
    )

    to_encode: dict[str, Any] = {
        "sub": str(claims.user_id),
        "tenant_id": str(claims.tenant_id) if claims.tenant_id else None,
        "iat": _timestamp(claims.issued_at),
        "exp": _timestamp(claims.expires_at),
        "auth_time": _timestamp(claims.auth_time),
        "jti": claims.jti,
        "ver": claims.version,
        "type": TOKEN_TYPE_ACCESS,
    }

    token = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return IssuedToken(token=token, claims=claims)


def read_unverified_claims(token: str) -> TokenClaims:
    """Parse token claims without checking the signature or expiry.

    Raises:
        MalformedTokenError: If the token is not a structurally valid session token
    """
    if not isinstance(token, str) or token.count(".") != 2:
        raise MalformedTokenError()
    try:
        payload = jwt.get_unverified_claims(token)
    except JOSEError as exc:
        raise MalformedTokenError() from exc

    if any(payload.get(name) is None for name in REQUIRED_CLAIMS):
        raise MalformedTokenError()
    if payload.get("type", TOKEN_TYPE_ACCESS) != TOKEN_TYPE_ACCESS:
        raise MalformedTokenError()

    try:
        tenant_id = payload.get("tenant_id")
        return TokenClaims(
            user_id=UUID(str(payload["sub"])),
            tenant_id=UUID(str(tenant_id)) if tenant_id else None,
            jti=str(payload["jti"]),
            issued_at=_from_timestamp(payload["iat"]),
            expires_at=_from_timestamp(payload["exp"]),
            auth_time=_from_timestamp(payload["auth_time"]),
            version=int(payload.get("ver", 0)),
        )
    except (ValueError, TypeError) as exc:
        raise MalformedTokenError() from exc


def decode_token(token: str, now: datetime | None = None) -> TokenClaims:
    """Verify a token's structure, signature and expiry.

    Args:
        token: The encoded token
        now: Reference time for the expiry check

    Returns:
        The verified claims

    Raises:
        MalformedTokenError: If the token cannot be parsed
        InvalidSignatureError: If the signature does not verify
        ExpiredTokenError: If the token has expired
    """
    claims = read_unverified_claims(token)

    try:
        jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_exp": False, "verify_iat": False, "verify_nbf": False},
        )
    except JOSEError as exc:
        raise InvalidSignatureError() from exc

    if (now or utcnow()) >= claims.expires_at:
        raise ExpiredTokenError()

    return claims
