"""Identity and token service.

Authenticates credentials, issues session tokens and enforces their
lifecycle: expiry, refresh, single-token revocation and revoke-all.
Every failure surfaces as a generic error; the precise reason only
reaches the logs.
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Annotated, NoReturn
from uuid import UUID

import structlog
from fastapi import Depends

from zena.config import settings
from zena.core.auth.backend import (
    burn_password_check,
    create_access_token,
    decode_token,
    verify_password,
)
from zena.core.auth.lockout import LoginLockout, get_login_lockout
from zena.core.auth.schemas import IssuedToken, TokenClaims
from zena.core.database.base import utcnow
from zena.core.database.session import DBSession
from zena.core.errors import (
    AccountLockedError,
    ExpiredTokenError,
    InvalidCredentialsError,
    RevokedTokenError,
    TokenError,
)
from zena.modules.tenants.models import Tenant
from zena.modules.users.models import User
from zena.modules.users.repos import RevokedTokenRepository, UserRepository


logger = structlog.get_logger()


class AuthService:
    """Service for authentication and token lifecycle operations."""

    def __init__(
        self,
        db: DBSession,
        lockout: Annotated[LoginLockout, Depends(get_login_lockout)],
    ) -> None:
        self.db = db
        self.lockout = lockout
        self.user_repo = UserRepository(db)
        self.revoked_repo = RevokedTokenRepository(db)
        self.clock: Callable[[], datetime] = utcnow

    # ============================================================
    # Credentials
    # ============================================================

    async def authenticate(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
    ) -> User:
        """Verify credentials and return the subject.

        Args:
            email: Login identity
            password: Plain text password
            ip_address: Client IP, for logs

        Returns:
            The authenticated user

        Raises:
            AccountLockedError: If the identity is locked out
            InvalidCredentialsError: If the identity is unknown, the password
                is wrong, or the account or its tenant is disabled
        """
        if await self.lockout.is_locked(email):
            logger.warning("authentication_failed", reason="account_locked", ip_address=ip_address)
            raise AccountLockedError()

        user = await self.user_repo.get_by_email(email)
        if user is None:
            burn_password_check(password)
            await self._fail(email, "unknown_identity", ip_address)

        if not verify_password(password, user.password_hash):
            await self._fail(email, "bad_password", ip_address, user.id)
        if not user.is_active or not await self._tenant_active(user):
            await self._fail(email, "inactive", ip_address, user.id)

        await self.lockout.clear(email)
        user.last_login_at = self.clock()
        logger.info(
            "authentication_succeeded",
            user_id=str(user.id),
            tenant_id=str(user.tenant_id) if user.tenant_id else None,
            ip_address=ip_address,
        )
        return user

    async def _tenant_active(self, user: User) -> bool:
        if user.tenant_id is None:
            return True
        tenant = await self.db.get(Tenant, user.tenant_id)
        return tenant is not None and tenant.is_active

    async def _fail(
        self,
        email: str,
        reason: str,
        ip_address: str | None,
        user_id: UUID | None = None,
    ) -> NoReturn:
        locked = await self.lockout.record_failure(email)
        logger.info(
            "authentication_failed",
            reason=reason,
            user_id=str(user_id) if user_id else None,
            ip_address=ip_address,
        )
        if locked:
            raise AccountLockedError()
        raise InvalidCredentialsError()

    # ============================================================
    # Tokens
    # ============================================================

    def issue_token(self, user: User, *, auth_time: datetime | None = None) -> IssuedToken:
        """Issue a session token for a subject.

        Args:
            user: The subject
            auth_time: Original login time when continuing a session

        Returns:
            The signed token and its claims
        """
        return create_access_token(
            user.id,
            user.tenant_id,
            token_version=user.token_version,
            auth_time=auth_time,
            now=self.clock(),
        )

    async def validate_token(self, token: str) -> TokenClaims:
        """Validate a token end to end.

        Checks structure, signature and expiry, then the revoked list and
        the subject's token version.

        Raises:
            TokenError: Any subclass, if the token is not acceptable
        """
        claims = decode_token(token, now=self.clock())

        if await self.revoked_repo.is_revoked(claims.jti):
            raise RevokedTokenError()

        user = await self.user_repo.get_by_id(claims.user_id)
        if user is None or not user.is_active:
            raise TokenError()
        if user.tenant_id != claims.tenant_id:
            raise TokenError()
        if user.token_version != claims.version:
            raise RevokedTokenError()
        return claims

    async def get_subject(self, claims: TokenClaims) -> User:
        """Load the subject of validated claims."""
        user = await self.user_repo.get_by_id(claims.user_id)
        if user is None or not user.is_active:
            raise TokenError()
        return user

    async def refresh_token(self, token: str) -> IssuedToken:
        """Exchange a currently valid token for a new one.

        The new token has a fresh ID and expiry; the presented token
        keeps its own expiry. A session cannot be extended past
        REFRESH_TOKEN_EXPIRE_MINUTES after the original login.

        Raises:
            TokenError: If the presented token is not valid
            ExpiredTokenError: If the refresh window has elapsed
        """
        claims = await self.validate_token(token)

        window = timedelta(minutes=settings.refresh_token_expire_minutes)
        if self.clock() >= claims.auth_time + window:
            raise ExpiredTokenError()

        user = await self.get_subject(claims)
        issued = self.issue_token(user, auth_time=claims.auth_time)
        logger.info("token_refreshed", user_id=str(user.id), old_jti=claims.jti, new_jti=issued.claims.jti)
        return issued

    async def revoke(self, token: str) -> None:
        """Revoke a single token.

        Tokens that are malformed, expired or forged are ignored, and
        revoking the same token twice is a no-op.
        """
        try:
            claims = decode_token(token, now=self.clock())
        except TokenError as exc:
            logger.info("token_revoke_ignored", reason=exc.reason)
            return

        await self.revoked_repo.revoke(claims.jti, claims.expires_at, claims.user_id)
        logger.info("token_revoked", user_id=str(claims.user_id), jti=claims.jti)

    async def revoke_all(self, user_id: UUID) -> None:
        """Invalidate every token issued to a subject so far."""
        version = await self.user_repo.bump_token_version(user_id)
        logger.info("tokens_revoked_all", user_id=str(user_id), token_version=version)


# Type alias for dependency injection
AuthSvc = Annotated[AuthService, Depends(AuthService)]
