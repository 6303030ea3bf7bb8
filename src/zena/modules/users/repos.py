"""User and token repositories.

Users are not tenant-scoped rows (system-global users have no tenant),
so lookups here are explicit about tenant filtering.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from zena.modules.users.models import RevokedToken, User


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, user_id: UUID, tenant_id: UUID | None = None) -> User | None:
        """Get a user by ID.

        Args:
            user_id: The user's UUID
            tenant_id: Optional tenant ID for scoping

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(User.id == user_id)
        if tenant_id:
            stmt = stmt.where(User.tenant_id == tenant_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by login email, case-insensitively."""
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def bump_token_version(self, user_id: UUID) -> int:
        """Invalidate every token issued to a user so far.

        Returns:
            The new token version
        """
        result = await self.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(token_version=User.token_version + 1)
            .returning(User.token_version)
            .execution_options(synchronize_session="fetch")
        )
        return result.scalar_one()


class RevokedTokenRepository:
    """Repository for the revoked token list."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def is_revoked(self, jti: str) -> bool:
        result = await self.session.execute(
            select(RevokedToken.id).where(RevokedToken.jti == jti)
        )
        return result.first() is not None

    async def revoke(self, jti: str, expires_at: datetime, user_id: UUID | None = None) -> None:
        """Add a token ID to the revoked list. Repeated calls are no-ops."""
        if await self.is_revoked(jti):
            return
        self.session.add(RevokedToken(jti=jti, expires_at=expires_at, user_id=user_id))
        await self.session.flush()

    async def delete_expired(self, now: datetime) -> int:
        """Remove entries whose token has expired anyway.

        Returns:
            Number of deleted entries
        """
        result = await self.session.execute(
            delete(RevokedToken)
            .where(RevokedToken.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
