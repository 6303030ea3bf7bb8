"""User database models."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from zena.core.constants import MAX_EMAIL_LENGTH, MAX_JTI_LENGTH, MAX_NAME_LENGTH
from zena.core.database.base import Base, TimestampMixin, UUIDMixin


if TYPE_CHECKING:
    from zena.core.permissions.models import Role
    from zena.modules.tenants.models import Tenant


class User(Base, UUIDMixin, TimestampMixin):
    """An authenticated subject.

    A user either belongs to exactly one tenant or, when ``tenant_id`` is
    NULL, is system-global and may act across tenants.

    Attributes:
        tenant_id: Home tenant, NULL for system-global subjects
        email: Login identity, unique across the installation
        password_hash: Bcrypt-hashed password
        full_name: User's full name
        is_active: Whether the user can log in
        token_version: Bumped to invalidate every issued token at once
    """

    __tablename__ = "users"

    tenant_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    token_version: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    tenant: Mapped["Tenant | None"] = relationship(
        "Tenant",
        lazy="selectin",
    )
    roles: Mapped[list["Role"]] = relationship(
        "Role",
        secondary="user_roles",
        back_populates="users",
        lazy="selectin",
    )

    @property
    def is_system(self) -> bool:
        """Whether this subject is system-global."""
        return self.tenant_id is None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, tenant_id={self.tenant_id})>"


class RevokedToken(Base, UUIDMixin, TimestampMixin):
    """Revoked JWT access tokens.

    Holds the JTI of each revoked token until the token would have
    expired anyway; expired entries are purged by the cleanup job.

    Attributes:
        jti: Unique JWT ID
        user_id: Subject the token was issued to
        expires_at: When the original token would have expired
    """

    __tablename__ = "revoked_tokens"

    jti: Mapped[str] = mapped_column(
        String(MAX_JTI_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    user_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<RevokedToken(id={self.id}, jti={self.jti[:8]}...)>"
