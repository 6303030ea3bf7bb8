"""Tenant database models."""

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from zena.core.constants import MAX_DOMAIN_LENGTH, MAX_NAME_LENGTH
from zena.core.database.base import Base, TimestampMixin, UUIDMixin


class Tenant(Base, UUIDMixin, TimestampMixin):
    """Tenant model representing an isolated customer organization.

    All tenant-scoped data references this table via tenant_id. Tenants
    are soft-disabled through ``is_active`` and never hard-deleted by the
    application.

    Attributes:
        name: Display name
        domain: Optional unique domain used to recognise the tenant
        settings: Free-form configuration, validated by ``TenantSettings``
        is_active: Whether members of the tenant may sign in
    """

    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
        index=True,
    )
    domain: Mapped[str | None] = mapped_column(
        String(MAX_DOMAIN_LENGTH),
        nullable=True,
        unique=True,
    )
    settings: Mapped[dict[str, Any]] = mapped_column(
        default=dict,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name={self.name}, domain={self.domain})>"
