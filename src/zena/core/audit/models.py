"""Audit log database model.

Append-only record of who changed what, when and from where. Rows are
never updated; they are only removed by retention cleanup.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from zena.core.constants import (
    MAX_AUDIT_ACTION_LENGTH,
    MAX_ENTITY_ID_LENGTH,
    MAX_ENTITY_TYPE_LENGTH,
    MAX_IPV6_LENGTH,
    MAX_REQUEST_ID_LENGTH,
)
from zena.core.database.base import Base, BigIntPK, utcnow


class AuditLog(Base):
    """Audit log entry.

    The integer id grows with insertion order and breaks ties between
    entries sharing a timestamp.

    Attributes:
        tenant_id: Tenant the action belongs to (NULL for system actions)
        user_id: Acting user (NULL for system actions)
        action: Action name, e.g. "project.created" or "auth.login"
        entity_type: Type of the affected entity
        entity_id: ID of the affected entity
        old_data: Redacted state before the change
        new_data: Redacted state after the change
        ip_address: Client IP address
        user_agent: Client user agent string
        request_id: Correlation ID for request tracing
        created_at: When the action occurred
    """

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_entity_trail", "entity_type", "entity_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(
        BigIntPK,
        primary_key=True,
        autoincrement=True,
    )
    tenant_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    user_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # What happened
    action: Mapped[str] = mapped_column(
        String(MAX_AUDIT_ACTION_LENGTH),
        nullable=False,
        index=True,
    )
    entity_type: Mapped[str] = mapped_column(
        String(MAX_ENTITY_TYPE_LENGTH),
        nullable=False,
    )
    entity_id: Mapped[str | None] = mapped_column(
        String(MAX_ENTITY_ID_LENGTH),
        nullable=True,
    )

    # Data
    old_data: Mapped[dict[str, Any] | None] = mapped_column(nullable=True)
    new_data: Mapped[dict[str, Any] | None] = mapped_column(nullable=True)

    # Request context
    ip_address: Mapped[str | None] = mapped_column(
        String(MAX_IPV6_LENGTH),
        nullable=True,
    )
    user_agent: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    request_id: Mapped[str | None] = mapped_column(
        String(MAX_REQUEST_ID_LENGTH),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, action={self.action}, "
            f"entity_type={self.entity_type}, entity_id={self.entity_id})>"
        )
