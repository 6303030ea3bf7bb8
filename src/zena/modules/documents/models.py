"""Document database models."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from zena.core.constants import MAX_NAME_LENGTH, MAX_STATUS_LENGTH
from zena.core.database.base import Base, OwnedMixin, TenantMixin, TimestampMixin, UUIDMixin


class Document(Base, UUIDMixin, TimestampMixin, TenantMixin, OwnedMixin):
    """Metadata of a project document; file content lives in external storage.

    Attributes:
        project_id: Project the document belongs to, if any
        title: Display title
        storage_key: Key of the file in the storage backend
        version: Revision number, starting at 1
        status: draft, submitted, approved or rejected
        approved_by: Reviewer who approved the current version
    """

    __tablename__ = "documents"

    project_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    storage_key: Mapped[str | None] = mapped_column(
        String(512),
        nullable=True,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(MAX_STATUS_LENGTH),
        default="draft",
        nullable=False,
    )
    approved_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, title={self.title}, version={self.version})>"
