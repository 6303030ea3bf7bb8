"""Contract database models."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from zena.core.constants import MAX_NAME_LENGTH, MAX_STATUS_LENGTH
from zena.core.database.base import Base, OwnedMixin, TenantMixin, TimestampMixin, UUIDMixin


class Contract(Base, UUIDMixin, TimestampMixin, TenantMixin, OwnedMixin):
    """A client contract attached to a project.

    Attributes:
        project_id: Project the contract covers
        number: Contract reference number
        title: Display title
        total_value: Contract value in the tenant's currency
        status: draft, active, completed or terminated
    """

    __tablename__ = "contracts"

    project_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    number: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    total_value: Mapped[Decimal | None] = mapped_column(
        Numeric(14, 2),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(MAX_STATUS_LENGTH),
        default="draft",
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Contract(id={self.id}, number={self.number})>"
