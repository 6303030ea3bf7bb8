"""Project template database models."""

from typing import Any

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from zena.core.constants import MAX_NAME_LENGTH
from zena.core.database.base import Base, OwnedMixin, TenantMixin, TimestampMixin, UUIDMixin


class Template(Base, UUIDMixin, TimestampMixin, TenantMixin, OwnedMixin):
    """A reusable project template.

    Attributes:
        name: Template name
        category: Grouping label
        description: Free text
        payload: Task and phase structure applied to new projects
    """

    __tablename__ = "templates"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    category: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    payload: Mapped[dict[str, Any]] = mapped_column(
        default=dict,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Template(id={self.id}, name={self.name})>"
