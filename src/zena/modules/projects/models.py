"""Project and task database models."""

from datetime import date
from uuid import UUID

from sqlalchemy import Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from zena.core.constants import MAX_NAME_LENGTH, MAX_STATUS_LENGTH
from zena.core.database.base import Base, OwnedMixin, TenantMixin, TimestampMixin, UUIDMixin


class Project(Base, UUIDMixin, TimestampMixin, TenantMixin, OwnedMixin):
    """A construction or design project owned by one tenant.

    Attributes:
        name: Project name, unique per tenant by convention only
        code: Short reference code
        description: Free text
        status: Lifecycle label (planning, active, on_hold, completed, cancelled)
        start_date: Planned start
        end_date: Planned end
    """

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
        index=True,
    )
    code: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(MAX_STATUS_LENGTH),
        default="planning",
        nullable=False,
    )
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    tasks: Mapped[list["Task"]] = relationship(
        "Task",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name={self.name}, tenant_id={self.tenant_id})>"


class Task(Base, UUIDMixin, TimestampMixin, TenantMixin, OwnedMixin):
    """A unit of work inside a project.

    Attributes:
        project_id: Parent project (same tenant)
        title: Short summary
        status: Lifecycle label (todo, in_progress, done)
        assignee_id: User responsible for the task
        due_date: Optional deadline
    """

    __tablename__ = "tasks"

    project_id: Mapped[UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(MAX_STATUS_LENGTH),
        default="todo",
        nullable=False,
    )
    assignee_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="tasks",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title}, project_id={self.project_id})>"
