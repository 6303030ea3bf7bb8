"""Permission system database models.

This module defines the RBAC (Role-Based Access Control) models:
- Permission: a global capability code such as ``task.write``
- Role: a named set of permissions, either system-wide or bound to a tenant
- UserRole: junction table linking users to roles
"""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    String,
    Table,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from zena.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_PERMISSION_ACTION_LENGTH,
    MAX_PERMISSION_CODE_LENGTH,
    MAX_PERMISSION_MODULE_LENGTH,
    MAX_ROLE_NAME_LENGTH,
)
from zena.core.database.base import Base, TimestampMixin, UUIDMixin


if TYPE_CHECKING:
    from zena.modules.users.models import User


SCOPE_SYSTEM = "system"
SCOPE_TENANT = "tenant"


role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column(
        "role_id", Uuid, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "permission_id",
        Uuid,
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Permission(Base, UUIDMixin, TimestampMixin):
    """A capability code of the form ``module.action``.

    Permissions are global (not tenant-scoped). The code ``*`` grants
    everything and ``module.*`` grants every action of one module.

    Attributes:
        code: Unique permission code, e.g. "project.write"
        module: Functional area, e.g. "project"
        action: Action within the module, e.g. "write"
        description: Human-readable description
    """

    __tablename__ = "permissions"

    code: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_CODE_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    module: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_MODULE_LENGTH),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_ACTION_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )

    roles: Mapped[list["Role"]] = relationship(
        "Role",
        secondary=role_permissions,
        back_populates="permissions",
    )

    @classmethod
    def from_code(cls, code: str, description: str | None = None) -> "Permission":
        """Build a permission, deriving module and action from the code."""
        module, _, action = code.rpartition(".")
        return cls(code=code, module=module or code, action=action, description=description)

    def __repr__(self) -> str:
        return f"<Permission({self.code})>"


class Role(Base, UUIDMixin, TimestampMixin):
    """A named set of permissions.

    System roles (``scope == "system"``) apply in every tenant. Tenant
    roles carry a tenant_id and only apply inside that tenant.

    Roles are not filtered by the tenant scope enforcer: the permission
    resolver decides which of a user's roles apply to a tenant.
    """

    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_role_tenant_name"),
        CheckConstraint(
            "(scope = 'system' AND tenant_id IS NULL) "
            "OR (scope = 'tenant' AND tenant_id IS NOT NULL)",
            name="ck_role_scope_tenant",
        ),
    )

    name: Mapped[str] = mapped_column(
        String(MAX_ROLE_NAME_LENGTH),
        nullable=False,
        index=True,
    )
    scope: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=SCOPE_TENANT,
    )
    tenant_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )

    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        secondary=role_permissions,
        back_populates="roles",
        lazy="selectin",
    )
    users: Mapped[list["User"]] = relationship(
        "User",
        secondary="user_roles",
        back_populates="roles",
    )

    @property
    def is_system(self) -> bool:
        return self.scope == SCOPE_SYSTEM

    def applies_to(self, tenant_id: UUID | None) -> bool:
        """Whether this role's grants count inside ``tenant_id``."""
        return self.is_system or (tenant_id is not None and self.tenant_id == tenant_id)

    @property
    def permission_codes(self) -> set[str]:
        return {permission.code for permission in self.permissions}

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name}, scope={self.scope}, tenant_id={self.tenant_id})>"


class UserRole(Base, TimestampMixin):
    """Junction table linking users to roles.

    A user's effective permissions in a tenant are the union of the
    permissions of every role that applies to that tenant.
    """

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role_id", name="uq_user_role"),)

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, role_id={self.role_id})>"
