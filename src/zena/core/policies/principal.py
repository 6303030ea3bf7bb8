"""Resolved acting subject used by policy checks."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID

from zena.core.permissions.resolver import PermissionResolver, grants, is_valid_code


if TYPE_CHECKING:
    from zena.core.database.tenant import TenantContext
    from zena.modules.users.models import User


@dataclass(frozen=True)
class Principal:
    """A subject with its tenant scope and effective permissions.

    Attributes:
        user_id: The subject's UUID
        home_tenant_id: Tenant the subject belongs to, None if system-global
        tenant_id: Tenant the subject is currently acting in
        is_system: Whether the subject acts unscoped
        permissions: Effective permission codes in ``tenant_id``
    """

    user_id: UUID
    home_tenant_id: UUID | None
    tenant_id: UUID | None
    is_system: bool = False
    permissions: frozenset[str] = field(default_factory=frozenset)

    def has(self, code: str) -> bool:
        """Whether the principal holds a permission (wildcards honoured)."""
        return is_valid_code(code) and grants(self.permissions, code)

    def owns(self, entity: object) -> bool:
        """Whether the principal created the entity."""
        return getattr(entity, "created_by", None) == self.user_id


async def resolve_principal(
    resolver: PermissionResolver,
    user: "User",
    context: "TenantContext",
) -> Principal:
    """Build the principal of ``user`` acting under ``context``."""
    permissions = await resolver.effective_permissions(user, context.tenant_id)
    return Principal(
        user_id=user.id,
        home_tenant_id=user.tenant_id,
        tenant_id=context.tenant_id,
        is_system=context.is_system,
        permissions=permissions,
    )
