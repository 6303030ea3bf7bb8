"""Permission resolution.

A user's effective permissions inside a tenant are the union of the
permission codes of every assigned role that applies there: system
roles apply everywhere, tenant roles only inside their own tenant.
"""

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING
from uuid import UUID

import structlog
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from zena.core.constants import WILDCARD_PERMISSION
from zena.core.errors import TenantMismatchError
from zena.core.permissions.models import SCOPE_SYSTEM, Role, UserRole


if TYPE_CHECKING:
    from zena.modules.users.models import User


logger = structlog.get_logger()

# module[.submodule].action, lowercase
PERMISSION_CODE_RE = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)+$")


def is_valid_code(code: object) -> bool:
    """Whether ``code`` is a well-formed concrete permission code."""
    return isinstance(code, str) and PERMISSION_CODE_RE.match(code) is not None


def grants(permissions: Iterable[str], code: str) -> bool:
    """Check whether a set of codes grants ``code``.

    ``*`` grants everything; ``module.*`` grants every code under
    ``module.``.

    Args:
        permissions: Effective permission codes
        code: Concrete permission code to test

    Returns:
        True if granted
    """
    held = permissions if isinstance(permissions, (set, frozenset)) else set(permissions)
    if code in held or WILDCARD_PERMISSION in held:
        return True
    parts = code.split(".")
    for i in range(1, len(parts)):
        if ".".join(parts[:i]) + ".*" in held:
            return True
    return False


class PermissionResolver:
    """Resolves and checks a user's permissions for a tenant."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_user_roles(self, user_id: UUID, tenant_id: UUID | None) -> list[Role]:
        """Get the roles of a user that apply inside ``tenant_id``.

        Args:
            user_id: The user's UUID
            tenant_id: The tenant being acted in; None means system roles only

        Returns:
            List of applicable roles
        """
        scope_filter = Role.scope == SCOPE_SYSTEM
        if tenant_id is not None:
            scope_filter = or_(scope_filter, Role.tenant_id == tenant_id)

        stmt = (
            select(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user_id, scope_filter)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def effective_permissions(
        self,
        user: "User | None",
        tenant_id: UUID | None,
    ) -> frozenset[str]:
        """Resolve the permission codes a user holds inside a tenant.

        A tenant-bound user asked about any tenant other than their own
        holds nothing there.

        Args:
            user: The subject, or None
            tenant_id: Tenant being acted in

        Returns:
            Frozen set of permission codes (may contain wildcards)
        """
        if user is None:
            return frozenset()
        if user.tenant_id is not None and user.tenant_id != tenant_id:
            return frozenset()

        roles = await self.get_user_roles(user.id, tenant_id)
        codes: set[str] = set()
        for role in roles:
            codes |= role.permission_codes
        return frozenset(codes)

    async def has_permission(
        self,
        user: "User | None",
        tenant_id: UUID | None,
        code: str,
    ) -> bool:
        """Check if a user holds a permission inside a tenant.

        Returns False for a missing user or a malformed code.
        """
        if user is None or not is_valid_code(code):
            return False
        permissions = await self.effective_permissions(user, tenant_id)
        return grants(permissions, code)

    async def has_any_permission(
        self,
        user: "User | None",
        tenant_id: UUID | None,
        codes: Iterable[str],
    ) -> bool:
        permissions = await self.effective_permissions(user, tenant_id)
        return any(is_valid_code(code) and grants(permissions, code) for code in codes)

    async def has_all_permissions(
        self,
        user: "User | None",
        tenant_id: UUID | None,
        codes: Iterable[str],
    ) -> bool:
        codes = list(codes)
        if user is None or not codes:
            return False
        permissions = await self.effective_permissions(user, tenant_id)
        return all(is_valid_code(code) and grants(permissions, code) for code in codes)

    async def assign_role(self, user: "User", role: Role) -> None:
        """Assign a role to a user.

        Raises:
            TenantMismatchError: If a tenant role is given to a user of another tenant
        """
        if not role.is_system and user.tenant_id is not None and role.tenant_id != user.tenant_id:
            logger.error(
                "tenant_mismatch",
                operation="assign_role",
                entity_type="Role",
                expected_tenant=str(user.tenant_id),
                actual_tenant=str(role.tenant_id),
                user_id=str(user.id),
            )
            raise TenantMismatchError(expected=user.tenant_id, actual=role.tenant_id, entity_type="Role")

        existing = await self.session.get(UserRole, (user.id, role.id))
        if existing is None:
            self.session.add(UserRole(user_id=user.id, role_id=role.id))
            await self.session.flush()
        logger.info("role_assigned", user_id=str(user.id), role=role.name)

    async def revoke_role(self, user_id: UUID, role_id: UUID) -> None:
        """Remove a role from a user. Missing assignments are ignored."""
        await self.session.execute(
            delete(UserRole).where(UserRole.user_id == user_id, UserRole.role_id == role_id)
        )
        logger.info("role_revoked", user_id=str(user_id), role_id=str(role_id))
