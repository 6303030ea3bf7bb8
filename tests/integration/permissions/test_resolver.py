"""Integration tests for permission resolution."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from zena.core.errors import TenantMismatchError
from zena.core.permissions.catalog import create_system_roles, sync_catalog
from zena.core.permissions.models import SCOPE_TENANT, Role
from zena.core.permissions.resolver import PermissionResolver
from zena.modules.tenants.models import Tenant


pytestmark = pytest.mark.integration


async def _role(db: AsyncSession, tenant: Tenant, name: str, *codes: str) -> Role:
    permissions = await sync_catalog(db)
    role = Role(
        name=name,
        scope=SCOPE_TENANT,
        tenant_id=tenant.id,
        permissions=[permissions[code] for code in codes],
    )
    db.add(role)
    await db.flush()
    return role


class TestEffectivePermissions:
    async def test_union_of_roles_and_removal(self, db: AsyncSession, make_user, tenant_a):
        r1 = await _role(db, tenant_a, "R1", "project.read")
        r2 = await _role(db, tenant_a, "R2", "task.read")
        user = await make_user(tenant_a, roles=[r1, r2])
        resolver = PermissionResolver(db)

        assert await resolver.effective_permissions(user, tenant_a.id) == {"project.read", "task.read"}

        await resolver.revoke_role(user.id, r2.id)

        assert await resolver.effective_permissions(user, tenant_a.id) == {"project.read"}

    async def test_no_roles_no_permissions(self, db: AsyncSession, make_user, tenant_a):
        user = await make_user(tenant_a)

        assert await PermissionResolver(db).effective_permissions(user, tenant_a.id) == frozenset()

    async def test_missing_user_has_nothing(self, db: AsyncSession, tenant_a):
        resolver = PermissionResolver(db)

        assert await resolver.effective_permissions(None, tenant_a.id) == frozenset()
        assert await resolver.has_permission(None, tenant_a.id, "project.read") is False

    async def test_nothing_outside_home_tenant(self, db: AsyncSession, make_user, tenant_a, tenant_b, roles_a):
        user = await make_user(tenant_a, roles=[roles_a["Admin"]])
        resolver = PermissionResolver(db)

        assert await resolver.effective_permissions(user, tenant_b.id) == frozenset()
        assert await resolver.has_permission(user, tenant_b.id, "project.read") is False
        assert await resolver.has_permission(user, tenant_a.id, "project.read") is True

    async def test_wildcards_are_honoured(self, db: AsyncSession, make_user, tenant_a, roles_a):
        user = await make_user(tenant_a, roles=[roles_a["Admin"]])
        resolver = PermissionResolver(db)

        assert await resolver.has_permission(user, tenant_a.id, "contract.approve") is True
        assert await resolver.has_permission(user, tenant_a.id, "admin.system.manage") is False

    async def test_malformed_code_is_denied(self, db: AsyncSession, make_user, tenant_a, roles_a):
        user = await make_user(tenant_a, roles=[roles_a["Admin"]])
        resolver = PermissionResolver(db)

        assert await resolver.has_permission(user, tenant_a.id, "project.*") is False
        assert await resolver.has_permission(user, tenant_a.id, "") is False

    async def test_has_any_and_all(self, db: AsyncSession, make_user, tenant_a, roles_a):
        user = await make_user(tenant_a, roles=[roles_a["Client"]])
        resolver = PermissionResolver(db)

        assert await resolver.has_any_permission(user, tenant_a.id, ["project.write", "project.read"]) is True
        assert await resolver.has_all_permissions(user, tenant_a.id, ["project.write", "project.read"]) is False
        assert await resolver.has_all_permissions(user, tenant_a.id, []) is False

    async def test_system_role_applies_everywhere(self, db: AsyncSession, make_user, tenant_a, tenant_b):
        (super_admin,) = await create_system_roles(db)
        user = await make_user(None, roles=[super_admin])
        resolver = PermissionResolver(db)

        for tenant_id in (None, tenant_a.id, tenant_b.id):
            assert await resolver.has_permission(user, tenant_id, "admin.system.manage") is True


class TestRoleAssignment:
    async def test_foreign_tenant_role_is_rejected(self, db: AsyncSession, make_user, tenant_a, roles_b):
        user = await make_user(tenant_a)

        with pytest.raises(TenantMismatchError):
            await PermissionResolver(db).assign_role(user, roles_b["Admin"])

    async def test_assignment_is_idempotent(self, db: AsyncSession, make_user, tenant_a, roles_a):
        user = await make_user(tenant_a, roles=[roles_a["PM"]])
        resolver = PermissionResolver(db)

        await resolver.assign_role(user, roles_a["PM"])

        roles = await resolver.get_user_roles(user.id, tenant_a.id)
        assert [role.name for role in roles] == ["PM"]
