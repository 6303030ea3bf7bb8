"""Integration tests for seed.py scenarios.

These tests verify that the seeding scripts create the permission
catalog, roles, users and demo data, and that they can be re-run.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scripts.seed import DEMO_PASSWORD, DEMO_TENANTS, DEMO_USERS, seed_default, seed_demo
from zena.core.auth.backend import verify_password
from zena.core.database.tenant import TenantContext, scoped
from zena.core.permissions.models import Role
from zena.core.permissions.resolver import PermissionResolver
from zena.modules.projects.models import Project
from zena.modules.tenants.models import Tenant
from zena.modules.users.models import User


pytestmark = pytest.mark.integration


class TestSeedDefault:
    async def test_creates_super_admin(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        db: AsyncSession,
    ):
        await seed_default(session_factory)

        user = await db.scalar(select(User).where(User.email == "superadmin@example.com"))
        assert user.tenant_id is None
        assert verify_password(DEMO_PASSWORD, user.password_hash)
        assert await PermissionResolver(db).has_permission(user, None, "admin.system.manage")

    async def test_is_idempotent(self, session_factory: async_sessionmaker[AsyncSession], db: AsyncSession):
        await seed_default(session_factory)
        await seed_default(session_factory)

        assert await db.scalar(select(func.count()).select_from(User)) == 1
        assert await db.scalar(select(func.count()).select_from(Role)) == 1


class TestSeedDemo:
    async def test_creates_isolated_tenants(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        db: AsyncSession,
    ):
        await seed_demo(session_factory)
        await seed_demo(session_factory)

        tenants = (await db.scalars(select(Tenant).order_by(Tenant.name))).all()
        assert [t.domain for t in tenants] == sorted(d["domain"] for d in DEMO_TENANTS)
        assert await db.scalar(select(func.count()).select_from(User)) == 1 + len(tenants) * len(DEMO_USERS)

        for tenant in tenants:
            with scoped(db, TenantContext.for_tenant(tenant.id)):
                projects = (await db.scalars(select(Project))).all()
            assert [p.tenant_id for p in projects] == [tenant.id]

    async def test_roles_match_their_names(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        db: AsyncSession,
    ):
        await seed_demo(session_factory)
        resolver = PermissionResolver(db)
        domain = DEMO_TENANTS[0]["domain"]

        client = await db.scalar(select(User).where(User.email == f"client@{domain}"))
        pm = await db.scalar(select(User).where(User.email == f"pm@{domain}"))

        assert await resolver.has_permission(pm, pm.tenant_id, "project.write")
        assert not await resolver.has_permission(client, client.tenant_id, "project.write")
        assert await resolver.has_permission(client, client.tenant_id, "project.read")
