#!/usr/bin/env python
"""
Seed the permission catalog, default roles and demo data for development.
"""

import argparse
import asyncio
import sys

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import zena.models  # noqa: F401
from zena.core.auth.backend import hash_password
from zena.core.database import Base, TenantContext, async_engine, async_session_factory, scoped
from zena.core.logging import configure_logging
from zena.core.permissions.catalog import create_default_roles, create_system_roles
from zena.core.permissions.resolver import PermissionResolver
from zena.modules.projects.models import Project
from zena.modules.tenants.models import Tenant
from zena.modules.users.models import User


logger = structlog.get_logger()

DEMO_PASSWORD = "demo-password-123"

DEMO_TENANTS = [
    {"name": "Acme Construction", "domain": "acme.example.com"},
    {"name": "Globex Design", "domain": "globex.example.com"},
]

# (email prefix, role) created in every demo tenant
DEMO_USERS = [
    ("admin", "Admin"),
    ("pm", "PM"),
    ("designer", "Designer"),
    ("engineer", "SiteEngineer"),
    ("client", "Client"),
]


async def seed_default(
    session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
) -> None:
    """Create the permission catalog, system roles and a super admin."""
    async with session_factory() as session:
        roles = await create_system_roles(session)
        super_admin = next(role for role in roles if role.name == "SuperAdmin")

        email = "superadmin@example.com"
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(
                email=email,
                password_hash=hash_password(DEMO_PASSWORD),
                full_name="Super Admin",
                tenant_id=None,
            )
            session.add(user)
            await session.flush()
        await PermissionResolver(session).assign_role(user, super_admin)

        await session.commit()
        logger.info("seed_default_complete", super_admin=email)


async def seed_demo(
    session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
) -> None:
    """Create demo tenants with default roles, one user per role and a project.

    Tenants that already exist are skipped, so the scenario can be re-run.
    """
    await seed_default(session_factory)

    async with session_factory() as session:
        resolver = PermissionResolver(session)

        for data in DEMO_TENANTS:
            result = await session.execute(select(Tenant).where(Tenant.domain == data["domain"]))
            if result.scalar_one_or_none() is not None:
                logger.info("seed_tenant_exists", domain=data["domain"])
                continue

            tenant = Tenant(name=data["name"], domain=data["domain"], is_active=True)
            session.add(tenant)
            await session.flush()

            roles = {role.name: role for role in await create_default_roles(session, tenant.id)}
            slug = data["domain"].split(".")[0]

            users: list[User] = []
            for prefix, role_name in DEMO_USERS:
                user = User(
                    email=f"{prefix}@{data['domain']}",
                    password_hash=hash_password(DEMO_PASSWORD),
                    full_name=f"{role_name} ({slug})",
                    tenant_id=tenant.id,
                )
                session.add(user)
                await session.flush()
                await resolver.assign_role(user, roles[role_name])
                users.append(user)

            admin = users[0]
            with scoped(session, TenantContext.for_tenant(tenant.id, admin.id)):
                session.add(Project(name=f"{data['name']} HQ", code=f"{slug.upper()}-001", created_by=admin.id))
                await session.flush()

            logger.info("seed_tenant_created", tenant=tenant.name, tenant_id=str(tenant.id))

        await session.commit()


async def create_schema() -> None:
    """Create any missing tables."""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main(scenario: str) -> None:
    """Run the seeding based on scenario."""
    configure_logging()
    await create_schema()
    if scenario == "default":
        await seed_default()
    elif scenario == "demo":
        await seed_demo()
    else:
        print(f"Unknown scenario: {scenario}")
        print("Available scenarios: default, demo")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed database with demo data")
    parser.add_argument(
        "--scenario",
        "-s",
        default="default",
        help="Seed scenario to run (default, demo)",
    )
    args = parser.parse_args()

    asyncio.run(main(args.scenario))
