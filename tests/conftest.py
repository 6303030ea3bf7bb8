"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

import zena.models  # noqa: F401
from zena.config import settings
from zena.core.auth.backend import get_password_context, hash_password
from zena.core.auth.lockout import LoginLockout, get_login_lockout
from zena.core.database import Base, get_db
from zena.core.permissions.catalog import create_default_roles
from zena.core.permissions.models import Role
from zena.core.permissions.resolver import PermissionResolver
from zena.main import create_app
from zena.modules.tenants.models import Tenant
from zena.modules.users.models import User
from tests.factories.tenant import TenantFactory
from tests.factories.user import TEST_PASSWORD, UserFactory, bearer


# ============================================================
# Settings
# ============================================================


@pytest.fixture(scope="session", autouse=True)
def fast_password_hashing():
    """Use the cheapest bcrypt cost for the whole run."""
    original = settings.bcrypt_rounds
    settings.bcrypt_rounds = 4
    get_password_context.cache_clear()
    yield
    settings.bcrypt_rounds = original
    get_password_context.cache_clear()


# ============================================================
# Database
# ============================================================


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a file-backed SQLite engine with the full schema.

    pysqlite's implicit transaction handling breaks SAVEPOINT; the two
    listeners hand transaction control back to SQLAlchemy.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection: Any, _record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for test setup and assertions.

    Fixtures commit what they create so that API requests, which run in
    their own sessions, can see it.
    """
    async with session_factory() as session:
        yield session


# ============================================================
# Application
# ============================================================


@pytest.fixture
def lockout() -> MagicMock:
    """Login lockout double that never locks."""
    mock = MagicMock(spec=LoginLockout)
    mock.is_locked = AsyncMock(return_value=False)
    mock.record_failure = AsyncMock(return_value=False)
    mock.clear = AsyncMock()
    return mock


@pytest.fixture
async def app(
    session_factory: async_sessionmaker[AsyncSession],
    lockout: MagicMock,
    monkeypatch: pytest.MonkeyPatch,
):
    """Create test application instance."""
    monkeypatch.setattr(settings, "rate_limit_enabled", False)
    application = create_app()

    # One session per request, committed or rolled back like get_db
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_login_lockout] = lambda: lockout

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# Tenant and User Fixtures
# ============================================================


@pytest.fixture
def make_tenant(db: AsyncSession) -> Callable[..., Awaitable[Tenant]]:
    async def _make(**overrides: Any) -> Tenant:
        tenant = Tenant(**TenantFactory.build(**overrides).model_dump())
        db.add(tenant)
        await db.commit()
        return tenant

    return _make


@pytest.fixture
def make_user(db: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Create a committed user, optionally with roles.

    Usage:
        user = await make_user(tenant, roles=[admin_role])
    """

    async def _make(
        tenant: Tenant | None,
        roles: list[Role] | None = None,
        password: str = TEST_PASSWORD,
        **overrides: Any,
    ) -> User:
        data = UserFactory.build(**overrides).model_dump()
        user = User(
            **data,
            tenant_id=tenant.id if tenant else None,
            password_hash=hash_password(password),
        )
        db.add(user)
        await db.flush()
        resolver = PermissionResolver(db)
        for role in roles or []:
            await resolver.assign_role(user, role)
        await db.commit()
        return user

    return _make


@pytest.fixture
async def tenant_a(make_tenant) -> Tenant:
    return await make_tenant(name="Tenant A")


@pytest.fixture
async def tenant_b(make_tenant) -> Tenant:
    return await make_tenant(name="Tenant B")


@pytest.fixture
async def roles_a(db: AsyncSession, tenant_a: Tenant) -> dict[str, Role]:
    """Default roles of tenant A, by name."""
    roles = await create_default_roles(db, tenant_a.id)
    await db.commit()
    return {role.name: role for role in roles}


@pytest.fixture
async def roles_b(db: AsyncSession, tenant_b: Tenant) -> dict[str, Role]:
    roles = await create_default_roles(db, tenant_b.id)
    await db.commit()
    return {role.name: role for role in roles}


@pytest.fixture
async def admin_a(make_user, tenant_a: Tenant, roles_a: dict[str, Role]) -> User:
    return await make_user(tenant_a, roles=[roles_a["Admin"]], email="admin@tenant-a.example.com")


@pytest.fixture
async def admin_b(make_user, tenant_b: Tenant, roles_b: dict[str, Role]) -> User:
    return await make_user(tenant_b, roles=[roles_b["Admin"]], email="admin@tenant-b.example.com")


@pytest.fixture
def headers_a(admin_a: User) -> dict[str, str]:
    return bearer(admin_a)


@pytest.fixture
def headers_b(admin_b: User) -> dict[str, str]:
    return bearer(admin_b)


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"
