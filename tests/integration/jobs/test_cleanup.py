"""Integration tests for the scheduled cleanup jobs."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from zena.core.audit.models import AuditLog
from zena.core.jobs.tasks.cleanup import cleanup_audit_logs, cleanup_revoked_tokens
from zena.modules.users.models import RevokedToken


pytestmark = pytest.mark.integration


@pytest.fixture
def ctx(session_factory: async_sessionmaker[AsyncSession]) -> dict:
    """Worker context as set up by the worker's startup hook."""
    return {"db_session_factory": session_factory}


async def _count(db: AsyncSession, model) -> int:
    return await db.scalar(select(func.count()).select_from(model))


async def test_cleanup_audit_logs(ctx, db: AsyncSession, tenant_a):
    now = datetime.now(UTC)
    db.add_all(
        [
            AuditLog(tenant_id=tenant_a.id, action="project.created", entity_type="project",
                     created_at=now - timedelta(days=365 * 3)),
            AuditLog(tenant_id=None, action="auth.login_failed", entity_type="user",
                     created_at=now - timedelta(days=365 * 3)),
            AuditLog(tenant_id=tenant_a.id, action="project.updated", entity_type="project",
                     created_at=now - timedelta(days=10)),
        ]
    )
    await db.commit()

    first = await cleanup_audit_logs(ctx, retention_years=2)
    second = await cleanup_audit_logs(ctx, retention_years=2)

    assert first == {"audit_logs_deleted": 2}
    assert second == {"audit_logs_deleted": 0}
    assert await _count(db, AuditLog) == 1


async def test_cleanup_revoked_tokens(ctx, db: AsyncSession):
    now = datetime.now(UTC)
    db.add_all(
        [
            RevokedToken(jti=uuid4().hex, expires_at=now - timedelta(hours=1)),
            RevokedToken(jti=uuid4().hex, expires_at=now + timedelta(hours=1)),
        ]
    )
    await db.commit()

    assert await cleanup_revoked_tokens(ctx) == {"revoked_tokens_deleted": 1}
    assert await cleanup_revoked_tokens(ctx) == {"revoked_tokens_deleted": 0}
    assert await _count(db, RevokedToken) == 1
