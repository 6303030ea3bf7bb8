"""Cleanup tasks for expired data.

Both jobs are idempotent: running one twice in a row deletes nothing
the second time.
"""

from typing import Any

import structlog

from zena.core.audit.recorder import AuditRecorder
from zena.core.database.base import utcnow
from zena.core.database.tenant import TenantContext, bind_tenant_context
from zena.modules.users.repos import RevokedTokenRepository


log = structlog.get_logger()


async def cleanup_audit_logs(ctx: dict[str, Any], retention_years: int | None = None) -> dict[str, int]:
    """Delete audit entries older than the retention period.

    Args:
        ctx: Worker context containing database session factory
        retention_years: Override of AUDIT_RETENTION_YEARS

    Returns:
        Dict with the number of deleted entries
    """
    session_factory = ctx["db_session_factory"]

    async with session_factory() as session:
        context = TenantContext.system(reason="audit retention cleanup")
        bind_tenant_context(session, context)
        recorder = AuditRecorder(session, context)
        deleted = await recorder.cleanup_old_logs(retention_years)
        await session.commit()

    log.info("cleanup_audit_logs_complete", audit_logs_deleted=deleted)
    return {"audit_logs_deleted": deleted}


async def cleanup_revoked_tokens(ctx: dict[str, Any]) -> dict[str, int]:
    """Remove revoked token entries whose token has expired anyway.

    Args:
        ctx: Worker context containing database session factory

    Returns:
        Dict with the number of deleted entries
    """
    session_factory = ctx["db_session_factory"]

    async with session_factory() as session:
        deleted = await RevokedTokenRepository(session).delete_expired(utcnow())
        await session.commit()

    log.info("cleanup_revoked_tokens_complete", revoked_tokens_deleted=deleted)
    return {"revoked_tokens_deleted": deleted}
