"""Audit recorder.

Writes redacted, append-only audit entries and answers trail queries.

Audit writes are log-and-continue by default: a failed write is logged
on the operational channel and the business operation proceeds. Actions
listed in ``AUDIT_FATAL_ACTIONS``, an ``AUDIT_FAILURE_POLICY`` of
``raise``, or an explicit ``fatal=True`` turn a failed write into an
``AuditWriteError``.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from zena.config import Settings, get_settings
from zena.core.audit.models import AuditLog
from zena.core.audit.redaction import SensitiveDataFilter
from zena.core.audit.serialization import to_primitive
from zena.core.constants import DEFAULT_PAGE_SIZE
from zena.core.database.base import utcnow
from zena.core.database.tenant import TenantContext, TenantContextRequired
from zena.core.errors import AuditWriteError


log = structlog.get_logger()


def subtract_years(moment: datetime, years: int) -> datetime:
    """Move a datetime back by whole calendar years.

    February 29 maps to February 28 in non-leap target years.
    """
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, day=28)


class AuditRecorder:
    """Service for creating and reading audit log entries.

    Request metadata (tenant, actor, IP, user agent, request ID) defaults
    from the bound ``TenantContext``.
    """

    def __init__(
        self,
        session: AsyncSession,
        context: TenantContext | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize audit recorder.

        Args:
            session: Database session
            context: Tenant context of the current unit of work
            settings: Settings providing redaction and failure policy
            clock: Time source, injectable for tests
        """
        self.session = session
        self.context = context
        self.settings = settings or get_settings()
        self.clock = clock
        self._filter = SensitiveDataFilter(self.settings.audit_sensitive_fields)

    # ============================================================
    # Redaction
    # ============================================================

    def filter_sensitive_data(self, data: dict[str, Any] | None) -> dict[str, Any] | None:
        """Mask sensitive values in a mapping.

        Args:
            data: Field map, possibly nested

        Returns:
            A copy with sensitive values replaced by ``[FILTERED]``
        """
        return self._filter(data)

    def _prepare(self, data: dict[str, Any] | None) -> dict[str, Any] | None:
        if data is None:
            return None
        return self.filter_sensitive_data(to_primitive(data))

    # ============================================================
    # Writing
    # ============================================================

    def _is_fatal(self, action: str, fatal: bool | None) -> bool:
        if fatal is not None:
            return fatal
        if action in self.settings.audit_fatal_actions:
            return True
        return self.settings.audit_failure_policy == "raise"

    async def log_action(
        self,
        actor_id: UUID | None,
        action: str,
        entity_type: str,
        entity_id: Any = None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        *,
        tenant_id: UUID | None = None,
        fatal: bool | None = None,
    ) -> AuditLog | None:
        """Record an action.

        The entry is written inside a SAVEPOINT so that a failed audit
        insert does not poison the caller's transaction.

        Args:
            actor_id: User performing the action
            action: Action name, e.g. "project.updated"
            entity_type: Type of the affected entity
            entity_id: ID of the affected entity
            old_values: State before the change
            new_values: State after the change
            ip_address: Client IP, defaults from context
            user_agent: Client user agent, defaults from context
            tenant_id: Tenant of the entry, defaults from context
            fatal: Override the configured failure policy for this call

        Returns:
            The persisted entry, or None if the write failed non-fatally

        Raises:
            AuditWriteError: If the write failed and is fatal
        """
        context = self.context
        entry = AuditLog(
            tenant_id=tenant_id if tenant_id is not None else (context.tenant_id if context else None),
            user_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            old_data=self._prepare(old_values),
            new_data=self._prepare(new_values),
            ip_address=ip_address or (context.ip_address if context else None),
            user_agent=user_agent or (context.user_agent if context else None),
            request_id=context.request_id if context else None,
            created_at=self.clock(),
        )

        # Pending business changes must fail on their own, not as an audit failure
        await self.session.flush()
        try:
            async with self.session.begin_nested():
                self.session.add(entry)
        except SQLAlchemyError as exc:
            log.error(
                "audit_write_failed",
                action=action,
                entity_type=entity_type,
                entity_id=entry.entity_id,
                error=str(exc),
            )
            if self._is_fatal(action, fatal):
                raise AuditWriteError() from exc
            return None

        log.info(
            "audit_log_created",
            action=action,
            entity_type=entity_type,
            entity_id=entry.entity_id,
            user_id=str(actor_id) if actor_id else None,
        )
        return entry

    # ============================================================
    # Reading
    # ============================================================

    def _scope(self, stmt: Any) -> Any:
        context = self.context
        if context is None:
            raise TenantContextRequired()
        if context.is_system:
            return stmt
        return stmt.where(AuditLog.tenant_id == context.tenant_id)

    async def get_audit_trail(self, entity_type: str, entity_id: Any) -> list[AuditLog]:
        """Return the history of one entity, oldest first.

        Entries sharing a timestamp are ordered by insertion.
        """
        stmt = self._scope(
            select(AuditLog).where(
                AuditLog.entity_type == entity_type,
                AuditLog.entity_id == str(entity_id),
            )
        ).order_by(AuditLog.created_at.asc(), AuditLog.id.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_logs(
        self,
        *,
        user_id: UUID | None = None,
        action: str | None = None,
        entity_type: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> list[AuditLog]:
        """List entries of the current tenant, newest first."""
        stmt = self._scope(select(AuditLog))
        if user_id is not None:
            stmt = stmt.where(AuditLog.user_id == user_id)
        if action is not None:
            stmt = stmt.where(AuditLog.action == action)
        if entity_type is not None:
            stmt = stmt.where(AuditLog.entity_type == entity_type)
        if since is not None:
            stmt = stmt.where(AuditLog.created_at >= since)
        if until is not None:
            stmt = stmt.where(AuditLog.created_at < until)
        stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # ============================================================
    # Retention
    # ============================================================

    async def cleanup_old_logs(self, retention_years: int | None = None) -> int:
        """Delete entries older than the retention period.

        Runs across all tenants and therefore needs a system context.
        Running it twice in a row deletes nothing the second time.

        Args:
            retention_years: Years to keep, defaults to AUDIT_RETENTION_YEARS

        Returns:
            Number of deleted entries

        Raises:
            TenantContextRequired: If the recorder is not in a system context
            ValueError: If retention_years is below 1
        """
        if self.context is None or not self.context.is_system:
            raise TenantContextRequired("Retention cleanup requires a system context")

        years = retention_years if retention_years is not None else self.settings.audit_retention_years
        if years < 1:
            raise ValueError("retention_years must be at least 1")

        cutoff = subtract_years(self.clock(), years)
        result = await self.session.execute(
            delete(AuditLog)
            .where(AuditLog.created_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        deleted = result.rowcount or 0

        log.info(
            "audit_logs_cleaned",
            retention_years=years,
            cutoff=cutoff.isoformat(),
            deleted=deleted,
        )
        return deleted
