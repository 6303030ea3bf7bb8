"""Audit log API routes."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query

from zena.api.dependencies import Audit, CurrentPrincipal
from zena.core.audit import policies as _audit_policies  # noqa: F401
from zena.core.audit.models import AuditLog
from zena.core.audit.schemas import AuditEntryResponse
from zena.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from zena.core.policies import policies


router = APIRouter(prefix="/audit", tags=["audit"])


@router.get(
    "",
    response_model=list[AuditEntryResponse],
    summary="List audit entries",
    description="Newest first, filtered by actor, action, entity type and time range.",
)
async def list_audit_logs(
    audit: Audit,
    principal: CurrentPrincipal,
    user_id: UUID | None = None,
    action: str | None = None,
    entity_type: str | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
) -> list[AuditLog]:
    policies.authorize(principal, "view_any", "audit_log")
    return await audit.list_logs(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        since=since,
        until=until,
        limit=limit,
    )


@router.get(
    "/{entity_type}/{entity_id}",
    response_model=list[AuditEntryResponse],
    summary="Entity audit trail",
    description="History of one entity, oldest first.",
)
async def get_audit_trail(
    entity_type: str,
    entity_id: str,
    audit: Audit,
    principal: CurrentPrincipal,
) -> list[AuditLog]:
    policies.authorize(principal, "view_any", "audit_log")
    return await audit.get_audit_trail(entity_type, entity_id)
