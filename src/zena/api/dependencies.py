"""Shared API dependencies.

Every tenant-aware route works through these: the request's tenant
context, a session bound to it, the resolved principal and an audit
recorder carrying the same context.
"""

from typing import Annotated

from fastapi import Depends

from zena.core.audit.recorder import AuditRecorder
from zena.core.auth.dependencies import CurrentUser, RequestContext
from zena.core.database.session import DBSession
from zena.core.database.tenant import TenantSession
from zena.core.permissions.resolver import PermissionResolver
from zena.core.policies import Principal, resolve_principal


async def get_tenant_session(db: DBSession, context: RequestContext) -> TenantSession:
    """Bind the request's tenant context to its database session."""
    return TenantSession(db, context)


ScopedSession = Annotated[TenantSession, Depends(get_tenant_session)]


async def get_principal(
    user: CurrentUser,
    context: RequestContext,
    db: DBSession,
) -> Principal:
    """Resolve the acting principal and its permissions for this request."""
    return await resolve_principal(PermissionResolver(db), user, context)


CurrentPrincipal = Annotated[Principal, Depends(get_principal)]


async def get_audit_recorder(db: DBSession, context: RequestContext) -> AuditRecorder:
    return AuditRecorder(db, context)


Audit = Annotated[AuditRecorder, Depends(get_audit_recorder)]


__all__ = [
    "Audit",
    "CurrentPrincipal",
    "CurrentUser",
    "DBSession",
    "RequestContext",
    "ScopedSession",
]
