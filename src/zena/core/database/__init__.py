"""Database layer - session management, base models, and tenant scoping."""

from zena.core.database.base import Base, OwnedMixin, TenantMixin, TimestampMixin, UUIDMixin
from zena.core.database.session import (
    DBSession,
    async_engine,
    async_session_factory,
    get_db,
)
from zena.core.database.tenant import (
    TenantContext,
    TenantContextRequired,
    TenantSession,
    bind_tenant_context,
    get_tenant_context,
    scoped,
)


__all__ = [
    "Base",
    "DBSession",
    "OwnedMixin",
    "TenantContext",
    "TenantContextRequired",
    "TenantMixin",
    "TenantSession",
    "TimestampMixin",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "bind_tenant_context",
    "get_db",
    "get_tenant_context",
    "scoped",
]
