"""Tenant scope enforcement.

Every model inheriting ``TenantMixin`` is guarded at the session level:

- ORM SELECTs get ``tenant_id == <context tenant>`` injected for every
  tenant-aware entity they touch, including joins, aliases and
  relationship loads.
- ORM bulk UPDATE/DELETE statements get the same criterion. INSERTs are
  stamped like flushed rows, and no UPDATE may reassign tenant_id.
- Core INSERT/UPDATE/DELETE against a tenant table needs a system context.
- Flushes stamp tenant_id on new rows and reject writes that target
  another tenant or try to move a row between tenants.

The active ``TenantContext`` lives in ``session.info`` so that each
request carries its own context. There is no process-wide current tenant.
A session without a context refuses to touch tenant-aware models.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, TypeVar
from uuid import UUID

import structlog
from sqlalchemy import BindParameter, Delete, Insert, Select, Update, event, inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapper, ORMExecuteState, Session, with_loader_criteria
from sqlalchemy.sql.expression import ClauseElement

from zena.core.database.base import Base, TenantMixin
from zena.core.errors import TenantMismatchError


logger = structlog.get_logger()

CONTEXT_KEY = "tenant_context"

# Stands in for tenant_id values given as SQL expressions
UNRESOLVED_TENANT = "<sql expression>"

T = TypeVar("T")


class TenantContextRequired(Exception):
    """Raised when tenant context is required but not provided."""

    def __init__(self, message: str = "Tenant context is required for this operation"):
        self.message = message
        super().__init__(self.message)


@dataclass(frozen=True)
class TenantContext:
    """Identity of the caller for one unit of work.

    Attributes:
        tenant_id: Tenant every tenant-aware query is restricted to
        user_id: Acting subject, if any
        is_system: Whether tenant filtering is bypassed
        request_id: Correlation ID of the originating request
        ip_address: Client address of the originating request
        user_agent: Client user agent of the originating request
        reason: Why a system scope was opened
    """

    tenant_id: UUID | None
    user_id: UUID | None = None
    is_system: bool = False
    request_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    reason: str | None = None

    def __post_init__(self) -> None:
        if not self.is_system and self.tenant_id is None:
            raise TenantContextRequired("A tenant-scoped context needs a tenant_id")

    @classmethod
    def for_tenant(cls, tenant_id: UUID, user_id: UUID | None = None, **kwargs: Any) -> "TenantContext":
        """Build a context restricted to one tenant."""
        return cls(tenant_id=tenant_id, user_id=user_id, is_system=False, **kwargs)

    @classmethod
    def system(
        cls,
        *,
        reason: str,
        actor_id: UUID | None = None,
        **kwargs: Any,
    ) -> "TenantContext":
        """Open a context that bypasses tenant filtering.

        Every call is logged so that unscoped access is traceable.

        Args:
            reason: Short description of why the bypass is needed
            actor_id: Subject on whose behalf the bypass runs
            **kwargs: Request metadata (request_id, ip_address, user_agent)

        Returns:
            A system-global context
        """
        logger.warning("system_scope_opened", actor_id=str(actor_id) if actor_id else None, reason=reason)
        return cls(tenant_id=None, user_id=actor_id, is_system=True, reason=reason, **kwargs)

    def narrowed_to(self, tenant_id: UUID) -> "TenantContext":
        """Return a tenant-scoped copy of this context."""
        return replace(self, tenant_id=tenant_id, is_system=False, reason=None)


def get_tenant_context(session: Session | AsyncSession) -> TenantContext | None:
    """Return the context bound to a session, if any."""
    return session.info.get(CONTEXT_KEY)


def bind_tenant_context(session: Session | AsyncSession, context: TenantContext | None) -> None:
    """Bind (or clear) the tenant context of a session."""
    if context is None:
        session.info.pop(CONTEXT_KEY, None)
    else:
        session.info[CONTEXT_KEY] = context


@contextmanager
def scoped(session: Session | AsyncSession, context: TenantContext) -> Iterator[None]:
    """Temporarily run a session under another context.

    Example:
        with scoped(db, TenantContext.system(reason="retention cleanup")):
            await db.execute(...)
    """
    previous = get_tenant_context(session)
    bind_tenant_context(session, context)
    try:
        yield
    finally:
        bind_tenant_context(session, previous)


def is_tenant_scoped(obj_or_cls: Any) -> bool:
    """Whether an instance or mapped class carries TenantMixin."""
    cls = obj_or_cls if isinstance(obj_or_cls, type) else type(obj_or_cls)
    return issubclass(cls, TenantMixin)


def _reject(context: TenantContext, actual: Any, entity: Any, operation: str) -> TenantMismatchError:
    entity_cls = entity if isinstance(entity, type) else type(entity)
    entity_type = entity_cls.__name__
    logger.error(
        "tenant_mismatch",
        operation=operation,
        entity_type=entity_type,
        expected_tenant=str(context.tenant_id),
        actual_tenant=str(actual) if actual is not None else None,
        user_id=str(context.user_id) if context.user_id else None,
    )
    return TenantMismatchError(expected=context.tenant_id, actual=actual, entity_type=entity_type)


# ============================================================
# Session event listeners
# ============================================================


def _tenant_mapper(execute_state: ORMExecuteState) -> Mapper[Any] | None:
    """Mapper of a tenant-aware INSERT/UPDATE/DELETE target, if any.

    ORM statements name their mapper; Core statements against a mapped
    table are resolved through the registry.
    """
    statement = execute_state.statement
    if not isinstance(statement, (Insert, Update, Delete)):
        return None
    mapper = execute_state.bind_mapper
    if mapper is None:
        mapper = next(
            (m for m in Base.registry.mappers if any(t is statement.table for t in m.tables)),
            None,
        )
    if mapper is not None and is_tenant_scoped(mapper.class_):
        return mapper
    return None


def _is_tenant_key(key: Any) -> bool:
    return getattr(key, "key", key) == "tenant_id"


def _tenant_value(value: Any) -> Any:
    if isinstance(value, BindParameter):
        value = value.effective_value
    if isinstance(value, ClauseElement):
        return UNRESOLVED_TENANT
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return value


def _assigned_tenants(pairs: Any) -> list[Any]:
    return [_tenant_value(value) for key, value in pairs if _is_tenant_key(key)]


def _statement_tenants(statement: Insert | Update) -> list[Any]:
    """tenant_id values set in a statement's VALUES or SET clause."""
    pairs = list((statement._values or {}).items())
    pairs.extend(getattr(statement, "_ordered_values", None) or ())
    return _assigned_tenants(pairs)


def _param_rows(execute_state: ORMExecuteState, *, single: bool) -> list[dict[str, Any]]:
    params = execute_state.parameters
    if isinstance(params, dict):
        return [params] if single else []
    return list(params or [])


def _guard_insert(
    execute_state: ORMExecuteState, context: TenantContext, mapper: Mapper[Any]
) -> None:
    """Stamp and validate tenant_id on an INSERT statement."""
    statement = execute_state.statement
    entity = mapper.class_
    if statement.select is not None:
        if not context.is_system:
            raise TenantContextRequired(
                "INSERT ... SELECT into tenant-aware tables needs a system context"
            )
        return

    assigned = _statement_tenants(statement)
    stated = bool(assigned)
    for values in statement._multi_values:
        for row in values:
            found = _assigned_tenants(row.items()) if isinstance(row, dict) else []
            if not found:
                raise TenantContextRequired("Multi-row VALUES must set tenant_id on every row")
            assigned.extend(found)

    rows = _param_rows(execute_state, single=True)
    for row in rows:
        found = _assigned_tenants(row.items())
        if found:
            assigned.extend(found)
        elif not stated:
            if context.is_system:
                raise TenantContextRequired("System-scope writes must set tenant_id explicitly")
            # Parameter sets are stamped in place
            row["tenant_id"] = context.tenant_id

    if not assigned and not rows and not statement._multi_values:
        if context.is_system:
            raise TenantContextRequired("System-scope writes must set tenant_id explicitly")
        execute_state.statement = statement.values(tenant_id=context.tenant_id)
        return

    for value in assigned:
        if context.is_system:
            if value is None:
                raise TenantContextRequired("System-scope writes must set tenant_id explicitly")
        elif value != context.tenant_id:
            raise _reject(context, value, entity, "create")


def _guard_update(
    execute_state: ORMExecuteState, context: TenantContext, mapper: Mapper[Any]
) -> None:
    """Refuse UPDATEs that move rows between tenants."""
    assigned = _statement_tenants(execute_state.statement)
    for row in _param_rows(execute_state, single=False):
        assigned.extend(_assigned_tenants(row.items()))
    for value in assigned:
        # tenant_id is immutable once persisted
        if context.is_system or value != context.tenant_id:
            raise _reject(context, value, mapper.class_, "reassign")


@event.listens_for(Session, "do_orm_execute")
def _scope_orm_execute(execute_state: ORMExecuteState) -> None:
    """Inject tenant criteria into statements and guard tenant-aware writes."""
    if execute_state.is_column_load:
        return

    context = get_tenant_context(execute_state.session)
    mapper = _tenant_mapper(execute_state)
    if context is None:
        if mapper is not None or any(is_tenant_scoped(m.class_) for m in execute_state.all_mappers):
            raise TenantContextRequired()
        return

    statement = execute_state.statement
    if mapper is not None:
        if not execute_state.is_orm_statement and not context.is_system:
            # Core statements bypass loader criteria and flush checks
            raise TenantContextRequired(
                "Core statements against tenant-aware tables need a system context"
            )
        if isinstance(statement, Insert):
            _guard_insert(execute_state, context, mapper)
            return
        if isinstance(statement, Update):
            _guard_update(execute_state, context, mapper)

    if context.is_system:
        return

    tenant_id = context.tenant_id

    # Criteria are applied to every select; entities named only in
    # select_from() or a join are not listed in all_mappers
    if execute_state.is_select and isinstance(statement, Select):
        execute_state.statement = statement.options(
            with_loader_criteria(
                TenantMixin,
                lambda cls: cls.tenant_id == tenant_id,
                include_aliases=True,
            )
        )
    elif mapper is not None:
        execute_state.statement = statement.where(mapper.class_.tenant_id == tenant_id)


@event.listens_for(Session, "before_flush")
def _enforce_on_flush(session: Session, flush_context: Any, instances: Any) -> None:
    """Stamp and validate tenant_id on pending changes."""
    new = [obj for obj in session.new if is_tenant_scoped(obj)]
    dirty = [obj for obj in session.dirty if is_tenant_scoped(obj)]
    deleted = [obj for obj in session.deleted if is_tenant_scoped(obj)]
    if not (new or dirty or deleted):
        return

    context = get_tenant_context(session)
    if context is None:
        raise TenantContextRequired()

    for obj in new:
        if obj.tenant_id is None:
            if context.is_system:
                raise TenantContextRequired(
                    "System-scope writes must set tenant_id explicitly"
                )
            obj.tenant_id = context.tenant_id
        elif not context.is_system and obj.tenant_id != context.tenant_id:
            raise _reject(context, obj.tenant_id, obj, "create")

    for obj in dirty:
        history = inspect(obj).attrs.tenant_id.history
        original = history.deleted[0] if history.deleted else obj.tenant_id
        if history.deleted and history.added and history.added[0] != original:
            # tenant_id is immutable once persisted
            raise _reject(context, history.added[0], obj, "reassign")
        if not context.is_system and original != context.tenant_id:
            raise _reject(context, original, obj, "update")

    for obj in deleted:
        if not context.is_system and obj.tenant_id != context.tenant_id:
            raise _reject(context, obj.tenant_id, obj, "delete")


# ============================================================
# Session wrapper
# ============================================================


class TenantSession:
    """Wraps AsyncSession with a bound tenant context.

    Filtering and stamping happen in the session event listeners above;
    this wrapper binds the context and adds the identity-map check for
    ``get``.

    Usage:
        tenant_session = TenantSession(session, TenantContext.for_tenant(tenant_id))
        result = await tenant_session.execute(select(Project))
    """

    def __init__(self, session: AsyncSession, context: TenantContext) -> None:
        self.session = session
        self.context = context
        bind_tenant_context(session, context)

    @property
    def tenant_id(self) -> UUID | None:
        return self.context.tenant_id

    def _visible(self, obj: Any) -> bool:
        if self.context.is_system or not is_tenant_scoped(obj):
            return True
        return obj.tenant_id == self.context.tenant_id

    async def execute(self, statement: Any, *args: Any, **kwargs: Any) -> Any:
        """Execute a statement under the bound tenant context."""
        return await self.session.execute(statement, *args, **kwargs)

    async def scalars(self, statement: Any, *args: Any, **kwargs: Any) -> Any:
        return await self.session.scalars(statement, *args, **kwargs)

    async def scalar(self, statement: Any, *args: Any, **kwargs: Any) -> Any:
        return await self.session.scalar(statement, *args, **kwargs)

    async def get(self, entity: type[T], ident: Any) -> T | None:
        """Get an entity by primary key, scoped to tenant.

        Rows of another tenant come back as ``None``, even when they are
        already present in the identity map.
        """
        obj = await self.session.get(entity, ident)
        if obj is not None and not self._visible(obj):
            return None
        return obj

    def add(self, instance: Any) -> None:
        """Add an instance; tenant_id is stamped on flush when unset."""
        if is_tenant_scoped(instance) and instance.tenant_id is None and not self.context.is_system:
            instance.tenant_id = self.context.tenant_id
        self.session.add(instance)

    async def delete(self, instance: Any) -> None:
        """Mark an instance for deletion.

        Raises:
            TenantMismatchError: If the instance belongs to another tenant
        """
        if not self._visible(instance):
            raise _reject(self.context, instance.tenant_id, instance, "delete")
        await self.session.delete(instance)

    async def flush(self) -> None:
        """Flush pending changes to the database."""
        await self.session.flush()

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        await self.session.rollback()

    async def refresh(self, instance: Any) -> None:
        """Refresh an instance from the database."""
        await self.session.refresh(instance)
