"""Tests for TenantContext construction and session binding."""

from dataclasses import FrozenInstanceError
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from zena.core.database.tenant import (
    TenantContext,
    TenantContextRequired,
    bind_tenant_context,
    get_tenant_context,
    is_tenant_scoped,
    scoped,
)
from zena.modules.projects.models import Project
from zena.modules.tenants.models import Tenant


pytestmark = pytest.mark.unit


class TestTenantContext:
    def test_for_tenant(self):
        tenant_id, user_id = uuid4(), uuid4()

        context = TenantContext.for_tenant(tenant_id, user_id, request_id="req-1")

        assert context.tenant_id == tenant_id
        assert context.user_id == user_id
        assert context.is_system is False
        assert context.request_id == "req-1"

    def test_tenant_context_needs_tenant(self):
        with pytest.raises(TenantContextRequired):
            TenantContext(tenant_id=None)

    def test_system_context(self):
        context = TenantContext.system(reason="retention cleanup")

        assert context.is_system is True
        assert context.tenant_id is None
        assert context.reason == "retention cleanup"

    def test_narrowed_to(self):
        tenant_id = uuid4()
        system = TenantContext.system(reason="support", actor_id=uuid4())

        narrowed = system.narrowed_to(tenant_id)

        assert narrowed.tenant_id == tenant_id
        assert narrowed.is_system is False
        assert narrowed.user_id == system.user_id

    def test_is_immutable(self):
        context = TenantContext.for_tenant(uuid4())

        with pytest.raises(FrozenInstanceError):
            context.tenant_id = uuid4()


class TestBinding:
    def test_bind_and_clear(self):
        session = MagicMock(info={})
        context = TenantContext.for_tenant(uuid4())

        bind_tenant_context(session, context)
        assert get_tenant_context(session) is context

        bind_tenant_context(session, None)
        assert get_tenant_context(session) is None

    def test_scoped_restores_previous_context(self):
        session = MagicMock(info={})
        outer = TenantContext.for_tenant(uuid4())
        inner = TenantContext.system(reason="test")
        bind_tenant_context(session, outer)

        with scoped(session, inner):
            assert get_tenant_context(session) is inner

        assert get_tenant_context(session) is outer

    def test_sessions_do_not_share_contexts(self):
        first, second = MagicMock(info={}), MagicMock(info={})

        bind_tenant_context(first, TenantContext.for_tenant(uuid4()))

        assert get_tenant_context(second) is None


def test_is_tenant_scoped():
    assert is_tenant_scoped(Project) is True
    assert is_tenant_scoped(Project(name="Alpha")) is True
    assert is_tenant_scoped(Tenant) is False
