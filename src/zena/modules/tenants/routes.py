"""Tenant API routes."""

from fastapi import APIRouter

from zena.api.dependencies import CurrentPrincipal, DBSession
from zena.core.errors import NotFoundError
from zena.modules.tenants.models import Tenant
from zena.modules.tenants.schemas import TenantResponse, TenantSettings


router = APIRouter(prefix="/tenants", tags=["tenants"])


@router.get(
    "/current",
    response_model=TenantResponse,
    summary="Current tenant",
    description="The tenant the caller is acting in, with its validated settings.",
)
async def get_current_tenant(db: DBSession, principal: CurrentPrincipal) -> TenantResponse:
    # System callers only have a current tenant once X-Tenant-ID narrows them
    tenant = await db.get(Tenant, principal.tenant_id) if principal.tenant_id else None
    if tenant is None:
        raise NotFoundError("No current tenant", resource="tenant")

    return TenantResponse(
        id=tenant.id,
        name=tenant.name,
        domain=tenant.domain,
        is_active=tenant.is_active,
        settings=TenantSettings.from_raw(tenant.settings),
    )
