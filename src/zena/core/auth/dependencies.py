"""FastAPI dependencies for authentication and request context.

This module provides FastAPI dependency injection functions for:
- Extracting and validating bearer tokens
- Loading the current user
- Building the per-request ``TenantContext``
"""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from zena.core.auth.schemas import TokenClaims
from zena.core.auth.service import AuthSvc
from zena.core.constants import TENANT_HEADER
from zena.core.database.session import DBSession
from zena.core.database.tenant import TenantContext
from zena.core.errors import MalformedTokenError, TenantMismatchError
from zena.core.logging.middleware import get_client_ip
from zena.modules.tenants.models import Tenant
from zena.modules.users.models import User


logger = structlog.get_logger()

# HTTP Bearer token security scheme
bearer_scheme = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    """Extract the raw bearer token.

    Raises:
        MalformedTokenError: If no bearer token was sent
    """
    if not credentials or not credentials.credentials:
        raise MalformedTokenError()
    return credentials.credentials


BearerToken = Annotated[str, Depends(get_bearer_token)]


async def get_token_claims(token: BearerToken, auth: AuthSvc) -> TokenClaims:
    """Validate the bearer token, including revocation."""
    return await auth.validate_token(token)


async def get_current_user(
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    auth: AuthSvc,
) -> User:
    """Get the currently authenticated user.

    Raises:
        TokenError: If the subject no longer exists or is inactive
    """
    return await auth.get_subject(claims)


CurrentUser = Annotated[User, Depends(get_current_user)]


def _reject_tenant_header(user: User, requested: str, request: Request) -> TenantMismatchError:
    logger.error(
        "tenant_mismatch",
        operation="request",
        user_id=str(user.id),
        expected_tenant=str(user.tenant_id) if user.tenant_id else None,
        actual_tenant=requested,
        path=str(request.url.path),
    )
    return TenantMismatchError(expected=user.tenant_id, actual=requested)


async def get_request_context(
    request: Request,
    user: CurrentUser,
    db: DBSession,
) -> TenantContext:
    """Build the tenant context of the current request.

    Tenant-bound users always act in their own tenant; an ``X-Tenant-ID``
    header naming any other tenant is rejected. System-global users act
    unscoped unless the header narrows them into one tenant.

    Raises:
        TenantMismatchError: If the tenant header does not match the token
    """
    header = request.headers.get(TENANT_HEADER)
    requested: UUID | None = None
    if header:
        try:
            requested = UUID(header)
        except ValueError:
            raise _reject_tenant_header(user, header, request) from None

    metadata = {
        "request_id": getattr(request.state, "request_id", None),
        "ip_address": get_client_ip(request),
        "user_agent": request.headers.get("User-Agent"),
    }

    if user.tenant_id is not None:
        if requested is not None and requested != user.tenant_id:
            raise _reject_tenant_header(user, header or "", request)
        context = TenantContext.for_tenant(user.tenant_id, user.id, **metadata)
    elif requested is not None:
        tenant = await db.get(Tenant, requested)
        if tenant is None or not tenant.is_active:
            raise _reject_tenant_header(user, header or "", request)
        context = TenantContext.for_tenant(requested, user.id, **metadata)
        logger.info("system_user_narrowed", user_id=str(user.id), tenant_id=str(requested))
    else:
        context = TenantContext.system(
            reason=f"{request.method} {request.url.path}",
            actor_id=user.id,
            **metadata,
        )

    request.state.tenant_id = context.tenant_id
    request.state.user_id = user.id
    structlog.contextvars.bind_contextvars(
        tenant_id=str(context.tenant_id) if context.tenant_id else None,
        user_id=str(user.id),
    )
    return context


RequestContext = Annotated[TenantContext, Depends(get_request_context)]
