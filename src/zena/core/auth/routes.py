"""Authentication API routes.

Provides endpoints for:
- Login with email and password
- Token refresh
- Logout of one session or all sessions
- The current user's profile and permissions
"""

from fastapi import APIRouter, Request, status

from zena.api.dependencies import Audit, CurrentPrincipal
from zena.config import settings
from zena.core.audit.recorder import AuditRecorder
from zena.core.auth.dependencies import BearerToken, CurrentUser
from zena.core.auth.schemas import LoginRequest, TokenResponse
from zena.core.auth.service import AuthSvc
from zena.core.database.session import DBSession
from zena.core.errors import AuthenticationError
from zena.core.logging.middleware import get_client_ip
from zena.core.rate_limit import rate_limit
from zena.modules.users.schemas import CurrentUserResponse


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with email and password",
    description="Authenticate with email and password to receive a session token.",
)
@rate_limit(requests=settings.login_rate_limit_requests, window=settings.login_rate_limit_window)
async def login(
    data: LoginRequest,
    service: AuthSvc,
    db: DBSession,
    request: Request,
) -> TokenResponse:
    """Login with email and password."""
    ip_address = get_client_ip(request)
    user_agent = request.headers.get("User-Agent")
    audit = AuditRecorder(db)

    try:
        user = await service.authenticate(data.email, data.password, ip_address=ip_address)
    except AuthenticationError as exc:
        await audit.log_action(
            None,
            "auth.login_failed",
            "user",
            new_values={"email": data.email, "reason": exc.reason},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        # Keep the failure on record; the request itself is rolled back
        await db.commit()
        raise

    issued = service.issue_token(user)
    await audit.log_action(
        user.id,
        "auth.login",
        "user",
        user.id,
        new_values={"jti": issued.claims.jti},
        ip_address=ip_address,
        user_agent=user_agent,
        tenant_id=user.tenant_id,
    )
    return TokenResponse.from_issued(issued)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh session token",
    description=(
        "Exchange a valid token for a new one. The presented token stays valid "
        "until its own expiry."
    ),
)
async def refresh_token(token: BearerToken, service: AuthSvc) -> TokenResponse:
    issued = await service.refresh_token(token)
    return TokenResponse.from_issued(issued)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout",
    description="Revoke the presented token.",
)
async def logout(
    token: BearerToken,
    current_user: CurrentUser,
    service: AuthSvc,
    audit: Audit,
) -> None:
    await service.revoke(token)
    await audit.log_action(current_user.id, "auth.logout", "user", current_user.id)


@router.post(
    "/logout-all",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout from all devices",
    description="Invalidate every token issued to the current user so far.",
)
async def logout_all(
    current_user: CurrentUser,
    service: AuthSvc,
    audit: Audit,
) -> None:
    await service.revoke_all(current_user.id)
    await audit.log_action(current_user.id, "auth.logout_all", "user", current_user.id)


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    summary="Get current user",
    description="Returns the authenticated user's profile and effective permissions.",
)
async def get_me(current_user: CurrentUser, principal: CurrentPrincipal) -> CurrentUserResponse:
    """Get current user profile."""
    response = CurrentUserResponse.model_validate(current_user)
    response.permissions = sorted(principal.permissions)
    return response
