"""Request ID and log context middleware.

These middlewares only enrich ``request.state`` and the structlog
context. Authentication and tenant scoping are enforced by the route
dependencies in ``zena.core.auth.dependencies``.
"""

import uuid
from typing import TYPE_CHECKING

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from zena.core.auth.backend import decode_token
from zena.core.constants import REQUEST_ID_HEADER
from zena.core.errors import TokenError


if TYPE_CHECKING:
    from starlette.types import ASGIApp


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Tags logs with the tenant and user of a bearer token, if valid."""

    def __init__(
        self,
        app: "ASGIApp",
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.exclude_paths = exclude_paths or [
            "/health",
            "/docs",
            "/redoc",
            "/openapi.json",
            "/api/v1/auth/login",
        ]

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if any(request.url.path.startswith(path) for path in self.exclude_paths):
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            try:
                claims = decode_token(auth_header.split(" ", 1)[1])
            except TokenError:
                claims = None

            if claims is not None:
                request.state.tenant_id = claims.tenant_id
                request.state.user_id = claims.user_id
                structlog.contextvars.bind_contextvars(
                    tenant_id=str(claims.tenant_id) if claims.tenant_id else None,
                    user_id=str(claims.user_id),
                )

        return await call_next(request)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware that adds a unique request ID to each request.

    The request ID is added to:
    - request.state.request_id
    - Response header X-Request-ID
    - Structlog context
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        structlog.contextvars.unbind_contextvars("request_id", "tenant_id", "user_id")

        return response
