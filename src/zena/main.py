"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import zena.models  # noqa: F401
from zena.api.router import api_router
from zena.config import settings
from zena.core.auth import RequestIdMiddleware, TenantContextMiddleware
from zena.core.cache import close_redis_pool
from zena.core.constants import REQUEST_ID_HEADER, TENANT_HEADER
from zena.core.errors import register_exception_handlers
from zena.core.logging import RequestLoggingMiddleware, configure_logging
from zena.core.policies import policies


configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
        policies=len(policies.registered()),
    )

    yield

    logger.info("application_shutdown")
    await close_redis_pool()
    logger.info("redis_pool_closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant project management API",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER, TENANT_HEADER],
    )

    # Starlette runs the last added middleware first
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(TenantContextMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # RFC 7807 error responses
    register_exception_handlers(app)

    app.include_router(api_router)

    return app

