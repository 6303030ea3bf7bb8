"""ARQ worker configuration.

Defines the worker settings including registered jobs,
cron schedules, and startup/shutdown hooks.
"""

from typing import Any, ClassVar

import structlog
from arq import cron
from arq.connections import RedisSettings
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import zena.models  # noqa: F401
from zena.config import settings
from zena.core.jobs.tasks.cleanup import cleanup_audit_logs, cleanup_revoked_tokens
from zena.core.logging import configure_logging


def get_redis_settings() -> RedisSettings:
    """Build ARQ Redis settings from REDIS_URL."""
    return RedisSettings.from_dsn(str(settings.redis_url))


async def startup(ctx: dict[str, Any]) -> None:
    """Initialize resources for the worker.

    Args:
        ctx: Worker context dict (shared across all jobs)
    """
    configure_logging()
    log = structlog.get_logger()
    log.info("worker_startup", environment=settings.environment)

    engine = create_async_engine(
        settings.async_database_url,
        echo=settings.database_echo,
    )
    ctx["db_engine"] = engine
    ctx["db_session_factory"] = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    log.info("worker_startup_complete")


async def shutdown(ctx: dict[str, Any]) -> None:
    """Cleanup resources when the worker stops.

    Args:
        ctx: Worker context dict
    """
    log = structlog.get_logger()
    log.info("worker_shutdown")

    engine = ctx.get("db_engine")
    if engine:
        await engine.dispose()
        log.info("database_engine_disposed")


class WorkerSettings:
    """ARQ worker settings.

    Run the worker with:
        arq zena.core.jobs.worker.WorkerSettings
    """

    functions: ClassVar[list[Any]] = [
        cleanup_audit_logs,
        cleanup_revoked_tokens,
    ]

    # Unique cron jobs: a second worker never runs the same schedule twice
    cron_jobs: ClassVar[list[Any]] = [
        cron(cleanup_audit_logs, hour=3, minute=0, unique=True),
        cron(cleanup_revoked_tokens, hour=3, minute=30, unique=True),
    ]

    on_startup = startup
    on_shutdown = shutdown

    redis_settings = get_redis_settings()

    max_jobs = 10
    job_timeout = 300  # 5 minutes per job
    keep_result = 3600
    retry_jobs = True
    max_tries = 3
