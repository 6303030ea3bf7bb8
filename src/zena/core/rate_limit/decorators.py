"""Rate limiting decorator for per-route configuration."""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from fastapi import Request
from starlette.responses import JSONResponse, Response

from zena.config import settings
from zena.core.logging.middleware import get_client_ip
from zena.core.rate_limit import backend


P = ParamSpec("P")
T = TypeVar("T")


def rate_limit(
    requests: int | None = None,
    window: int | None = None,
    key_func: Callable[[Request], str] | None = None,
) -> Callable[
    [Callable[P, Awaitable[T]]], Callable[P, Awaitable[T | Response]]
]:
    """Decorator to apply a rate limit to a route.

    The route must accept a ``request: Request`` parameter.

    Args:
        requests: Maximum requests allowed in window (default: from settings)
        window: Time window in seconds (default: from settings)
        key_func: Custom function to extract identifier from request

    Example:
        @router.post("/auth/login")
        @rate_limit(requests=10, window=60)
        async def login(request: Request, ...):
            ...
    """
    limit = requests or settings.rate_limit_requests
    window_seconds = window or settings.rate_limit_window

    def decorator(
        func: Callable[P, Awaitable[T]],
    ) -> Callable[P, Awaitable[T | Response]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T | Response:
            request = kwargs.get("request")
            if not isinstance(request, Request) or not settings.rate_limit_enabled:
                return await func(*args, **kwargs)

            identifier = key_func(request) if key_func else _get_default_identifier(request)

            result = await backend.rate_limiter.is_allowed(
                identifier=identifier,
                limit=limit,
                window=window_seconds,
                endpoint=request.url.path,
            )

            if not result.allowed:
                return JSONResponse(
                    status_code=429,
                    content={
                        "type": f"{settings.api_docs_base_url}/errors/rate_limit_exceeded",
                        "title": "Too Many Requests",
                        "status": 429,
                        "detail": "Rate limit exceeded",
                    },
                    headers={
                        "X-RateLimit-Limit": str(result.limit),
                        "X-RateLimit-Remaining": "0",
                        "X-RateLimit-Reset": str(result.reset_time),
                        "Retry-After": str(result.retry_after),
                    },
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator


def _get_default_identifier(request: Request) -> str:
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_client_ip(request)}"
