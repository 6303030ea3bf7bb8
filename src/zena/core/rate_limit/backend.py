"""Redis sliding window rate limiter.

Uses Redis sorted sets (ZSET): each hit is stored with its timestamp as
the score, old hits are trimmed and the remainder is counted.
"""

import time
from dataclasses import dataclass
from uuid import uuid4

from zena.core.cache.redis import redis_client


@dataclass
class RateLimitResult:
    """Result of a rate limit check."""

    allowed: bool
    limit: int
    remaining: int
    reset_time: int
    retry_after: int | None = None


class SlidingWindowRateLimiter:
    """Redis-based sliding window rate limiter."""

    def __init__(self, prefix: str = "ratelimit") -> None:
        self.prefix = prefix

    def _build_key(self, identifier: str, endpoint: str | None = None) -> str:
        if endpoint:
            endpoint_key = endpoint.replace("/", "_").strip("_")
            return f"{self.prefix}:{identifier}:{endpoint_key}"
        return f"{self.prefix}:{identifier}"

    async def is_allowed(
        self,
        identifier: str,
        limit: int,
        window: int,
        endpoint: str | None = None,
    ) -> RateLimitResult:
        """Record a hit and check it against the limit.

        Args:
            identifier: User ID, IP address or login identity
            limit: Maximum number of hits allowed in the window
            window: Time window in seconds
            endpoint: Optional endpoint for per-route limits

        Returns:
            RateLimitResult with allowed status and metadata
        """
        key = self._build_key(identifier, endpoint)
        now = time.time()
        window_start = now - window

        async with redis_client() as client, client.pipeline(transaction=True) as pipe:
            pipe.zremrangebyscore(key, 0, window_start)
            # Unique member so concurrent hits in the same instant all count
            pipe.zadd(key, {f"{now}:{uuid4().hex[:8]}": now})
            pipe.zcard(key)
            pipe.expire(key, window)

            results = await pipe.execute()
            count = results[2]

        remaining = max(0, limit - count)
        allowed = count <= limit

        return RateLimitResult(
            allowed=allowed,
            limit=limit,
            remaining=remaining,
            reset_time=int(now + window),
            retry_after=window if not allowed else None,
        )

    async def reset(self, identifier: str, endpoint: str | None = None) -> bool:
        """Forget every hit recorded for an identifier."""
        key = self._build_key(identifier, endpoint)
        async with redis_client() as client:
            result = await client.delete(key)
            return result > 0


# Global rate limiter instance
rate_limiter = SlidingWindowRateLimiter()
