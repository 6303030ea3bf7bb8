"""Rate limiting with Redis sliding window algorithm."""

from zena.core.rate_limit.backend import RateLimitResult, SlidingWindowRateLimiter
from zena.core.rate_limit.decorators import rate_limit


__all__ = [
    "RateLimitResult",
    "SlidingWindowRateLimiter",
    "rate_limit",
]
