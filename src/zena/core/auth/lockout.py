"""Login lockout backed by Redis.

Failed logins are counted per identity in a sliding window. Reaching
``LOGIN_MAX_ATTEMPTS`` locks the identity for ``LOGIN_LOCKOUT_SECONDS``;
a successful login clears the counter.
"""

import structlog

from zena.config import Settings, get_settings
from zena.core.cache.redis import redis_client
from zena.core.rate_limit.backend import SlidingWindowRateLimiter


logger = structlog.get_logger()


class LoginLockout:
    """Tracks failed logins and locks identities that exceed the limit."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.attempts = SlidingWindowRateLimiter(prefix="auth_attempts")

    @staticmethod
    def _identity(email: str) -> str:
        return email.strip().lower()

    @staticmethod
    def _lock_key(identity: str) -> str:
        return f"auth_lockout:{identity}"

    async def is_locked(self, email: str) -> bool:
        """Whether the identity is currently locked out."""
        async with redis_client() as client:
            return bool(await client.exists(self._lock_key(self._identity(email))))

    async def record_failure(self, email: str) -> bool:
        """Count a failed attempt.

        Returns:
            True if this failure locked the identity
        """
        identity = self._identity(email)
        result = await self.attempts.is_allowed(
            identifier=identity,
            limit=self.settings.login_max_attempts - 1,
            window=self.settings.login_attempt_window_seconds,
        )
        if result.allowed:
            return False

        async with redis_client() as client:
            await client.set(self._lock_key(identity), "1", ex=self.settings.login_lockout_seconds)
        await self.attempts.reset(identity)
        logger.warning(
            "account_locked",
            email=identity,
            lockout_seconds=self.settings.login_lockout_seconds,
        )
        return True

    async def clear(self, email: str) -> None:
        """Forget failed attempts after a successful login."""
        await self.attempts.reset(self._identity(email))


def get_login_lockout() -> LoginLockout:
    """Dependency that provides the login lockout tracker."""
    return LoginLockout()
