"""Tests for the Redis-backed login lockout."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from zena.config import settings
from zena.core.auth.lockout import LoginLockout
from zena.core.rate_limit.backend import RateLimitResult


pytestmark = pytest.mark.unit


def _result(allowed: bool) -> RateLimitResult:
    return RateLimitResult(allowed=allowed, limit=4, remaining=0, reset_time=0)


@pytest.fixture
def redis_mock():
    client = MagicMock()
    client.exists = AsyncMock(return_value=0)
    client.set = AsyncMock()
    with patch("zena.core.auth.lockout.redis_client") as factory:
        factory.return_value.__aenter__ = AsyncMock(return_value=client)
        factory.return_value.__aexit__ = AsyncMock(return_value=None)
        yield client


@pytest.fixture
def lockout() -> LoginLockout:
    lockout = LoginLockout(settings.model_copy(update={"login_max_attempts": 5, "login_lockout_seconds": 900}))
    lockout.attempts = MagicMock()
    lockout.attempts.is_allowed = AsyncMock(return_value=_result(True))
    lockout.attempts.reset = AsyncMock()
    return lockout


class TestLoginLockout:
    async def test_not_locked_by_default(self, lockout, redis_mock):
        assert await lockout.is_locked("someone@example.com") is False
        redis_mock.exists.assert_awaited_once_with("auth_lockout:someone@example.com")

    async def test_identity_is_normalized(self, lockout, redis_mock):
        redis_mock.exists.return_value = 1

        assert await lockout.is_locked("  Someone@Example.COM ") is True
        redis_mock.exists.assert_awaited_once_with("auth_lockout:someone@example.com")

    async def test_failure_below_limit_does_not_lock(self, lockout, redis_mock):
        assert await lockout.record_failure("someone@example.com") is False
        redis_mock.set.assert_not_awaited()

    async def test_failure_at_limit_locks(self, lockout, redis_mock):
        lockout.attempts.is_allowed.return_value = _result(False)

        assert await lockout.record_failure("someone@example.com") is True

        redis_mock.set.assert_awaited_once_with("auth_lockout:someone@example.com", "1", ex=900)
        lockout.attempts.reset.assert_awaited_once_with("someone@example.com")

    async def test_limit_counts_previous_failures(self, lockout, redis_mock):
        await lockout.record_failure("someone@example.com")

        kwargs = lockout.attempts.is_allowed.await_args.kwargs
        assert kwargs["limit"] == 4
        assert kwargs["window"] == settings.login_attempt_window_seconds

    async def test_clear_resets_attempts(self, lockout):
        await lockout.clear("Someone@Example.com")

        lockout.attempts.reset.assert_awaited_once_with("someone@example.com")
