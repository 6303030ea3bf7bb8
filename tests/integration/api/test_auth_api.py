"""Integration tests for authentication endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zena.core.audit.models import AuditLog
from tests.factories.user import TEST_PASSWORD


pytestmark = pytest.mark.integration


async def _login(client: AsyncClient, email: str, password: str = TEST_PASSWORD):
    return await client.post("/api/v1/auth/login", json={"email": email, "password": password})


class TestLogin:
    async def test_login_returns_token(self, client: AsyncClient, admin_a):
        response = await _login(client, admin_a.email)

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["expires_in"] > 0
        assert body["access_token"]

    async def test_login_is_audited(self, client: AsyncClient, admin_a, db: AsyncSession):
        await _login(client, admin_a.email)

        entry = await db.scalar(select(AuditLog).where(AuditLog.action == "auth.login"))
        assert entry.user_id == admin_a.id
        assert entry.tenant_id == admin_a.tenant_id

    async def test_wrong_password(self, client: AsyncClient, admin_a, db: AsyncSession):
        response = await _login(client, admin_a.email, "wrong-password")

        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication failed"
        assert "WWW-Authenticate" in response.headers

        entry = await db.scalar(select(AuditLog).where(AuditLog.action == "auth.login_failed"))
        assert entry.new_data == {"email": admin_a.email, "reason": "invalid_credentials"}

    async def test_unknown_user_looks_like_wrong_password(self, client: AsyncClient, admin_a):
        unknown = await _login(client, "nobody@example.com")
        wrong = await _login(client, admin_a.email, "wrong-password")

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json()["detail"] == wrong.json()["detail"]

    async def test_locked_account(self, client: AsyncClient, admin_a, lockout):
        lockout.is_locked.return_value = True

        response = await _login(client, admin_a.email)

        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication failed"


class TestSession:
    async def test_me_lists_permissions(self, client: AsyncClient, admin_a, headers_a):
        response = await client.get("/api/v1/auth/me", headers=headers_a)

        assert response.status_code == 200
        body = response.json()
        assert body["email"] == admin_a.email
        assert body["tenant_id"] == str(admin_a.tenant_id)
        assert "project.*" in body["permissions"]
        assert body["permissions"] == sorted(body["permissions"])

    @pytest.mark.parametrize(
        "headers",
        [{}, {"Authorization": "Bearer garbage"}, {"Authorization": "Basic abc"}],
    )
    async def test_me_requires_valid_token(self, client: AsyncClient, headers):
        response = await client.get("/api/v1/auth/me", headers=headers)

        assert response.status_code == 401

    async def test_logout_revokes_only_that_token(self, client: AsyncClient, admin_a):
        first = {"Authorization": f"Bearer {(await _login(client, admin_a.email)).json()['access_token']}"}
        second = {"Authorization": f"Bearer {(await _login(client, admin_a.email)).json()['access_token']}"}

        response = await client.post("/api/v1/auth/logout", headers=first)

        assert response.status_code == 204
        assert (await client.get("/api/v1/auth/me", headers=first)).status_code == 401
        assert (await client.get("/api/v1/auth/me", headers=second)).status_code == 200

    async def test_logout_all(self, client: AsyncClient, admin_a):
        first = {"Authorization": f"Bearer {(await _login(client, admin_a.email)).json()['access_token']}"}
        second = {"Authorization": f"Bearer {(await _login(client, admin_a.email)).json()['access_token']}"}

        response = await client.post("/api/v1/auth/logout-all", headers=first)

        assert response.status_code == 204
        assert (await client.get("/api/v1/auth/me", headers=first)).status_code == 401
        assert (await client.get("/api/v1/auth/me", headers=second)).status_code == 401

    async def test_refresh(self, client: AsyncClient, admin_a, headers_a):
        response = await client.post("/api/v1/auth/refresh", headers=headers_a)

        assert response.status_code == 200
        refreshed = {"Authorization": f"Bearer {response.json()['access_token']}"}
        assert (await client.get("/api/v1/auth/me", headers=refreshed)).status_code == 200
        assert (await client.get("/api/v1/auth/me", headers=headers_a)).status_code == 200
