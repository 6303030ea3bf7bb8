"""Integration tests for the project endpoints.

Covers tenant isolation over HTTP, policy checks per role and the audit
trail written by each change.
"""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zena.core.database.tenant import TenantContext, scoped
from zena.core.permissions.catalog import create_system_roles
from zena.modules.projects.models import Project
from tests.factories.user import bearer


pytestmark = pytest.mark.integration

PROJECTS = "/api/v1/projects"


async def _create(client: AsyncClient, headers: dict[str, str], **payload) -> dict:
    response = await client.post(PROJECTS, json={"name": "Alpha", **payload}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def system_headers(db: AsyncSession, make_user) -> dict[str, str]:
    roles = await create_system_roles(db)
    await db.commit()
    return bearer(await make_user(None, roles=roles))


class TestTenantIsolation:
    async def test_projects_are_invisible_across_tenants(
        self,
        client: AsyncClient,
        tenant_a,
        headers_a,
        headers_b,
    ):
        created = await _create(client, headers_a)

        assert created["tenant_id"] == str(tenant_a.id)
        assert (await client.get(f"{PROJECTS}/{created['id']}", headers=headers_b)).status_code == 404
        own = await client.get(f"{PROJECTS}/{created['id']}", headers=headers_a)
        assert own.status_code == 200
        assert own.json()["name"] == "Alpha"
        assert (await client.get(PROJECTS, headers=headers_b)).json() == []
        assert [p["id"] for p in (await client.get(PROJECTS, headers=headers_a)).json()] == [created["id"]]

    async def test_foreign_project_looks_missing(self, client: AsyncClient, headers_a, headers_b):
        created = await _create(client, headers_a)

        foreign = await client.get(f"{PROJECTS}/{created['id']}", headers=headers_b)
        missing = await client.get(f"{PROJECTS}/{uuid4()}", headers=headers_b)

        assert foreign.status_code == missing.status_code == 404
        assert foreign.json()["detail"] == missing.json()["detail"]

    async def test_foreign_project_cannot_be_changed(self, client: AsyncClient, headers_a, headers_b):
        created = await _create(client, headers_a)
        url = f"{PROJECTS}/{created['id']}"

        assert (await client.patch(url, json={"name": "Hijacked"}, headers=headers_b)).status_code == 404
        assert (await client.delete(url, headers=headers_b)).status_code == 404
        assert (await client.get(url, headers=headers_a)).json()["name"] == "Alpha"

    async def test_mismatched_tenant_header(self, client: AsyncClient, tenant_b, headers_a):
        response = await client.get(PROJECTS, headers={**headers_a, "X-Tenant-ID": str(tenant_b.id)})

        assert response.status_code == 403
        assert response.json()["type"].endswith("/errors/tenant_mismatch")

    async def test_matching_tenant_header(self, client: AsyncClient, tenant_a, headers_a):
        response = await client.get(PROJECTS, headers={**headers_a, "X-Tenant-ID": str(tenant_a.id)})

        assert response.status_code == 200

    async def test_foreign_tenant_in_body_is_rejected(
        self,
        client: AsyncClient,
        db: AsyncSession,
        tenant_b,
        headers_a,
    ):
        response = await client.post(
            PROJECTS,
            json={"name": "Smuggled", "tenant_id": str(tenant_b.id)},
            headers=headers_a,
        )

        assert response.status_code == 403
        assert response.json()["type"].endswith("/errors/tenant_mismatch")
        with scoped(db, TenantContext.system(reason="test")):
            assert (await db.scalars(select(Project))).all() == []


class TestPolicies:
    async def test_client_cannot_create(self, client: AsyncClient, make_user, tenant_a, roles_a):
        headers = bearer(await make_user(tenant_a, roles=[roles_a["Client"]]))

        response = await client.post(PROJECTS, json={"name": "Alpha"}, headers=headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Forbidden"

    async def test_pm_can_create_but_not_delete(self, client: AsyncClient, make_user, tenant_a, roles_a):
        headers = bearer(await make_user(tenant_a, roles=[roles_a["PM"]]))

        created = await _create(client, headers)

        assert (await client.delete(f"{PROJECTS}/{created['id']}", headers=headers)).status_code == 403

    async def test_user_without_roles_sees_nothing(self, client: AsyncClient, make_user, tenant_a):
        headers = bearer(await make_user(tenant_a))

        assert (await client.get(PROJECTS, headers=headers)).status_code == 403


class TestChanges:
    async def test_update_is_audited(self, client: AsyncClient, admin_a, headers_a):
        created = await _create(client, headers_a)
        url = f"{PROJECTS}/{created['id']}"

        updated = await client.patch(url, json={"name": "Beta"}, headers=headers_a)
        trail = await client.get(f"/api/v1/audit/project/{created['id']}", headers=headers_a)

        assert updated.json()["name"] == "Beta"
        entries = trail.json()
        assert [entry["action"] for entry in entries] == ["project.created", "project.updated"]
        assert entries[1]["old_data"]["name"] == "Alpha"
        assert entries[1]["new_data"]["name"] == "Beta"
        assert entries[1]["user_id"] == str(admin_a.id)

    async def test_noop_update_is_not_audited(self, client: AsyncClient, headers_a):
        created = await _create(client, headers_a)

        await client.patch(f"{PROJECTS}/{created['id']}", json={"name": "Alpha"}, headers=headers_a)
        trail = await client.get(f"/api/v1/audit/project/{created['id']}", headers=headers_a)

        assert [entry["action"] for entry in trail.json()] == ["project.created"]

    async def test_audit_trail_is_tenant_scoped(self, client: AsyncClient, headers_a, headers_b):
        created = await _create(client, headers_a)

        trail = await client.get(f"/api/v1/audit/project/{created['id']}", headers=headers_b)

        assert trail.status_code == 200
        assert trail.json() == []

    async def test_delete(self, client: AsyncClient, headers_a):
        created = await _create(client, headers_a)
        url = f"{PROJECTS}/{created['id']}"
        await client.post(f"{url}/tasks", json={"title": "Pour slab"}, headers=headers_a)

        assert (await client.delete(url, headers=headers_a)).status_code == 204
        assert (await client.get(url, headers=headers_a)).status_code == 404

        log = await client.get("/api/v1/audit", params={"entity_type": "project"}, headers=headers_a)
        assert [entry["action"] for entry in log.json()] == ["project.deleted", "project.created"]


class TestTasks:
    async def test_create_and_list(self, client: AsyncClient, admin_a, headers_a):
        project = await _create(client, headers_a)
        url = f"{PROJECTS}/{project['id']}/tasks"

        created = await client.post(
            url,
            json={"title": "Pour slab", "assignee_id": str(admin_a.id)},
            headers=headers_a,
        )
        listed = await client.get(url, headers=headers_a)

        assert created.status_code == 201
        assert created.json()["tenant_id"] == project["tenant_id"]
        assert [task["title"] for task in listed.json()] == ["Pour slab"]

    async def test_assignee_from_another_tenant(self, client: AsyncClient, admin_b, headers_a):
        project = await _create(client, headers_a)

        response = await client.post(
            f"{PROJECTS}/{project['id']}/tasks",
            json={"title": "Pour slab", "assignee_id": str(admin_b.id)},
            headers=headers_a,
        )

        assert response.status_code == 422

    async def test_tasks_of_foreign_project(self, client: AsyncClient, headers_a, headers_b):
        project = await _create(client, headers_a)
        url = f"{PROJECTS}/{project['id']}/tasks"

        assert (await client.get(url, headers=headers_b)).status_code == 404
        assert (await client.post(url, json={"title": "Sneak"}, headers=headers_b)).status_code == 404


class TestSystemUser:
    async def test_sees_every_tenant(self, client: AsyncClient, headers_a, headers_b, system_headers):
        await _create(client, headers_a, name="A")
        await _create(client, headers_b, name="B")

        response = await client.get(PROJECTS, headers=system_headers)

        assert sorted(p["name"] for p in response.json()) == ["A", "B"]

    async def test_create_needs_a_tenant(self, client: AsyncClient, system_headers):
        response = await client.post(PROJECTS, json={"name": "Nowhere"}, headers=system_headers)

        assert response.status_code == 400

    async def test_header_narrows_to_one_tenant(
        self,
        client: AsyncClient,
        tenant_b,
        headers_a,
        system_headers,
    ):
        await _create(client, headers_a, name="A")
        narrowed = {**system_headers, "X-Tenant-ID": str(tenant_b.id)}

        created = await _create(client, narrowed, name="B")

        assert created["tenant_id"] == str(tenant_b.id)
        assert [p["name"] for p in (await client.get(PROJECTS, headers=narrowed)).json()] == ["B"]

    async def test_unknown_tenant_header(self, client: AsyncClient, system_headers):
        response = await client.get(PROJECTS, headers={**system_headers, "X-Tenant-ID": str(uuid4())})

        assert response.status_code == 403


async def test_liveness(client: AsyncClient):
    response = await client.get("/health/live")

    assert response.status_code == 200
    assert response.json()["status"] == "alive"
