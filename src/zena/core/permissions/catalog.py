"""Permission catalog and default role definitions.

The catalog is the single list of permission codes the application
knows about. ``sync_catalog`` makes the permissions table match it and
``create_default_roles`` provisions the standard roles for a tenant.
"""

from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zena.core.constants import WILDCARD_PERMISSION
from zena.core.permissions.models import SCOPE_SYSTEM, SCOPE_TENANT, Permission, Role


logger = structlog.get_logger()


PERMISSION_CATALOG: dict[str, str] = {
    WILDCARD_PERMISSION: "Every permission",
    # Projects
    "project.read": "View projects",
    "project.write": "Create and edit projects",
    "project.assign": "Assign project members",
    "project.delete": "Delete projects",
    # Tasks
    "task.read": "View tasks",
    "task.write": "Create and edit tasks",
    "task.assign": "Assign tasks",
    "task.delete": "Delete tasks",
    # Documents
    "document.read": "View documents",
    "document.write": "Upload and edit documents",
    "document.approve": "Approve documents",
    "document.delete": "Delete documents",
    # Contracts
    "contract.read": "View contracts",
    "contract.write": "Create and edit contracts",
    "contract.approve": "Approve contracts",
    "contract.delete": "Delete contracts",
    # Templates
    "template.read": "View templates",
    "template.write": "Create and edit templates",
    "template.apply": "Apply templates to projects",
    "template.delete": "Delete templates",
    # Audit and reports
    "audit.read": "View audit trails",
    "report.view": "View reports",
    "report.export": "Export reports",
    # Administration
    "admin.user.manage": "Manage users",
    "admin.role.manage": "Manage roles",
    "admin.system.manage": "Manage system settings",
}


SYSTEM_ROLES: dict[str, list[str]] = {
    "SuperAdmin": [WILDCARD_PERMISSION],
}

TENANT_ROLES: dict[str, list[str]] = {
    "Admin": [
        "project.*",
        "task.*",
        "document.*",
        "contract.*",
        "template.*",
        "audit.read",
        "report.view",
        "report.export",
        "admin.user.manage",
        "admin.role.manage",
    ],
    "PM": [
        "project.read",
        "project.write",
        "project.assign",
        "task.read",
        "task.write",
        "task.assign",
        "document.read",
        "document.write",
        "document.approve",
        "contract.read",
        "template.read",
        "template.apply",
        "report.view",
        "report.export",
    ],
    "Designer": [
        "project.read",
        "task.read",
        "task.write",
        "document.read",
        "document.write",
        "template.read",
    ],
    "SiteEngineer": [
        "project.read",
        "task.read",
        "task.write",
        "document.read",
        "document.write",
    ],
    "Client": [
        "project.read",
        "document.read",
        "contract.read",
        "report.view",
    ],
}


async def sync_catalog(session: AsyncSession) -> dict[str, Permission]:
    """Create missing catalog permissions, including module wildcards.

    Returns:
        Mapping of code to Permission for every code in the catalog
    """
    codes = set(PERMISSION_CATALOG)
    for grants in TENANT_ROLES.values():
        codes.update(grants)

    result = await session.execute(select(Permission).where(Permission.code.in_(codes)))
    existing = {permission.code: permission for permission in result.scalars()}

    created = 0
    for code in sorted(codes - existing.keys()):
        description = PERMISSION_CATALOG.get(code)
        if description is None and code.endswith(".*"):
            description = f"Every {code[:-2]} permission"
        permission = Permission.from_code(code, description)
        session.add(permission)
        existing[code] = permission
        created += 1

    await session.flush()
    logger.info("permission_catalog_synced", created=created, total=len(existing))
    return existing


async def create_system_roles(session: AsyncSession) -> list[Role]:
    """Ensure the system-wide roles exist."""
    permissions = await sync_catalog(session)
    return [
        await _ensure_role(session, name, SCOPE_SYSTEM, None, codes, permissions)
        for name, codes in SYSTEM_ROLES.items()
    ]


async def create_default_roles(session: AsyncSession, tenant_id: UUID) -> list[Role]:
    """Provision the standard tenant roles for ``tenant_id``."""
    permissions = await sync_catalog(session)
    return [
        await _ensure_role(session, name, SCOPE_TENANT, tenant_id, codes, permissions)
        for name, codes in TENANT_ROLES.items()
    ]


async def _ensure_role(
    session: AsyncSession,
    name: str,
    scope: str,
    tenant_id: UUID | None,
    codes: list[str],
    permissions: dict[str, Permission],
) -> Role:
    stmt = select(Role).where(Role.name == name, Role.scope == scope)
    stmt = stmt.where(Role.tenant_id.is_(None) if tenant_id is None else Role.tenant_id == tenant_id)
    role = (await session.execute(stmt)).scalar_one_or_none()
    if role is None:
        role = Role(name=name, scope=scope, tenant_id=tenant_id, permissions=[])
        session.add(role)
    role.permissions = [permissions[code] for code in codes]
    await session.flush()
    return role
