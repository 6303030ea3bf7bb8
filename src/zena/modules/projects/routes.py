"""Project and task API routes.

Every route follows the same order: load through the tenant-scoped
session, authorize through the policy registry, write, then record the
change in the audit log.
"""

from uuid import UUID

from fastapi import APIRouter, status
from sqlalchemy import delete, select

from zena.api.dependencies import Audit, CurrentPrincipal, ScopedSession
from zena.core.audit.serialization import diff, snapshot
from zena.core.database.tenant import TenantSession
from zena.core.errors import BadRequestError, NotFoundError, ValidationError
from zena.core.policies import policies
from zena.modules.projects.models import Project, Task
from zena.modules.projects.schemas import (
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    TaskCreate,
    TaskResponse,
)
from zena.modules.users.models import User


router = APIRouter(prefix="/projects", tags=["projects"])


async def _get_project(db: TenantSession, project_id: UUID) -> Project:
    # Missing and foreign projects are indistinguishable here
    project = await db.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project not found", resource="project", resource_id=str(project_id))
    return project


@router.get(
    "",
    response_model=list[ProjectResponse],
    summary="List projects",
)
async def list_projects(db: ScopedSession, principal: CurrentPrincipal) -> list[Project]:
    """List the projects of the caller's tenant."""
    policies.authorize(principal, "view_any", "project")
    result = await db.scalars(select(Project).order_by(Project.created_at, Project.name))
    return list(result.all())


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
)
async def create_project(
    data: ProjectCreate,
    db: ScopedSession,
    principal: CurrentPrincipal,
    audit: Audit,
) -> Project:
    """Create a project in the caller's tenant.

    A ``tenant_id`` naming another tenant is rejected, never corrected.
    """
    policies.authorize(principal, "create", "project")

    tenant_id = data.tenant_id or db.tenant_id
    if tenant_id is None:
        raise BadRequestError("tenant_id is required when acting outside a tenant")

    project = Project(
        **data.model_dump(exclude={"tenant_id"}),
        tenant_id=tenant_id,
        created_by=principal.user_id,
    )
    db.add(project)
    await db.flush()

    await audit.log_action(
        principal.user_id,
        "project.created",
        "project",
        project.id,
        new_values=snapshot(project),
        tenant_id=project.tenant_id,
    )
    return project


@router.get(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Get project",
)
async def get_project(project_id: UUID, db: ScopedSession, principal: CurrentPrincipal) -> Project:
    project = await _get_project(db, project_id)
    policies.authorize(principal, "view", "project", project)
    return project


@router.patch(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Update project",
)
async def update_project(
    project_id: UUID,
    data: ProjectUpdate,
    db: ScopedSession,
    principal: CurrentPrincipal,
    audit: Audit,
) -> Project:
    """Apply a partial update and audit the changed fields only."""
    project = await _get_project(db, project_id)
    policies.authorize(principal, "update", "project", project)

    before = snapshot(project)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(project, field, value)
    await db.flush()

    old_values, new_values = diff(before, snapshot(project))
    if new_values:
        await audit.log_action(
            principal.user_id,
            "project.updated",
            "project",
            project.id,
            old_values=old_values,
            new_values=new_values,
            tenant_id=project.tenant_id,
        )
    await db.refresh(project)
    return project


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete project",
)
async def delete_project(
    project_id: UUID,
    db: ScopedSession,
    principal: CurrentPrincipal,
    audit: Audit,
) -> None:
    """Delete a project together with its tasks."""
    project = await _get_project(db, project_id)
    policies.authorize(principal, "delete", "project", project)

    before = snapshot(project)
    await db.execute(delete(Task).where(Task.project_id == project.id))
    await db.delete(project)
    await db.flush()

    await audit.log_action(
        principal.user_id,
        "project.deleted",
        "project",
        project_id,
        old_values=before,
        tenant_id=project.tenant_id,
    )


# ============================================================
# Tasks
# ============================================================


@router.get(
    "/{project_id}/tasks",
    response_model=list[TaskResponse],
    summary="List project tasks",
)
async def list_tasks(project_id: UUID, db: ScopedSession, principal: CurrentPrincipal) -> list[Task]:
    project = await _get_project(db, project_id)
    policies.authorize(principal, "view", "project", project)
    policies.authorize(principal, "view_any", "task")

    result = await db.scalars(
        select(Task).where(Task.project_id == project.id).order_by(Task.created_at, Task.title)
    )
    return list(result.all())


@router.post(
    "/{project_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create task",
)
async def create_task(
    project_id: UUID,
    data: TaskCreate,
    db: ScopedSession,
    principal: CurrentPrincipal,
    audit: Audit,
) -> Task:
    """Create a task inside a project.

    Assigning the task on creation also needs the ``assign`` policy, and
    the assignee must belong to the project's tenant.
    """
    project = await _get_project(db, project_id)
    policies.authorize(principal, "create", "task")

    task = Task(
        **data.model_dump(),
        project_id=project.id,
        tenant_id=project.tenant_id,
        created_by=principal.user_id,
    )
    if task.assignee_id is not None:
        policies.authorize(principal, "assign", "task", task)
        assignee = await db.get(User, task.assignee_id)
        if assignee is None or assignee.tenant_id != project.tenant_id:
            raise ValidationError(
                "Assignee must be a member of the project's tenant",
                errors=[{"field": "assignee_id", "message": "Unknown user"}],
            )

    db.add(task)
    await db.flush()

    await audit.log_action(
        principal.user_id,
        "task.created",
        "task",
        task.id,
        new_values=snapshot(task),
        tenant_id=task.tenant_id,
    )
    return task
