"""Project and task request/response schemas."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from zena.core.constants import MAX_NAME_LENGTH


class ProjectCreate(BaseModel):
    """Payload for creating a project.

    ``tenant_id`` may be sent but must equal the caller's tenant.
    """

    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    code: str | None = Field(default=None, max_length=50)
    description: str | None = None
    status: str = "planning"
    start_date: date | None = None
    end_date: date | None = None
    tenant_id: UUID | None = None


class ProjectUpdate(BaseModel):
    """Partial update of a project."""

    name: str | None = Field(default=None, min_length=1, max_length=MAX_NAME_LENGTH)
    code: str | None = Field(default=None, max_length=50)
    description: str | None = None
    status: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    name: str
    code: str | None
    description: str | None
    status: str
    start_date: date | None
    end_date: date | None
    created_by: UUID | None


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = None
    assignee_id: UUID | None = None
    due_date: date | None = None


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    project_id: UUID
    title: str
    description: str | None
    status: str
    assignee_id: UUID | None
    due_date: date | None
    created_by: UUID | None
