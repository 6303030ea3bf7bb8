"""User request/response schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr


class UserResponse(BaseModel):
    """User data returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID | None
    email: EmailStr
    full_name: str
    is_active: bool


class CurrentUserResponse(UserResponse):
    """The authenticated user with their effective permissions."""

    permissions: list[str] = []
