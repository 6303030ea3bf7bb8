"""User factory and token helpers for tests."""

from uuid import uuid4

from polyfactory.factories.pydantic_factory import ModelFactory
from pydantic import BaseModel

from zena.core.auth.backend import create_access_token
from zena.modules.users.models import User


TEST_PASSWORD = "correct-horse-battery"


class UserCreate(BaseModel):
    """Schema for creating a user (for factory use)."""

    email: str
    full_name: str
    is_active: bool = True


class UserFactory(ModelFactory[UserCreate]):
    """Factory for generating User test data."""

    __model__ = UserCreate

    @classmethod
    def email(cls) -> str:
        """Generate a unique email."""
        return f"user-{uuid4().hex[:8]}@example.com"

    @classmethod
    def full_name(cls) -> str:
        return f"Test User {uuid4().hex[:4]}"

    @classmethod
    def is_active(cls) -> bool:
        """Default to active."""
        return True


def bearer(user: User) -> dict[str, str]:
    """Authorization header with a fresh token for ``user``."""
    issued = create_access_token(user.id, user.tenant_id, token_version=user.token_version)
    return {"Authorization": f"Bearer {issued.token}"}
