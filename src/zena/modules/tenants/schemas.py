"""Tenant request/response schemas."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TenantSettings(BaseModel):
    """Validated view of a tenant's settings map.

    Known keys are typed; unknown keys are preserved as-is.
    """

    model_config = ConfigDict(extra="allow")

    plan: str = "free"
    timezone: str = "UTC"
    locale: str = "en"
    features: dict[str, bool] = Field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: dict[str, Any] | None) -> "TenantSettings":
        """Parse a stored settings map, tolerating ``None``."""
        return cls.model_validate(raw or {})

    def feature_enabled(self, name: str) -> bool:
        return self.features.get(name, False)


class TenantResponse(BaseModel):
    """Tenant as exposed to its own members."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    domain: str | None
    is_active: bool
    settings: TenantSettings = Field(default_factory=TenantSettings)
