"""Tests for the tenant settings schema."""

import pytest

from zena.modules.tenants.schemas import TenantSettings


pytestmark = pytest.mark.unit


def test_defaults_for_missing_settings():
    settings = TenantSettings.from_raw(None)

    assert settings.plan == "free"
    assert settings.timezone == "UTC"
    assert settings.features == {}


def test_unknown_keys_are_kept():
    settings = TenantSettings.from_raw({"plan": "pro", "branding": {"color": "#123456"}})

    assert settings.plan == "pro"
    assert settings.model_dump()["branding"] == {"color": "#123456"}


def test_feature_flags():
    settings = TenantSettings.from_raw({"features": {"contracts": True, "reports": False}})

    assert settings.feature_enabled("contracts") is True
    assert settings.feature_enabled("reports") is False
    assert settings.feature_enabled("unknown") is False
