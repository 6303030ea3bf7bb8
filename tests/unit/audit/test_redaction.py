"""Tests for sensitive data redaction."""

import pytest

from zena.core.audit.redaction import SensitiveDataFilter
from zena.core.constants import REDACTED_VALUE


pytestmark = pytest.mark.unit


@pytest.fixture
def redact() -> SensitiveDataFilter:
    return SensitiveDataFilter()


class TestSensitiveDataFilter:
    """Tests for SensitiveDataFilter."""

    def test_masks_default_patterns(self, redact):
        data = {
            "password": "hunter2",
            "api_key": "k-123",
            "client_secret": "s",
            "credit_card": "4111",
            "access_token": "t",
            "name": "Alpha",
        }

        result = redact(data)

        assert result == {
            "password": REDACTED_VALUE,
            "api_key": REDACTED_VALUE,
            "client_secret": REDACTED_VALUE,
            "credit_card": REDACTED_VALUE,
            "access_token": REDACTED_VALUE,
            "name": "Alpha",
        }

    def test_match_is_case_insensitive_substring(self, redact):
        result = redact({"NewPassword": "x", "PASSWORD_HASH": "y", "username": "bob"})

        assert result == {"NewPassword": REDACTED_VALUE, "PASSWORD_HASH": REDACTED_VALUE, "username": "bob"}

    def test_recurses_into_mappings_and_lists(self, redact):
        data = {
            "user": {"email": "a@example.com", "password": "x"},
            "keys": [{"api_key": "k"}, {"label": "ok"}],
        }

        result = redact(data)

        assert result["user"] == {"email": "a@example.com", "password": REDACTED_VALUE}
        assert result["keys"] == [{"api_key": REDACTED_VALUE}, {"label": "ok"}]

    def test_is_idempotent(self, redact):
        data = {"password": "x", "nested": {"token": "y"}, "status": "active"}

        once = redact(data)

        assert redact(once) == once

    def test_does_not_mutate_input(self, redact):
        data = {"password": "x"}

        redact(data)

        assert data == {"password": "x"}

    def test_none_passes_through(self, redact):
        assert redact(None) is None

    def test_custom_patterns(self):
        redact = SensitiveDataFilter(["iban"])

        assert redact({"iban": "DE00", "password": "x"}) == {"iban": REDACTED_VALUE, "password": "x"}
