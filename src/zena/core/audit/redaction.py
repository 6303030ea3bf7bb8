"""Redaction of sensitive values before they reach the audit log."""

from collections.abc import Iterable, Mapping
from typing import Any

from zena.core.constants import DEFAULT_SENSITIVE_FIELDS, REDACTED_VALUE


class SensitiveDataFilter:
    """Masks values whose key contains a sensitive pattern.

    Matching is a case-insensitive substring test on the key, so
    ``password`` also masks ``new_password`` and ``PasswordHash``.
    Nested mappings and lists are walked. Applying the filter twice gives
    the same result as applying it once.
    """

    def __init__(self, patterns: Iterable[str] = DEFAULT_SENSITIVE_FIELDS) -> None:
        self.patterns = tuple(p.lower() for p in patterns if p)

    def is_sensitive(self, key: object) -> bool:
        name = str(key).lower()
        return any(pattern in name for pattern in self.patterns)

    def __call__(self, data: Mapping[str, Any] | None) -> dict[str, Any] | None:
        if data is None:
            return None
        return self._filter_mapping(data)

    def _filter_mapping(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return {
            key: REDACTED_VALUE if self.is_sensitive(key) else self._filter_value(value)
            for key, value in data.items()
        }

    def _filter_value(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return self._filter_mapping(value)
        if isinstance(value, list | tuple):
            return [self._filter_value(item) for item in value]
        return value
