"""Audit logging: redacted append-only change history."""

from zena.core.audit.models import AuditLog
from zena.core.audit.recorder import AuditRecorder, subtract_years
from zena.core.audit.redaction import SensitiveDataFilter
from zena.core.audit.serialization import diff, snapshot, to_primitive


__all__ = [
    "AuditLog",
    "AuditRecorder",
    "SensitiveDataFilter",
    "diff",
    "snapshot",
    "subtract_years",
    "to_primitive",
]
