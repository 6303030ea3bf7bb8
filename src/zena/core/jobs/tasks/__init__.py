"""Background job tasks."""

from zena.core.jobs.tasks.cleanup import cleanup_audit_logs, cleanup_revoked_tokens


__all__ = [
    "cleanup_audit_logs",
    "cleanup_revoked_tokens",
]
