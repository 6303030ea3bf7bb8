"""Background job processing with ARQ.

Scheduled maintenance runs in a single ARQ worker:
- Audit log retention cleanup
- Purging expired entries of the revoked token list
"""

from zena.core.jobs.worker import WorkerSettings


__all__ = [
    "WorkerSettings",
]
