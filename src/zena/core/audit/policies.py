"""Authorization policies for reading the audit log."""

from typing import Any

from zena.core.policies import Principal, policies


@policies.register("audit_log", "view_any")
def view_audit_log(principal: Principal, entry: Any) -> bool:
    return principal.has("audit.read")
