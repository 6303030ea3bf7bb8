"""Policy registry and evaluation.

Policies are plain functions registered per (entity type, action):

    @policies.register("project", "update")
    def update_project(principal: Principal, project: Project | None) -> bool:
        return principal.has("project.write") or principal.owns(project)

``can_perform`` runs the tenant check before any policy function, so a
policy only ever sees entities of the principal's own tenant. Entities
of another tenant and entities that do not exist are denied the same way.
"""

from collections.abc import Callable
from typing import Any
from uuid import UUID

import structlog

from zena.core.errors import PermissionDeniedError
from zena.core.policies.principal import Principal


logger = structlog.get_logger()

PolicyFunc = Callable[[Principal, Any], bool]

# Actions that apply to a collection rather than one entity
COLLECTION_ACTIONS = frozenset({"view_any", "create"})


class PolicyRegistry:
    """Maps (entity type, action) to policy functions."""

    def __init__(self) -> None:
        self._policies: dict[tuple[str, str], PolicyFunc] = {}

    def register(self, entity_type: str, *actions: str) -> Callable[[PolicyFunc], PolicyFunc]:
        """Decorator registering a policy for one or more actions.

        Raises:
            ValueError: If a policy is already registered for a pair
        """

        def decorator(func: PolicyFunc) -> PolicyFunc:
            for action in actions:
                key = (entity_type, action)
                if key in self._policies:
                    raise ValueError(f"Policy already registered for {entity_type}.{action}")
                self._policies[key] = func
            return func

        return decorator

    def get(self, entity_type: str, action: str) -> PolicyFunc | None:
        return self._policies.get((entity_type, action))

    def registered(self) -> list[tuple[str, str]]:
        return sorted(self._policies)

    def _deny_reason(
        self,
        principal: Principal | None,
        action: str,
        entity_type: str,
        entity: Any,
        target_tenant_id: UUID | None,
    ) -> str | None:
        if principal is None:
            return "no_principal"

        if not principal.is_system:
            if principal.tenant_id is None:
                return "no_tenant"
            if entity is not None and getattr(entity, "tenant_id", None) != principal.tenant_id:
                return "tenant_mismatch"
            if target_tenant_id is not None and target_tenant_id != principal.tenant_id:
                return "tenant_mismatch"

        if entity is None and action not in COLLECTION_ACTIONS:
            return "entity_missing"

        policy = self.get(entity_type, action)
        if policy is None:
            return "unregistered"

        try:
            allowed = policy(principal, entity)
        except Exception:
            logger.exception("policy_error", entity_type=entity_type, action=action)
            return "policy_error"
        return None if allowed else "policy_denied"

    def can_perform(
        self,
        principal: Principal | None,
        action: str,
        entity_type: str,
        entity: Any = None,
        target_tenant_id: UUID | None = None,
    ) -> bool:
        """Decide whether a principal may perform an action.

        Never raises. Denies when there is no principal, when the entity
        or target tenant is not the principal's tenant, when no policy is
        registered, or when the policy says no.

        Args:
            principal: Acting principal, or None
            action: Action name, e.g. "update"
            entity_type: Entity type, e.g. "project"
            entity: The entity acted on, for instance-level actions
            target_tenant_id: Tenant a new entity would be created in

        Returns:
            True if allowed
        """
        reason = self._deny_reason(principal, action, entity_type, entity, target_tenant_id)
        if reason is None:
            return True

        logger.info(
            "permission_denied",
            reason=reason,
            action=action,
            entity_type=entity_type,
            entity_id=str(getattr(entity, "id", "")) or None,
            user_id=str(principal.user_id) if principal else None,
            tenant_id=str(principal.tenant_id) if principal and principal.tenant_id else None,
        )
        return False

    def authorize(
        self,
        principal: Principal | None,
        action: str,
        entity_type: str,
        entity: Any = None,
        target_tenant_id: UUID | None = None,
    ) -> None:
        """Raising variant of ``can_perform``.

        Raises:
            PermissionDeniedError: If the action is not allowed
        """
        if not self.can_perform(principal, action, entity_type, entity, target_tenant_id):
            raise PermissionDeniedError()


# Application-wide registry
policies = PolicyRegistry()
