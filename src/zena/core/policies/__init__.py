"""Policy engine: per-entity authorization rules."""

from zena.core.policies.principal import Principal, resolve_principal
from zena.core.policies.registry import COLLECTION_ACTIONS, PolicyRegistry, policies


__all__ = [
    "COLLECTION_ACTIONS",
    "PolicyRegistry",
    "Principal",
    "policies",
    "resolve_principal",
]
