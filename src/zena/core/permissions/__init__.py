"""Role-based access control: roles, permissions and resolution."""

from zena.core.permissions.models import Permission, Role, UserRole, role_permissions
from zena.core.permissions.resolver import PermissionResolver, grants, is_valid_code


__all__ = [
    "Permission",
    "PermissionResolver",
    "Role",
    "UserRole",
    "grants",
    "is_valid_code",
    "role_permissions",
]
