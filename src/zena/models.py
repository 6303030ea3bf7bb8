"""Import every mapped class.

String-based relationships resolve and ``Base.metadata`` is complete
once this module has been imported.
"""

from zena.core.audit.models import AuditLog
from zena.core.permissions.models import Permission, Role, UserRole
from zena.modules.contracts.models import Contract
from zena.modules.documents.models import Document
from zena.modules.projects.models import Project, Task
from zena.modules.templates.models import Template
from zena.modules.tenants.models import Tenant
from zena.modules.users.models import RevokedToken, User


__all__ = [
    "AuditLog",
    "Contract",
    "Document",
    "Permission",
    "Project",
    "RevokedToken",
    "Role",
    "Task",
    "Template",
    "Tenant",
    "User",
    "UserRole",
]
