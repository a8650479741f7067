"""SQLAlchemy models for the TenantGate tables.

All models inherit from the Base class defined in database.py and are
created on application startup in development mode.
"""

from tenantgate.infrastructure.persistence.models.menu import MenuModel
from tenantgate.infrastructure.persistence.models.role import RoleModel
from tenantgate.infrastructure.persistence.models.role_permission import RolePermissionModel
from tenantgate.infrastructure.persistence.models.user_role import UserRoleModel

__all__ = [
    "MenuModel",
    "RoleModel",
    "RolePermissionModel",
    "UserRoleModel",
]
