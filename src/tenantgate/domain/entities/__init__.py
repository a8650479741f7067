"""Domain entities for TenantGate.

Entities are plain dataclasses with no dependencies on infrastructure.
"""

from tenantgate.domain.entities.menu import (
    Menu,
    MenuFilter,
    MenuKind,
    MenuStats,
    MenuTreeNode,
    Status,
    UserMenuNode,
)
from tenantgate.domain.entities.role import (
    DataScope,
    PermissionType,
    Role,
    RoleFilter,
    RoleStats,
)

__all__ = [
    "DataScope",
    "Menu",
    "MenuFilter",
    "MenuKind",
    "MenuStats",
    "MenuTreeNode",
    "PermissionType",
    "Role",
    "RoleFilter",
    "RoleStats",
    "Status",
    "UserMenuNode",
]
