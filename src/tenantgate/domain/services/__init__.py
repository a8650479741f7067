"""Domain services for TenantGate.

The tree builder is pure; the other services work against repositories
bound to the session they are constructed with.
"""

from tenantgate.domain.services.id_generator import IdGenerator
from tenantgate.domain.services.menu_resolution_service import MenuResolutionService
from tenantgate.domain.services.menu_service import MenuService
from tenantgate.domain.services.menu_tree_builder import (
    build_tree,
    build_user_menu_tree,
    filter_navigable,
    is_descendant,
)
from tenantgate.domain.services.role_service import RoleService

__all__ = [
    "IdGenerator",
    "MenuResolutionService",
    "MenuService",
    "RoleService",
    "build_tree",
    "build_user_menu_tree",
    "filter_navigable",
    "is_descendant",
]
