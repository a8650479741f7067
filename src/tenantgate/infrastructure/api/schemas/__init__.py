"""API schemas for request/response validation."""

from tenantgate.infrastructure.api.schemas.assignment_schemas import (
    AssignUserRolesRequest,
    PermissionCheckResponse,
    PermissionCodesResponse,
    UserPermissionsResponse,
    UserRolesResponse,
)
from tenantgate.infrastructure.api.schemas.menu_schemas import (
    BatchStatusResponse,
    MenuBatchStatusUpdate,
    MenuCreate,
    MenuListResponse,
    MenuResponse,
    MenuStatsResponse,
    MenuTreeResponse,
    MenuUpdate,
    UserMenuResponse,
)
from tenantgate.infrastructure.api.schemas.role_schemas import (
    CreateRoleRequest,
    RoleBatchStatusUpdate,
    RoleListResponse,
    RoleResponse,
    RoleStatsResponse,
    RoleUsersResponse,
    UpdateRoleRequest,
)

__all__ = [
    "AssignUserRolesRequest",
    "BatchStatusResponse",
    "CreateRoleRequest",
    "MenuBatchStatusUpdate",
    "MenuCreate",
    "MenuListResponse",
    "MenuResponse",
    "MenuStatsResponse",
    "MenuTreeResponse",
    "MenuUpdate",
    "PermissionCheckResponse",
    "PermissionCodesResponse",
    "RoleBatchStatusUpdate",
    "RoleListResponse",
    "RoleResponse",
    "RoleStatsResponse",
    "RoleUsersResponse",
    "UpdateRoleRequest",
    "UserMenuResponse",
    "UserPermissionsResponse",
    "UserRolesResponse",
]
