"""Schemas for user role assignments and resolved permissions."""

from pydantic import BaseModel, Field

from tenantgate.infrastructure.api.schemas.role_schemas import RoleResponse


class AssignUserRolesRequest(BaseModel):
    """Replace a user's role set."""

    role_ids: list[str] = Field(default_factory=list, description="Complete new role set")


class UserRolesResponse(BaseModel):
    """Roles held by a user."""

    user_id: str
    roles: list[RoleResponse]


class UserPermissionsResponse(BaseModel):
    """Effective menu grants of a user."""

    user_id: str
    menu_ids: list[str]


class PermissionCodesResponse(BaseModel):
    """Permission codes available to the caller."""

    codes: list[str]


class PermissionCheckResponse(BaseModel):
    """Result of a single permission-code check."""

    user_id: str
    code: str
    granted: bool
