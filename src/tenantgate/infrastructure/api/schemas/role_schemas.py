"""Role API schemas for request/response validation."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tenantgate.domain.entities.menu import Status
from tenantgate.domain.entities.role import DataScope


class CreateRoleRequest(BaseModel):
    """Request schema for creating a role.

    Attributes:
        key: Globally unique role key.
        name: Role name, unique within the tenant.
        tenant_id: Owning tenant, empty for a platform role.
        sort_order: Listing position.
        data_scope: Declared row-visibility scope.
        menu_ids: Menus the role grants.
        status: Initial status.
        remark: Free-form note.
    """

    key: str = Field(..., min_length=2, max_length=50)
    name: str = Field(..., min_length=2, max_length=50)
    tenant_id: str | None = Field(None, max_length=32)
    sort_order: int = 0
    data_scope: DataScope = DataScope.ALL
    menu_ids: list[str] = Field(default_factory=list)
    status: Status = Status.ENABLED
    remark: str = Field("", max_length=500)

    @field_validator("key", "name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Validate that key and name are not blank."""
        if not v.strip():
            raise ValueError("Value cannot be blank")
        return v.strip()


class UpdateRoleRequest(BaseModel):
    """Request schema for partially updating a role.

    ``menu_ids``, when present, replaces the role's grant set.
    """

    key: str | None = Field(None, min_length=2, max_length=50)
    name: str | None = Field(None, min_length=2, max_length=50)
    sort_order: int | None = None
    data_scope: DataScope | None = None
    menu_ids: list[str] | None = None
    status: Status | None = None
    remark: str | None = Field(None, max_length=500)

    @field_validator("key", "name")
    @classmethod
    def not_blank(cls, v: str | None) -> str | None:
        """Validate that key and name are not blank."""
        if v is not None and not v.strip():
            raise ValueError("Value cannot be blank")
        return v.strip() if v is not None else v


class RoleResponse(BaseModel):
    """Response schema for a role."""

    id: str
    key: str
    name: str
    tenant_id: str
    sort_order: int
    data_scope: DataScope
    menu_ids: list[str]
    status: Status
    remark: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class RoleListResponse(BaseModel):
    """Response schema for a page of roles."""

    items: list[RoleResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class RoleBatchStatusUpdate(BaseModel):
    """Schema for setting the status of several roles."""

    role_ids: list[str] = Field(..., min_length=1)
    status: Status


class RoleStatsResponse(BaseModel):
    """Aggregate role counts.

    ``platform`` and ``tenant`` are null when the request was tenant-filtered.
    """

    total: int
    enabled: int
    disabled: int
    platform: int | None = None
    tenant: int | None = None

    model_config = ConfigDict(from_attributes=True)


class RoleUsersResponse(BaseModel):
    """Users holding a role."""

    role_id: str
    user_ids: list[str]
