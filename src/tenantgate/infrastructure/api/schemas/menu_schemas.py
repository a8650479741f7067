"""Pydantic schemas for menu operations."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tenantgate.domain.entities.menu import MenuKind, MenuTreeNode, Status


def _strip_name(v: str | None) -> str | None:
    if v is None:
        return v
    if not v.strip():
        raise ValueError("Menu name cannot be empty")
    return v.strip()


class MenuCreate(BaseModel):
    """Schema for creating a menu."""

    parent_id: str = Field("", max_length=32, description="Parent menu ID, empty for a root menu")
    name: str = Field(..., min_length=1, max_length=50, description="Menu name")
    kind: MenuKind = Field(..., description="Menu kind")
    route: str = Field("", max_length=255)
    component: str = Field("", max_length=255)
    icon: str = Field("", max_length=100)
    permission_code: str | None = Field(None, max_length=100, description="Capability token")
    sort_order: int = 0
    visible: bool = True
    status: Status = Status.ENABLED

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        """Validate that name is not blank."""
        return _strip_name(v)


class MenuUpdate(BaseModel):
    """Schema for partially updating a menu.

    Only fields present in the request body are applied. Sending
    ``parent_id: ""`` moves the menu to the root, while ``null`` leaves
    the parent unchanged.
    """

    parent_id: str | None = Field(None, max_length=32)
    name: str | None = Field(None, min_length=1, max_length=50)
    kind: MenuKind | None = None
    route: str | None = Field(None, max_length=255)
    component: str | None = Field(None, max_length=255)
    icon: str | None = Field(None, max_length=100)
    permission_code: str | None = Field(None, max_length=100)
    sort_order: int | None = None
    visible: bool | None = None
    status: Status | None = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str | None) -> str | None:
        """Validate that name is not blank."""
        return _strip_name(v)


class MenuResponse(BaseModel):
    """Schema for a menu."""

    id: str
    parent_id: str
    name: str
    kind: MenuKind
    route: str
    component: str
    icon: str
    permission_code: str | None = None
    sort_order: int
    visible: bool
    status: Status
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class MenuListResponse(BaseModel):
    """Flat menu listing."""

    items: list[MenuResponse]
    total: int


class MenuTreeResponse(MenuResponse):
    """Administrative tree node."""

    children: list["MenuTreeResponse"] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: MenuTreeNode) -> "MenuTreeResponse":
        """Build a response subtree from a domain tree node."""
        return cls.model_validate(node.menu).model_copy(
            update={"children": [cls.from_node(child) for child in node.children]}
        )


class UserMenuResponse(BaseModel):
    """Navigation tree node rendered by clients."""

    id: str
    name: str
    route: str
    component: str
    icon: str
    sort_order: int
    children: list["UserMenuResponse"] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class MenuBatchStatusUpdate(BaseModel):
    """Schema for setting the status of several menus."""

    menu_ids: list[str] = Field(..., min_length=1)
    status: Status


class BatchStatusResponse(BaseModel):
    """Result of a batch status update."""

    modified: int


class MenuStatsResponse(BaseModel):
    """Aggregate menu counts."""

    total: int
    enabled: int
    disabled: int
    directory: int
    page: int
    button: int

    model_config = ConfigDict(from_attributes=True)
