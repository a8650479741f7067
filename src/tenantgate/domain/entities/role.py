"""Role entities.

Roles belong to a tenant, or to the platform when ``tenant_id`` is empty.
Platform roles are visible to every tenant.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from tenantgate.domain.entities.menu import Status


class DataScope(str, Enum):
    """Row-visibility breadth declared by a role. Not enforced here."""

    ALL = "all"
    TENANT = "tenant"
    SELF = "self"


class PermissionType(str, Enum):
    """Kind of grant stored on a role-permission row."""

    MENU = "menu"
    BUTTON = "button"


@dataclass
class Role:
    """Role entity for user authorization.

    Attributes:
        id: Unique role identifier.
        key: Globally unique machine-readable key.
        name: Display name, unique within the tenant.
        tenant_id: Owning tenant, empty for platform roles.
        sort_order: Listing position, ascending.
        data_scope: Declared row-visibility scope.
        status: Enabled or disabled.
        remark: Free-form note.
        menu_ids: Granted menu ids, read from the role-permission relation.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    id: str
    key: str
    name: str
    tenant_id: str = ""
    sort_order: int = 0
    data_scope: DataScope = DataScope.ALL
    status: Status = Status.ENABLED
    remark: str = ""
    menu_ids: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate role data after initialization."""
        if not self.name:
            raise ValueError("Role name is required")
        if not self.key:
            raise ValueError("Role key is required")
        self.data_scope = DataScope(self.data_scope)
        self.status = Status(self.status)

    @property
    def is_platform(self) -> bool:
        return self.tenant_id == ""


@dataclass
class RoleFilter:
    """Optional filters for role listing."""

    name: str | None = None
    key: str | None = None
    tenant_id: str | None = None
    data_scope: DataScope | None = None
    status: Status | None = None


@dataclass
class RoleStats:
    """Aggregate role counts.

    ``platform`` and ``tenant`` are only computed for unfiltered requests.
    """

    total: int = 0
    enabled: int = 0
    disabled: int = 0
    platform: int | None = None
    tenant: int | None = None
