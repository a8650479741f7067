"""Menu entities.

Menus form a forest of directory, page and button nodes. A node with an
empty ``parent_id`` is a root.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class MenuKind(str, Enum):
    """Kind of menu node."""

    DIRECTORY = "directory"
    PAGE = "page"
    BUTTON = "button"


class Status(str, Enum):
    """Enablement status shared by menus and roles."""

    ENABLED = "enabled"
    DISABLED = "disabled"


@dataclass
class Menu:
    """A single menu node.

    Attributes:
        id: Unique menu identifier.
        parent_id: Parent menu id, empty for a root node.
        name: Display name, unique among siblings.
        kind: Directory, page or button.
        route: Client route path.
        component: Client component path.
        icon: Icon identifier.
        permission_code: Optional globally unique capability token.
        sort_order: Position among siblings, ascending.
        visible: Whether the node shows up in navigation trees.
        status: Enabled or disabled.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    id: str
    name: str
    kind: MenuKind
    parent_id: str = ""
    route: str = ""
    component: str = ""
    icon: str = ""
    permission_code: str | None = None
    sort_order: int = 0
    visible: bool = True
    status: Status = Status.ENABLED
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate menu data after initialization."""
        if not self.name:
            raise ValueError("Menu name is required")
        self.kind = MenuKind(self.kind)
        self.status = Status(self.status)

    @property
    def is_enabled(self) -> bool:
        return self.status == Status.ENABLED

    @property
    def is_navigable(self) -> bool:
        """Whether the node itself qualifies for the user navigation tree."""
        return self.is_enabled and self.visible and self.kind != MenuKind.BUTTON


@dataclass
class MenuTreeNode:
    """Administrative tree node carrying every menu field."""

    menu: Menu
    children: list["MenuTreeNode"] = field(default_factory=list)

    def count(self) -> int:
        """Return the number of nodes in this subtree, itself included."""
        return 1 + sum(child.count() for child in self.children)


@dataclass
class UserMenuNode:
    """Navigation tree node with the reduced field set sent to clients."""

    id: str
    name: str
    route: str
    component: str
    icon: str
    sort_order: int
    children: list["UserMenuNode"] = field(default_factory=list)


@dataclass
class MenuFilter:
    """Optional filters for menu listing."""

    name: str | None = None
    kind: MenuKind | None = None
    status: Status | None = None
    visible: bool | None = None
    permission_code: str | None = None


@dataclass
class MenuStats:
    """Aggregate menu counts."""

    total: int = 0
    enabled: int = 0
    disabled: int = 0
    directory: int = 0
    page: int = 0
    button: int = 0
