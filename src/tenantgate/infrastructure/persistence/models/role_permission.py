"""SQLAlchemy model for the role_permissions junction table.

This table is the only record of which menus a role grants.
"""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tenantgate.domain.entities.role import PermissionType
from tenantgate.infrastructure.persistence.database import Base


class RolePermissionModel(Base):
    """Junction table between roles and menus.

    Attributes:
        role_id: Foreign key to roles table.
        menu_id: Foreign key to menus table.
        permission_type: menu or button grant.
        position: Order of the menu in the role's grant list.
    """

    __tablename__ = "role_permissions"

    role_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
        comment="Foreign key to roles table",
    )
    menu_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("menus.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
        comment="Foreign key to menus table",
    )
    permission_type: Mapped[str] = mapped_column(
        String(10),
        primary_key=True,
        default=PermissionType.MENU.value,
        comment="Grant type (menu, button)",
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<RolePermission(role_id={self.role_id}, menu_id={self.menu_id}, "
            f"type={self.permission_type})>"
        )
