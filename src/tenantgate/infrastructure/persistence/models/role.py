"""SQLAlchemy model for the roles table.

Roles are tenant-scoped; an empty ``tenant_id`` marks a platform role
shared by every tenant.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from tenantgate.domain.entities.menu import Status
from tenantgate.domain.entities.role import DataScope
from tenantgate.infrastructure.persistence.database import Base
from tenantgate.infrastructure.persistence.models.menu import utcnow


class RoleModel(Base):
    """SQLAlchemy model for the roles table.

    The role's granted menus live in ``role_permissions``; there is no
    embedded list on this table.

    Attributes:
        id: Primary key (generated ``ROL...`` identifier).
        key: Globally unique machine-readable key.
        name: Role name, unique within the tenant.
        tenant_id: Owning tenant, empty for platform roles.
        sort_order: Listing position.
        data_scope: all, tenant or self.
        status: enabled or disabled.
        remark: Free-form note.
        created_at: Timestamp when the role was created.
        updated_at: Timestamp when the role was last updated.
    """

    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        comment="Role ID",
    )
    key: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Role key used in authorization checks",
    )
    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Role name",
    )
    tenant_id: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="",
        server_default="",
        comment="Owning tenant ID, empty for platform roles",
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    data_scope: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=DataScope.ALL.value,
        comment="Declared row-visibility scope (all, tenant, self)",
    )
    status: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=Status.ENABLED.value,
        index=True,
        comment="Role status (enabled, disabled)",
    )
    remark: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_roles_tenant_name"),
        Index("ix_roles_tenant_sort", "tenant_id", "sort_order"),
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, key={self.key}, tenant_id={self.tenant_id!r})>"
