"""SQLAlchemy model for the menus table.

Menus form a forest through ``parent_id``; an empty string marks a root.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from tenantgate.domain.entities.menu import MenuKind, Status
from tenantgate.infrastructure.persistence.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MenuModel(Base):
    """SQLAlchemy model for the menus table.

    Attributes:
        id: Primary key (generated ``MNU...`` identifier).
        parent_id: Parent menu id, empty for roots.
        name: Menu name, unique among siblings.
        kind: directory, page or button.
        route: Client route path.
        component: Client component path.
        icon: Icon identifier.
        permission_code: Optional capability token, unique when present.
        sort_order: Position among siblings.
        visible: Whether the menu shows up in navigation.
        status: enabled or disabled.
        created_at: Timestamp when the menu was created.
        updated_at: Timestamp when the menu was last updated.
    """

    __tablename__ = "menus"

    id: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        comment="Menu ID",
    )
    parent_id: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="",
        server_default="",
        comment="Parent menu ID, empty for root menus",
    )
    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Menu name",
    )
    kind: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=MenuKind.PAGE.value,
        comment="Menu kind (directory, page, button)",
    )
    route: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    component: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    icon: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    # NULL rather than "" so the unique index only covers menus that carry a code
    permission_code: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        unique=True,
        comment="Capability token checked by clients",
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=Status.ENABLED.value,
        index=True,
        comment="Menu status (enabled, disabled)",
    )
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
        UniqueConstraint("parent_id", "name", name="uq_menus_parent_name"),
        Index("ix_menus_parent_sort", "parent_id", "sort_order"),
    )

    def __repr__(self) -> str:
        return f"<Menu(id={self.id}, name={self.name}, parent_id={self.parent_id!r})>"
