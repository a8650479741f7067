"""SQLAlchemy model for the user_roles junction table."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tenantgate.infrastructure.persistence.database import Base


class UserRoleModel(Base):
    """Junction table between users and roles.

    Users are owned by the surrounding system, so ``user_id`` carries no
    foreign key.

    Attributes:
        user_id: User identifier.
        role_id: Foreign key to roles table.
        position: Order in which the role was assigned.
    """

    __tablename__ = "user_roles"

    user_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        index=True,
        comment="User identifier",
    )
    role_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
        comment="Foreign key to roles table",
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, role_id={self.role_id})>"
