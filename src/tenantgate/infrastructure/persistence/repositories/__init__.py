"""Repository implementations for data access."""

from tenantgate.infrastructure.persistence.repositories.assignment_repository import (
    AssignmentRepository,
)
from tenantgate.infrastructure.persistence.repositories.menu_repository import MenuRepository
from tenantgate.infrastructure.persistence.repositories.role_repository import RoleRepository

__all__ = [
    "AssignmentRepository",
    "MenuRepository",
    "RoleRepository",
]
