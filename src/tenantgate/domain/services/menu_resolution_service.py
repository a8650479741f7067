"""Resolution of role sets into menu trees and permission sets.

Role ids come from the caller's verified identity. They are resolved to menu
ids through the assignment tables, the menus are fetched, and the tree
builders assemble the result. Nothing is cached between calls.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from tenantgate.core.logging import get_logger
from tenantgate.domain.entities.menu import MenuTreeNode, UserMenuNode
from tenantgate.domain.services.menu_tree_builder import build_tree, build_user_menu_tree
from tenantgate.infrastructure.persistence.repositories import (
    AssignmentRepository,
    MenuRepository,
)

logger = get_logger(__name__)


class MenuResolutionService:
    """Resolves roles to the menus and permissions they grant."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the resolution service.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session
        self.menu_repo = MenuRepository(session)
        self.assignment_repo = AssignmentRepository(session)

    async def menu_ids_for_roles(self, role_ids: list[str]) -> set[str]:
        """Union of the menus granted by the enabled roles among ``role_ids``."""
        return await self.assignment_repo.get_menu_ids_for_roles(role_ids)

    async def admin_tree_for_roles(self, role_ids: list[str]) -> list[MenuTreeNode]:
        """Tree of every granted menu, regardless of visibility or status.

        Returns:
            Ordered tree, empty when no role grants anything.
        """
        menu_ids = await self.menu_ids_for_roles(role_ids)
        if not menu_ids:
            return []
        return build_tree(await self.menu_repo.get_by_ids(list(menu_ids)))

    async def user_menu_tree(self, role_ids: list[str]) -> list[UserMenuNode]:
        """Navigation tree for a holder of ``role_ids``.

        Only enabled, visible, non-button menus appear, and only when their
        whole ancestor chain is granted and navigable too.

        Returns:
            Ordered navigation tree, empty for an empty role set.
        """
        if not role_ids:
            return []
        menu_ids = await self.menu_ids_for_roles(role_ids)
        if not menu_ids:
            return []
        menus = await self.menu_repo.get_by_ids(list(menu_ids))
        tree = build_user_menu_tree(menus)
        logger.debug(
            "User menu tree resolved",
            role_count=len(role_ids),
            granted=len(menu_ids),
            roots=len(tree),
        )
        return tree

    async def effective_permissions(self, user_id: str) -> set[str]:
        """Menu ids granted to a user across their enabled roles."""
        return await self.assignment_repo.get_effective_permissions_for_user(user_id)

    async def has_permission(self, user_id: str, permission_code: str) -> bool:
        """Check whether a user holds a permission code through an enabled role."""
        return await self.assignment_repo.has_permission(user_id, permission_code)

    async def permission_codes_for_roles(self, role_ids: list[str]) -> list[str]:
        """Sorted permission codes of the enabled menus granted to ``role_ids``.

        Buttons are included, since their codes drive client capability checks.
        """
        menu_ids = await self.menu_ids_for_roles(role_ids)
        if not menu_ids:
            return []
        menus = await self.menu_repo.get_by_ids(list(menu_ids))
        return sorted({m.permission_code for m in menus if m.is_enabled and m.permission_code})
