"""Repository for the user-role and role-permission relations.

Assignments are whole-set replacements: every row for the owner is deleted
and the new set inserted. Both statements run in the caller's transaction,
so readers in other transactions never see the intermediate empty set once
the caller commits.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tenantgate.domain.entities.menu import MenuKind, Status
from tenantgate.domain.entities.role import PermissionType
from tenantgate.infrastructure.persistence.models import (
    MenuModel,
    RoleModel,
    RolePermissionModel,
    UserRoleModel,
)


def _unique(values: list[str]) -> list[str]:
    """De-duplicate while keeping first-occurrence order, dropping blanks."""
    return [value for value in dict.fromkeys(values) if value]


class AssignmentRepository:
    """Repository for user-role and role-permission assignments."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    # User <-> role

    async def assign_roles_to_user(self, user_id: str, role_ids: list[str]) -> list[str]:
        """Replace the user's entire role set.

        Args:
            user_id: User identifier.
            role_ids: New role set. Duplicates are collapsed.

        Returns:
            The stored role ids, in assignment order.
        """
        role_ids = _unique(role_ids)
        await self.session.execute(delete(UserRoleModel).where(UserRoleModel.user_id == user_id))
        self.session.add_all(
            UserRoleModel(user_id=user_id, role_id=role_id, position=position)
            for position, role_id in enumerate(role_ids)
        )
        await self.session.flush()
        return role_ids

    async def remove_roles_from_user(self, user_id: str, role_ids: list[str] | None = None) -> int:
        """Remove roles from a user.

        Args:
            user_id: User identifier.
            role_ids: Roles to remove. None or empty removes them all.

        Returns:
            Number of assignments removed.
        """
        stmt = delete(UserRoleModel).where(UserRoleModel.user_id == user_id)
        if role_ids:
            stmt = stmt.where(UserRoleModel.role_id.in_(set(role_ids)))
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def remove_users_from_role(self, role_id: str) -> int:
        """Remove a role from every user holding it."""
        result = await self.session.execute(
            delete(UserRoleModel).where(UserRoleModel.role_id == role_id)
        )
        await self.session.flush()
        return result.rowcount

    async def get_roles_for_user(self, user_id: str) -> list[str]:
        """Get the role ids assigned to a user, in assignment order."""
        result = await self.session.execute(
            select(UserRoleModel.role_id)
            .where(UserRoleModel.user_id == user_id)
            .order_by(UserRoleModel.position, UserRoleModel.role_id)
        )
        return list(result.scalars().all())

    async def get_users_for_role(self, role_id: str) -> list[str]:
        """Get the ids of every user holding a role."""
        result = await self.session.execute(
            select(UserRoleModel.user_id)
            .where(UserRoleModel.role_id == role_id)
            .order_by(UserRoleModel.user_id)
        )
        return list(result.scalars().all())

    # Role <-> permission

    async def assign_permissions_to_role(self, role_id: str, menu_ids: list[str]) -> list[str]:
        """Replace the role's entire grant set.

        Each row's ``permission_type`` follows the granted menu's kind.

        Args:
            role_id: Role ID.
            menu_ids: New grant set. Duplicates are collapsed.

        Returns:
            The stored menu ids, in grant order.
        """
        menu_ids = _unique(menu_ids)
        kinds: dict[str, str] = {}
        if menu_ids:
            result = await self.session.execute(
                select(MenuModel.id, MenuModel.kind).where(MenuModel.id.in_(menu_ids))
            )
            kinds = {menu_id: kind for menu_id, kind in result}

        await self.session.execute(
            delete(RolePermissionModel).where(RolePermissionModel.role_id == role_id)
        )
        self.session.add_all(
            RolePermissionModel(
                role_id=role_id,
                menu_id=menu_id,
                permission_type=(
                    PermissionType.BUTTON.value
                    if kinds.get(menu_id) == MenuKind.BUTTON.value
                    else PermissionType.MENU.value
                ),
                position=position,
            )
            for position, menu_id in enumerate(menu_ids)
        )
        await self.session.flush()
        return menu_ids

    async def remove_permissions_from_role(
        self, role_id: str, menu_ids: list[str] | None = None
    ) -> int:
        """Remove grants from a role.

        Args:
            role_id: Role ID.
            menu_ids: Menus to revoke. None or empty revokes them all.

        Returns:
            Number of grants removed.
        """
        stmt = delete(RolePermissionModel).where(RolePermissionModel.role_id == role_id)
        if menu_ids:
            stmt = stmt.where(RolePermissionModel.menu_id.in_(set(menu_ids)))
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def remove_menu_from_roles(self, menu_id: str) -> int:
        """Revoke a menu from every role granting it."""
        result = await self.session.execute(
            delete(RolePermissionModel).where(RolePermissionModel.menu_id == menu_id)
        )
        await self.session.flush()
        return result.rowcount

    async def get_permissions_for_role(self, role_id: str) -> list[str]:
        """Get the menu ids granted by a role, in grant order."""
        result = await self.session.execute(
            select(RolePermissionModel.menu_id)
            .where(RolePermissionModel.role_id == role_id)
            .order_by(RolePermissionModel.position, RolePermissionModel.menu_id)
        )
        return _unique(list(result.scalars().all()))

    async def get_permissions_for_roles(self, role_ids: list[str]) -> dict[str, list[str]]:
        """Get the grant lists of several roles in one query.

        Returns:
            Mapping of role id to its menu ids. Every requested role is present.
        """
        grants: dict[str, list[str]] = {role_id: [] for role_id in role_ids}
        if not role_ids:
            return grants
        result = await self.session.execute(
            select(RolePermissionModel.role_id, RolePermissionModel.menu_id)
            .where(RolePermissionModel.role_id.in_(set(role_ids)))
            .order_by(RolePermissionModel.role_id, RolePermissionModel.position)
        )
        for role_id, menu_id in result:
            if menu_id not in grants[role_id]:
                grants[role_id].append(menu_id)
        return grants

    async def get_roles_for_permission(self, menu_id: str) -> list[str]:
        """Get the ids of every role granting a menu."""
        result = await self.session.execute(
            select(RolePermissionModel.role_id)
            .where(RolePermissionModel.menu_id == menu_id)
            .distinct()
            .order_by(RolePermissionModel.role_id)
        )
        return list(result.scalars().all())

    # Aggregation

    async def get_menu_ids_for_roles(
        self, role_ids: list[str], enabled_roles_only: bool = True
    ) -> set[str]:
        """Union of the grants of several roles.

        Args:
            role_ids: Roles to aggregate.
            enabled_roles_only: Skip roles whose status is disabled.

        Returns:
            De-duplicated set of menu ids.
        """
        if not role_ids:
            return set()
        query = select(RolePermissionModel.menu_id).where(
            RolePermissionModel.role_id.in_(set(role_ids))
        )
        if enabled_roles_only:
            query = query.join(RoleModel, RoleModel.id == RolePermissionModel.role_id).where(
                RoleModel.status == Status.ENABLED.value
            )
        result = await self.session.execute(query.distinct())
        return set(result.scalars().all())

    async def get_effective_permissions_for_user(self, user_id: str) -> set[str]:
        """Union of the grants of every enabled role the user holds.

        Returns:
            De-duplicated set of menu ids.
        """
        result = await self.session.execute(
            select(RolePermissionModel.menu_id)
            .join(UserRoleModel, UserRoleModel.role_id == RolePermissionModel.role_id)
            .join(RoleModel, RoleModel.id == RolePermissionModel.role_id)
            .where(
                UserRoleModel.user_id == user_id,
                RoleModel.status == Status.ENABLED.value,
            )
            .distinct()
        )
        return set(result.scalars().all())

    async def has_permission(self, user_id: str, permission_code: str) -> bool:
        """Check whether any enabled role of the user grants an enabled menu carrying the code."""
        if not permission_code:
            return False
        result = await self.session.execute(
            select(MenuModel.id)
            .join(RolePermissionModel, RolePermissionModel.menu_id == MenuModel.id)
            .join(UserRoleModel, UserRoleModel.role_id == RolePermissionModel.role_id)
            .join(RoleModel, RoleModel.id == RolePermissionModel.role_id)
            .where(
                UserRoleModel.user_id == user_id,
                RoleModel.status == Status.ENABLED.value,
                MenuModel.status == Status.ENABLED.value,
                MenuModel.permission_code == permission_code,
            )
            .limit(1)
        )
        return result.first() is not None
