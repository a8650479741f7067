"""Role service for business logic.

Provides role management with key/name uniqueness checks, and keeps each
role's grants and user assignments in the assignment tables. A role's
``menu_ids`` are always read back from those tables.
"""

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenantgate.core.exceptions import ConflictError, NotFoundError, ValidationError
from tenantgate.core.logging import get_logger
from tenantgate.domain.entities.menu import Status
from tenantgate.domain.entities.role import DataScope, Role, RoleFilter, RoleStats
from tenantgate.domain.services.id_generator import IdGenerator
from tenantgate.infrastructure.persistence.repositories import (
    AssignmentRepository,
    MenuRepository,
    RoleRepository,
)

logger = get_logger(__name__)

SUPER_ADMIN_KEY = "super_admin"

_PLAIN_FIELDS = ("sort_order", "remark")


class RoleService:
    """Service for role management business logic."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the role service.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session
        self.role_repo = RoleRepository(session)
        self.menu_repo = MenuRepository(session)
        self.assignment_repo = AssignmentRepository(session)

    async def _guarded(self, coro):
        """Await a repository write, reporting constraint races as conflicts."""
        try:
            return await coro
        except IntegrityError as e:
            logger.warning("Role write violated a unique constraint", error=str(e.orig))
            raise ConflictError("Role key or name already exists") from e

    async def _require_menus(self, menu_ids: list[str]) -> None:
        if not menu_ids:
            return
        found = {menu.id for menu in await self.menu_repo.get_by_ids(menu_ids)}
        missing = [menu_id for menu_id in menu_ids if menu_id not in found]
        if missing:
            raise NotFoundError("Menu", missing[0])

    async def _with_grants(self, role: Role) -> Role:
        role.menu_ids = await self.assignment_repo.get_permissions_for_role(role.id)
        return role

    async def create_role(
        self,
        key: str,
        name: str,
        tenant_id: str = "",
        sort_order: int = 0,
        data_scope: DataScope = DataScope.ALL,
        status: Status = Status.ENABLED,
        remark: str = "",
        menu_ids: list[str] | None = None,
    ) -> Role:
        """Create a role and its grants.

        Args:
            key: Globally unique role key.
            name: Role name, unique within the tenant.
            tenant_id: Owning tenant, empty for a platform role.
            sort_order: Listing position.
            data_scope: Declared row-visibility scope.
            status: Initial status.
            remark: Free-form note.
            menu_ids: Menus granted by the role.

        Returns:
            The created role with its grants.

        Raises:
            ValidationError: If the key or name is blank.
            ConflictError: If the key or the name within the tenant is taken.
            NotFoundError: If a granted menu does not exist.
        """
        key = (key or "").strip()
        name = (name or "").strip()
        if not key:
            raise ValidationError("Role key is required")
        if not name:
            raise ValidationError("Role name is required")
        tenant_id = tenant_id or ""
        menu_ids = list(menu_ids or [])

        if await self.role_repo.key_exists(key):
            raise ConflictError(f"Role key '{key}' already exists", field="key")
        if await self.role_repo.name_exists(name, tenant_id):
            raise ConflictError(f"Role name '{name}' already exists in this tenant", field="name")
        await self._require_menus(menu_ids)

        role = Role(
            id=IdGenerator.role_id(),
            key=key,
            name=name,
            tenant_id=tenant_id,
            sort_order=sort_order,
            data_scope=data_scope,
            status=status,
            remark=remark,
        )
        created = await self._guarded(self.role_repo.create(role))
        created.menu_ids = await self.assignment_repo.assign_permissions_to_role(
            created.id, menu_ids
        )

        logger.info(
            "Role created",
            role_id=created.id,
            key=created.key,
            tenant_id=created.tenant_id,
            menu_count=len(created.menu_ids),
        )
        return created

    async def get_role(self, role_id: str) -> Role:
        """Get a role with its grants.

        Raises:
            NotFoundError: If the role does not exist.
        """
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise NotFoundError("Role", role_id)
        return await self._with_grants(role)

    async def update_role(self, role_id: str, fields: dict[str, Any]) -> Role:
        """Apply a partial update to a role.

        Key and name uniqueness are only re-checked when they change. A
        ``menu_ids`` entry replaces the role's grant set whole.

        Raises:
            NotFoundError: If the role or a granted menu does not exist.
            ConflictError: If the new key or name is taken.
        """
        existing = await self.role_repo.get_by_id(role_id)
        if existing is None:
            raise NotFoundError("Role", role_id)
        updates: dict[str, Any] = {}

        if fields.get("key") is not None:
            key = fields["key"].strip()
            if not key:
                raise ValidationError("Role key is required")
            if key != existing.key:
                if await self.role_repo.key_exists(key, exclude_id=role_id):
                    raise ConflictError(f"Role key '{key}' already exists", field="key")
                updates["key"] = key

        if fields.get("name") is not None:
            name = fields["name"].strip()
            if not name:
                raise ValidationError("Role name is required")
            if name != existing.name:
                if await self.role_repo.name_exists(name, existing.tenant_id, exclude_id=role_id):
                    raise ConflictError(
                        f"Role name '{name}' already exists in this tenant", field="name"
                    )
                updates["name"] = name

        if fields.get("data_scope") is not None:
            updates["data_scope"] = DataScope(fields["data_scope"])
        if fields.get("status") is not None:
            updates["status"] = Status(fields["status"])
        for field_name in _PLAIN_FIELDS:
            if fields.get(field_name) is not None:
                updates[field_name] = fields[field_name]

        menu_ids = fields.get("menu_ids")
        if menu_ids is not None:
            await self._require_menus(list(menu_ids))

        role = existing
        if updates:
            role = await self._guarded(self.role_repo.update(role_id, updates))
        if menu_ids is not None:
            await self.assignment_repo.assign_permissions_to_role(role_id, list(menu_ids))

        logger.info(
            "Role updated",
            role_id=role_id,
            fields=sorted(updates),
            grants_replaced=menu_ids is not None,
        )
        return await self._with_grants(role)

    async def delete_role(self, role_id: str) -> None:
        """Delete a role after detaching its grants and user assignments.

        Raises:
            NotFoundError: If the role does not exist.
        """
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise NotFoundError("Role", role_id)

        revoked = await self.assignment_repo.remove_permissions_from_role(role_id)
        unassigned = await self.assignment_repo.remove_users_from_role(role_id)
        await self.role_repo.delete(role_id)

        logger.info(
            "Role deleted",
            role_id=role_id,
            key=role.key,
            revoked_grants=revoked,
            unassigned_users=unassigned,
        )

    async def list_roles(
        self,
        role_filter: RoleFilter | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[Role], int]:
        """List roles one page at a time.

        Args:
            role_filter: Optional filters.
            page: 1-based page number.
            page_size: Roles per page.

        Returns:
            Tuple of (roles with grants, total matching count).
        """
        if page < 1 or page_size < 1:
            raise ValidationError("page and page_size must be positive")
        roles, total = await self.role_repo.list(
            role_filter, offset=(page - 1) * page_size, limit=page_size
        )
        grants = await self.assignment_repo.get_permissions_for_roles([r.id for r in roles])
        for role in roles:
            role.menu_ids = grants[role.id]
        return roles, total

    async def get_roles_by_ids(self, role_ids: list[str]) -> list[Role]:
        """Get existing roles among `role_ids`, without grants."""
        return await self.role_repo.get_by_ids(role_ids)

    async def get_roles_by_tenant(self, tenant_id: str) -> list[Role]:
        """Get enabled roles assignable within a tenant, platform roles included."""
        roles = await self.role_repo.get_by_tenant(tenant_id)
        grants = await self.assignment_repo.get_permissions_for_roles([r.id for r in roles])
        for role in roles:
            role.menu_ids = grants[role.id]
        return roles

    async def batch_update_status(self, role_ids: list[str], status: Status) -> int:
        """Set the status of several roles.

        Returns:
            Number of roles modified.
        """
        modified = await self.role_repo.batch_set_status(role_ids, status)
        logger.info(
            "Role status updated in batch",
            requested=len(role_ids),
            modified=modified,
            status=Status(status).value,
        )
        return modified

    async def get_stats(self, tenant_id: str | None = None) -> RoleStats:
        return await self.role_repo.stats(tenant_id)

    async def assign_permissions(self, role_id: str, menu_ids: list[str]) -> list[str]:
        """Replace a role's grant set.

        Raises:
            NotFoundError: If the role or a menu does not exist.
        """
        await self.get_role(role_id)
        await self._require_menus(menu_ids)
        stored = await self.assignment_repo.assign_permissions_to_role(role_id, menu_ids)
        logger.info("Role permissions replaced", role_id=role_id, menu_count=len(stored))
        return stored

    async def get_role_users(self, role_id: str) -> list[str]:
        """Get the ids of every user holding a role.

        Raises:
            NotFoundError: If the role does not exist.
        """
        if await self.role_repo.get_by_id(role_id) is None:
            raise NotFoundError("Role", role_id)
        return await self.assignment_repo.get_users_for_role(role_id)

    async def assign_roles_to_user(
        self, user_id: str, role_ids: list[str], tenant_id: str | None = None
    ) -> list[Role]:
        """Replace a user's role set.

        Args:
            user_id: User identifier.
            role_ids: New role set.
            tenant_id: When given, only the tenant's own roles and platform
                roles are replaced. Roles of other tenants stay assigned,
                ahead of the new set.

        Returns:
            Every role the user holds afterwards, in assignment order.

        Raises:
            NotFoundError: If any role does not exist.
        """
        unique_ids = list(dict.fromkeys(role_ids))
        roles = {role.id: role for role in await self.role_repo.get_by_ids(unique_ids)}
        missing = [role_id for role_id in unique_ids if role_id not in roles]
        if missing:
            raise NotFoundError("Role", missing[0])

        retained: list[str] = []
        if tenant_id is not None:
            for held in await self.get_user_roles(user_id):
                if held.is_platform or held.tenant_id == tenant_id or held.id in roles:
                    continue
                retained.append(held.id)
                roles[held.id] = held

        stored = await self.assignment_repo.assign_roles_to_user(user_id, retained + unique_ids)
        logger.info(
            "User roles replaced",
            user_id=user_id,
            role_ids=stored,
            retained=len(retained),
        )
        return [roles[role_id] for role_id in stored]

    async def remove_roles_from_user(self, user_id: str, role_ids: list[str] | None = None) -> int:
        removed = await self.assignment_repo.remove_roles_from_user(user_id, role_ids)
        logger.info("User roles removed", user_id=user_id, removed=removed)
        return removed

    async def bootstrap_super_admin(self, user_id: str) -> Role:
        """Ensure the platform super admin role exists and ``user_id`` holds it.

        The role is created when missing and re-enabled when disabled. Its
        grants are replaced with every menu in the catalog. The user keeps
        any roles it already holds.

        Raises:
            ValidationError: If the ``super_admin`` key belongs to a tenant role.
        """
        role = await self.role_repo.get_by_key(SUPER_ADMIN_KEY)
        if role is None:
            role = await self.create_role(
                key=SUPER_ADMIN_KEY,
                name="Super Admin",
                sort_order=1,
                data_scope=DataScope.ALL,
                remark="Platform administrator with every permission",
            )
        elif not role.is_platform:
            raise ValidationError(f"Role '{SUPER_ADMIN_KEY}' is not a platform role")
        elif role.status != Status.ENABLED:
            role = await self.role_repo.update(role.id, {"status": Status.ENABLED})

        menu_ids = [menu.id for menu in await self.menu_repo.list()]
        role.menu_ids = await self.assignment_repo.assign_permissions_to_role(role.id, menu_ids)

        held = await self.assignment_repo.get_roles_for_user(user_id)
        if role.id not in held:
            await self.assignment_repo.assign_roles_to_user(user_id, held + [role.id])

        logger.info(
            "Super admin bootstrapped",
            role_id=role.id,
            user_id=user_id,
            menu_count=len(role.menu_ids),
        )
        return role

    async def get_user_roles(self, user_id: str) -> list[Role]:
        """Get the roles assigned to a user, in assignment order."""
        role_ids = await self.assignment_repo.get_roles_for_user(user_id)
        roles = {role.id: role for role in await self.role_repo.get_by_ids(role_ids)}
        return [roles[role_id] for role_id in role_ids if role_id in roles]
