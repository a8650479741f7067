"""Menu service for business logic.

Enforces the menu tree invariants before anything reaches storage:
sibling-unique names, globally unique permission codes, an acyclic parent
graph and leaf-only buttons.
"""

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenantgate.core.exceptions import (
    ConflictError,
    CycleError,
    HasChildrenError,
    NotFoundError,
    ValidationError,
)
from tenantgate.core.logging import get_logger
from tenantgate.domain.entities.menu import (
    Menu,
    MenuFilter,
    MenuKind,
    MenuStats,
    MenuTreeNode,
    Status,
)
from tenantgate.domain.services.id_generator import IdGenerator
from tenantgate.domain.services.menu_tree_builder import build_tree, is_descendant
from tenantgate.infrastructure.persistence.repositories import (
    AssignmentRepository,
    MenuRepository,
)

logger = get_logger(__name__)

_PLAIN_FIELDS = ("route", "component", "icon", "sort_order", "visible")


class MenuService:
    """Service for menu management business logic."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the menu service.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session
        self.menu_repo = MenuRepository(session)
        self.assignment_repo = AssignmentRepository(session)

    async def _require_parent(self, parent_id: str) -> Menu:
        parent = await self.menu_repo.get_by_id(parent_id)
        if parent is None:
            raise NotFoundError("Parent menu", parent_id)
        if parent.kind == MenuKind.BUTTON:
            raise ValidationError("Button menus cannot have children")
        return parent

    async def _flush_guarded(self, coro):
        """Await a repository write, reporting constraint races as conflicts."""
        try:
            return await coro
        except IntegrityError as e:
            logger.warning("Menu write violated a unique constraint", error=str(e.orig))
            raise ConflictError("Menu name or permission code already exists") from e

    async def create_menu(
        self,
        name: str,
        kind: MenuKind,
        parent_id: str = "",
        route: str = "",
        component: str = "",
        icon: str = "",
        permission_code: str | None = None,
        sort_order: int = 0,
        visible: bool = True,
        status: Status = Status.ENABLED,
    ) -> Menu:
        """Create a new menu.

        Args:
            name: Menu name, unique among its siblings.
            kind: Directory, page or button.
            parent_id: Parent menu ID, empty for a root menu.
            route: Client route path.
            component: Client component path.
            icon: Icon identifier.
            permission_code: Optional capability token, globally unique.
            sort_order: Position among siblings.
            visible: Whether the menu shows up in navigation.
            status: Initial status.

        Returns:
            The created menu.

        Raises:
            NotFoundError: If the parent does not exist.
            ValidationError: If the name is blank or the parent is a button.
            ConflictError: If the name or permission code is taken.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Menu name is required")
        parent_id = parent_id or ""
        permission_code = permission_code or None

        if parent_id:
            await self._require_parent(parent_id)

        if await self.menu_repo.name_exists(name, parent_id):
            raise ConflictError("A sibling menu with this name already exists", field="name")

        if permission_code and await self.menu_repo.permission_code_exists(permission_code):
            raise ConflictError("Permission code already exists", field="permission_code")

        menu = Menu(
            id=IdGenerator.menu_id(),
            parent_id=parent_id,
            name=name,
            kind=kind,
            route=route,
            component=component,
            icon=icon,
            permission_code=permission_code,
            sort_order=sort_order,
            visible=visible,
            status=status,
        )
        created = await self._flush_guarded(self.menu_repo.create(menu))

        logger.info(
            "Menu created",
            menu_id=created.id,
            name=created.name,
            parent_id=created.parent_id,
            kind=created.kind.value,
        )
        return created

    async def get_menu(self, menu_id: str) -> Menu:
        """Get a menu by ID.

        Raises:
            NotFoundError: If the menu does not exist.
        """
        menu = await self.menu_repo.get_by_id(menu_id)
        if menu is None:
            raise NotFoundError("Menu", menu_id)
        return menu

    async def update_menu(self, menu_id: str, fields: dict[str, Any]) -> Menu:
        """Apply a partial update to a menu.

        Only keys present in ``fields`` are considered. Reparenting rejects
        the menu itself and any of its descendants as the new parent.

        Args:
            menu_id: Menu ID.
            fields: Subset of menu attributes to change.

        Returns:
            The updated menu.

        Raises:
            NotFoundError: If the menu or the new parent does not exist.
            CycleError: If the new parent is the menu or one of its descendants.
            ValidationError: If the result would break a tree invariant.
            ConflictError: If the name or permission code is taken.
        """
        existing = await self.get_menu(menu_id)
        updates: dict[str, Any] = {}

        parent_id = existing.parent_id
        if fields.get("parent_id") is not None:
            parent_id = fields["parent_id"]
        parent_changed = parent_id != existing.parent_id

        if parent_changed:
            if parent_id == menu_id:
                raise CycleError("A menu cannot be its own parent")
            if parent_id:
                if is_descendant(await self.menu_repo.list(), menu_id, parent_id):
                    raise CycleError("A menu cannot be moved under one of its descendants")
                await self._require_parent(parent_id)
            updates["parent_id"] = parent_id

        name = existing.name
        if fields.get("name") is not None:
            name = fields["name"].strip()
            if not name:
                raise ValidationError("Menu name is required")
        name_changed = name != existing.name
        if name_changed:
            updates["name"] = name
        if (name_changed or parent_changed) and await self.menu_repo.name_exists(
            name, parent_id, exclude_id=menu_id
        ):
            raise ConflictError("A sibling menu with this name already exists", field="name")

        if "permission_code" in fields:
            code = fields["permission_code"] or None
            if code != existing.permission_code:
                if code and await self.menu_repo.permission_code_exists(code, exclude_id=menu_id):
                    raise ConflictError("Permission code already exists", field="permission_code")
                updates["permission_code"] = code

        if fields.get("kind") is not None:
            kind = MenuKind(fields["kind"])
            if kind != existing.kind:
                if kind == MenuKind.BUTTON and await self.menu_repo.has_children(menu_id):
                    raise ValidationError("A menu with children cannot become a button")
                updates["kind"] = kind

        if fields.get("status") is not None:
            updates["status"] = Status(fields["status"])

        for field_name in _PLAIN_FIELDS:
            if fields.get(field_name) is not None:
                updates[field_name] = fields[field_name]

        if not updates:
            return existing

        updated = await self._flush_guarded(self.menu_repo.update(menu_id, updates))
        logger.info("Menu updated", menu_id=menu_id, fields=sorted(updates))
        return updated

    async def delete_menu(self, menu_id: str) -> None:
        """Delete a leaf menu and revoke it from every role.

        Raises:
            NotFoundError: If the menu does not exist.
            HasChildrenError: If any menu still has it as parent.
        """
        menu = await self.get_menu(menu_id)
        if await self.menu_repo.has_children(menu_id):
            raise HasChildrenError(menu_id)

        revoked = await self.assignment_repo.remove_menu_from_roles(menu_id)
        await self.menu_repo.delete(menu_id)
        logger.info("Menu deleted", menu_id=menu_id, name=menu.name, revoked_grants=revoked)

    async def list_menus(self, menu_filter: MenuFilter | None = None) -> list[Menu]:
        """List menus as a flat, ordered set."""
        return await self.menu_repo.list(menu_filter)

    async def get_menu_tree(self, menu_filter: MenuFilter | None = None) -> list[MenuTreeNode]:
        """Build the administrative tree.

        With a filter, menus whose ancestors were filtered out do not appear.
        """
        return build_tree(await self.menu_repo.list(menu_filter))

    async def get_children(self, parent_id: str) -> list[Menu]:
        """Get the direct children of a menu ("" for roots)."""
        return await self.menu_repo.get_children(parent_id)

    async def get_menus_by_ids(self, menu_ids: list[str]) -> list[Menu]:
        return await self.menu_repo.get_by_ids(menu_ids)

    async def batch_update_status(self, menu_ids: list[str], status: Status) -> int:
        """Set the status of several menus.

        Returns:
            Number of menus modified.
        """
        modified = await self.menu_repo.batch_set_status(menu_ids, status)
        logger.info(
            "Menu status updated in batch",
            requested=len(menu_ids),
            modified=modified,
            status=Status(status).value,
        )
        return modified

    async def get_stats(self) -> MenuStats:
        return await self.menu_repo.stats()
