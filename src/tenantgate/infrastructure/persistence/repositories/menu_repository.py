"""Repository for menu database operations.

Uniqueness of sibling names and permission codes is backed by database
constraints; the ``*_exists`` helpers let services report duplicates before
the constraint fires.
"""

from __future__ import annotations

from datetime import timezone
from typing import Any

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tenantgate.domain.entities.menu import Menu, MenuFilter, MenuKind, MenuStats, Status
from tenantgate.infrastructure.persistence.models import MenuModel
from tenantgate.infrastructure.persistence.models.menu import utcnow
from tenantgate.infrastructure.persistence.repositories.filters import (
    LIKE_ESCAPE,
    contains_pattern,
)

UPDATABLE_FIELDS = frozenset(
    {
        "parent_id",
        "name",
        "kind",
        "route",
        "component",
        "icon",
        "permission_code",
        "sort_order",
        "visible",
        "status",
    }
)


class MenuRepository:
    """Repository for menu database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    @staticmethod
    def _ordering() -> tuple:
        return (
            MenuModel.parent_id,
            MenuModel.sort_order,
            MenuModel.created_at,
            MenuModel.id,
        )

    def _to_model(self, entity: Menu) -> MenuModel:
        """Convert domain entity to infrastructure model."""
        model = MenuModel(
            id=entity.id,
            parent_id=entity.parent_id,
            name=entity.name,
            kind=entity.kind.value,
            route=entity.route,
            component=entity.component,
            icon=entity.icon,
            permission_code=entity.permission_code or None,
            sort_order=entity.sort_order,
            visible=entity.visible,
            status=entity.status.value,
        )
        if entity.created_at is not None:
            model.created_at = entity.created_at
        if entity.updated_at is not None:
            model.updated_at = entity.updated_at
        return model

    def _to_entity(self, model: MenuModel) -> Menu:
        """Convert infrastructure model to domain entity."""
        created_at = model.created_at
        if created_at and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        updated_at = model.updated_at
        if updated_at and updated_at.tzinfo is None:
            updated_at = updated_at.replace(tzinfo=timezone.utc)

        return Menu(
            id=model.id,
            parent_id=model.parent_id,
            name=model.name,
            kind=MenuKind(model.kind),
            route=model.route,
            component=model.component,
            icon=model.icon,
            permission_code=model.permission_code,
            sort_order=model.sort_order,
            visible=model.visible,
            status=Status(model.status),
            created_at=created_at,
            updated_at=updated_at,
        )

    async def create(self, menu: Menu) -> Menu:
        """Insert a new menu.

        Args:
            menu: Menu entity with its id already assigned.

        Returns:
            The stored menu, timestamps populated.
        """
        model = self._to_model(menu)
        self.session.add(model)
        await self.session.flush()
        return self._to_entity(model)

    async def _get_model(self, menu_id: str) -> MenuModel | None:
        result = await self.session.execute(select(MenuModel).where(MenuModel.id == menu_id))
        return result.scalar_one_or_none()

    async def get_by_id(self, menu_id: str) -> Menu | None:
        """Get a menu by ID.

        Args:
            menu_id: Menu ID.

        Returns:
            Menu entity if found, None otherwise.
        """
        model = await self._get_model(menu_id)
        return self._to_entity(model) if model else None

    async def get_by_ids(self, menu_ids: list[str]) -> list[Menu]:
        """Get every menu whose id is in ``menu_ids``.

        Unknown ids are skipped silently.
        """
        if not menu_ids:
            return []
        result = await self.session.execute(
            select(MenuModel)
            .where(MenuModel.id.in_(set(menu_ids)))
            .order_by(*self._ordering())
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def get_children(self, parent_id: str) -> list[Menu]:
        """Get the direct children of a menu, in sibling order."""
        result = await self.session.execute(
            select(MenuModel)
            .where(MenuModel.parent_id == parent_id)
            .order_by(MenuModel.sort_order, MenuModel.created_at, MenuModel.id)
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def has_children(self, menu_id: str) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(MenuModel).where(MenuModel.parent_id == menu_id)
        )
        return result.scalar_one() > 0

    async def list(self, menu_filter: MenuFilter | None = None) -> list[Menu]:
        """List menus matching the filter.

        Name and permission code match as case-insensitive substrings; kind,
        status and visibility match exactly.

        Args:
            menu_filter: Optional filters. None lists every menu.

        Returns:
            Menus ordered by (parent_id, sort_order, created_at).
        """
        query = select(MenuModel)
        if menu_filter is not None:
            if menu_filter.name:
                query = query.where(
                    MenuModel.name.ilike(contains_pattern(menu_filter.name), escape=LIKE_ESCAPE)
                )
            if menu_filter.permission_code:
                query = query.where(
                    MenuModel.permission_code.ilike(
                        contains_pattern(menu_filter.permission_code), escape=LIKE_ESCAPE
                    )
                )
            if menu_filter.kind is not None:
                query = query.where(MenuModel.kind == MenuKind(menu_filter.kind).value)
            if menu_filter.status is not None:
                query = query.where(MenuModel.status == Status(menu_filter.status).value)
            if menu_filter.visible is not None:
                query = query.where(MenuModel.visible == menu_filter.visible)

        result = await self.session.execute(query.order_by(*self._ordering()))
        return [self._to_entity(m) for m in result.scalars().all()]

    async def name_exists(self, name: str, parent_id: str, exclude_id: str | None = None) -> bool:
        """Check whether a sibling under ``parent_id`` already uses ``name``.

        Args:
            name: Menu name.
            parent_id: Parent menu ID of the sibling group.
            exclude_id: Menu ID to ignore (the menu being updated).
        """
        query = select(func.count()).select_from(MenuModel).where(
            (MenuModel.name == name) & (MenuModel.parent_id == parent_id)
        )
        if exclude_id:
            query = query.where(MenuModel.id != exclude_id)
        result = await self.session.execute(query)
        return result.scalar_one() > 0

    async def permission_code_exists(self, code: str, exclude_id: str | None = None) -> bool:
        """Check whether any menu already carries ``code``."""
        query = select(func.count()).select_from(MenuModel).where(
            MenuModel.permission_code == code
        )
        if exclude_id:
            query = query.where(MenuModel.id != exclude_id)
        result = await self.session.execute(query)
        return result.scalar_one() > 0

    async def update(self, menu_id: str, fields: dict[str, Any]) -> Menu | None:
        """Apply a partial update to a menu.

        Args:
            menu_id: Menu ID.
            fields: Column values to set. Unknown keys raise ValueError.

        Returns:
            Updated menu, or None if it does not exist.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update menu fields: {sorted(unknown)}")

        model = await self._get_model(menu_id)
        if model is None:
            return None

        for name, value in fields.items():
            if name in ("kind", "status") and value is not None:
                value = value.value if hasattr(value, "value") else value
            if name == "permission_code":
                value = value or None
            setattr(model, name, value)
        model.updated_at = utcnow()

        await self.session.flush()
        return self._to_entity(model)

    async def delete(self, menu_id: str) -> bool:
        """Delete a menu row.

        Returns:
            True if a row was deleted.
        """
        result = await self.session.execute(delete(MenuModel).where(MenuModel.id == menu_id))
        await self.session.flush()
        return result.rowcount > 0

    async def batch_set_status(self, menu_ids: list[str], status: Status) -> int:
        """Set the status of many menus in one statement.

        Returns:
            Number of rows modified.
        """
        if not menu_ids:
            return 0
        result = await self.session.execute(
            update(MenuModel)
            .where(MenuModel.id.in_(set(menu_ids)))
            .values(status=Status(status).value, updated_at=utcnow())
        )
        await self.session.flush()
        return result.rowcount

    async def stats(self) -> MenuStats:
        """Count menus by status and kind."""
        result = await self.session.execute(
            select(
                func.count(),
                func.sum(case((MenuModel.status == Status.ENABLED.value, 1), else_=0)),
                func.sum(case((MenuModel.status == Status.DISABLED.value, 1), else_=0)),
                func.sum(case((MenuModel.kind == MenuKind.DIRECTORY.value, 1), else_=0)),
                func.sum(case((MenuModel.kind == MenuKind.PAGE.value, 1), else_=0)),
                func.sum(case((MenuModel.kind == MenuKind.BUTTON.value, 1), else_=0)),
            ).select_from(MenuModel)
        )
        total, enabled, disabled, directory, page, button = result.one()
        return MenuStats(
            total=total or 0,
            enabled=enabled or 0,
            disabled=disabled or 0,
            directory=directory or 0,
            page=page or 0,
            button=button or 0,
        )
