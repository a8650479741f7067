"""Role repository for database operations."""

from __future__ import annotations

from datetime import timezone
from typing import Any

from sqlalchemy import case, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tenantgate.domain.entities.menu import Status
from tenantgate.domain.entities.role import DataScope, Role, RoleFilter, RoleStats
from tenantgate.infrastructure.persistence.models import RoleModel
from tenantgate.infrastructure.persistence.models.menu import utcnow
from tenantgate.infrastructure.persistence.repositories.filters import (
    LIKE_ESCAPE,
    contains_pattern,
)

UPDATABLE_FIELDS = frozenset(
    {"key", "name", "sort_order", "data_scope", "status", "remark"}
)


class RoleRepository:
    """Repository for role database operations.

    Roles returned from here carry an empty ``menu_ids`` list; grants are
    read from the assignment repository.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    def _to_model(self, entity: Role) -> RoleModel:
        """Convert domain entity to infrastructure model."""
        model = RoleModel(
            id=entity.id,
            key=entity.key,
            name=entity.name,
            tenant_id=entity.tenant_id,
            sort_order=entity.sort_order,
            data_scope=entity.data_scope.value,
            status=entity.status.value,
            remark=entity.remark,
        )
        if entity.created_at is not None:
            model.created_at = entity.created_at
        if entity.updated_at is not None:
            model.updated_at = entity.updated_at
        return model

    def _to_entity(self, model: RoleModel) -> Role:
        """Convert infrastructure model to domain entity."""
        created_at = model.created_at
        if created_at and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        updated_at = model.updated_at
        if updated_at and updated_at.tzinfo is None:
            updated_at = updated_at.replace(tzinfo=timezone.utc)

        return Role(
            id=model.id,
            key=model.key,
            name=model.name,
            tenant_id=model.tenant_id,
            sort_order=model.sort_order,
            data_scope=DataScope(model.data_scope),
            status=Status(model.status),
            remark=model.remark,
            created_at=created_at,
            updated_at=updated_at,
        )

    async def create(self, role: Role) -> Role:
        """Insert a new role.

        Args:
            role: Role entity with its id already assigned.

        Returns:
            The stored role.
        """
        model = self._to_model(role)
        self.session.add(model)
        await self.session.flush()
        return self._to_entity(model)

    async def _get_model(self, role_id: str) -> RoleModel | None:
        result = await self.session.execute(select(RoleModel).where(RoleModel.id == role_id))
        return result.scalar_one_or_none()

    async def get_by_id(self, role_id: str) -> Role | None:
        """Get a role by ID.

        Args:
            role_id: Role ID.

        Returns:
            Role entity if found, None otherwise.
        """
        model = await self._get_model(role_id)
        return self._to_entity(model) if model else None

    async def get_by_ids(self, role_ids: list[str]) -> list[Role]:
        """Get every role whose id is in ``role_ids``, in listing order."""
        if not role_ids:
            return []
        result = await self.session.execute(
            select(RoleModel)
            .where(RoleModel.id.in_(set(role_ids)))
            .order_by(RoleModel.sort_order, RoleModel.created_at.desc())
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def get_by_key(self, key: str) -> Role | None:
        """Get a role by its key."""
        result = await self.session.execute(select(RoleModel).where(RoleModel.key == key))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def key_exists(self, key: str, exclude_id: str | None = None) -> bool:
        """Check whether any role already uses ``key``."""
        query = select(func.count()).select_from(RoleModel).where(RoleModel.key == key)
        if exclude_id:
            query = query.where(RoleModel.id != exclude_id)
        result = await self.session.execute(query)
        return result.scalar_one() > 0

    async def name_exists(self, name: str, tenant_id: str, exclude_id: str | None = None) -> bool:
        """Check whether a role in ``tenant_id`` already uses ``name``.

        Args:
            name: Role name.
            tenant_id: Tenant ID, empty for the platform.
            exclude_id: Role ID to ignore (the role being updated).
        """
        query = select(func.count()).select_from(RoleModel).where(
            (RoleModel.name == name) & (RoleModel.tenant_id == tenant_id)
        )
        if exclude_id:
            query = query.where(RoleModel.id != exclude_id)
        result = await self.session.execute(query)
        return result.scalar_one() > 0

    async def update(self, role_id: str, fields: dict[str, Any]) -> Role | None:
        """Apply a partial update to a role.

        Args:
            role_id: Role ID.
            fields: Column values to set. Unknown keys raise ValueError.

        Returns:
            Updated role, or None if it does not exist.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update role fields: {sorted(unknown)}")

        model = await self._get_model(role_id)
        if model is None:
            return None

        for name, value in fields.items():
            if name in ("data_scope", "status") and value is not None:
                value = value.value if hasattr(value, "value") else value
            setattr(model, name, value)
        model.updated_at = utcnow()

        await self.session.flush()
        return self._to_entity(model)

    async def delete(self, role_id: str) -> bool:
        """Delete a role row.

        Returns:
            True if a row was deleted.
        """
        result = await self.session.execute(delete(RoleModel).where(RoleModel.id == role_id))
        await self.session.flush()
        return result.rowcount > 0

    def _apply_filter(self, query, role_filter: RoleFilter | None):
        if role_filter is None:
            return query
        if role_filter.name:
            query = query.where(
                RoleModel.name.ilike(contains_pattern(role_filter.name), escape=LIKE_ESCAPE)
            )
        if role_filter.key:
            query = query.where(
                RoleModel.key.ilike(contains_pattern(role_filter.key), escape=LIKE_ESCAPE)
            )
        if role_filter.tenant_id is not None:
            query = query.where(RoleModel.tenant_id == role_filter.tenant_id)
        if role_filter.data_scope is not None:
            query = query.where(RoleModel.data_scope == DataScope(role_filter.data_scope).value)
        if role_filter.status is not None:
            query = query.where(RoleModel.status == Status(role_filter.status).value)
        return query

    async def list(
        self,
        role_filter: RoleFilter | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[Role], int]:
        """List roles matching the filter, one page at a time.

        Args:
            role_filter: Optional filters.
            offset: Number of records to skip.
            limit: Maximum number of records to return.

        Returns:
            Tuple of (roles ordered by sort_order then newest first, total count).
        """
        count_query = self._apply_filter(select(func.count()).select_from(RoleModel), role_filter)
        total = (await self.session.execute(count_query)).scalar_one()

        query = (
            self._apply_filter(select(RoleModel), role_filter)
            .order_by(RoleModel.sort_order, RoleModel.created_at.desc(), RoleModel.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()], total

    async def get_by_tenant(self, tenant_id: str) -> list[Role]:
        """Get the enabled roles a tenant may assign.

        These are the tenant's own roles plus every platform role.
        """
        result = await self.session.execute(
            select(RoleModel)
            .where(
                or_(RoleModel.tenant_id == tenant_id, RoleModel.tenant_id == ""),
                RoleModel.status == Status.ENABLED.value,
            )
            .order_by(RoleModel.sort_order, RoleModel.created_at.desc(), RoleModel.id)
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def batch_set_status(self, role_ids: list[str], status: Status) -> int:
        """Set the status of many roles in one statement.

        Returns:
            Number of rows modified.
        """
        if not role_ids:
            return 0
        result = await self.session.execute(
            update(RoleModel)
            .where(RoleModel.id.in_(set(role_ids)))
            .values(status=Status(status).value, updated_at=utcnow())
        )
        await self.session.flush()
        return result.rowcount

    async def stats(self, tenant_id: str | None = None) -> RoleStats:
        """Count roles by status.

        Args:
            tenant_id: Restrict counts to one tenant. When given, the
                platform/tenant breakdown is not computed.
        """
        query = select(
            func.count(),
            func.sum(case((RoleModel.status == Status.ENABLED.value, 1), else_=0)),
            func.sum(case((RoleModel.status == Status.DISABLED.value, 1), else_=0)),
            func.sum(case((RoleModel.tenant_id == "", 1), else_=0)),
        ).select_from(RoleModel)
        if tenant_id is not None:
            query = query.where(RoleModel.tenant_id == tenant_id)

        total, enabled, disabled, platform = (await self.session.execute(query)).one()
        stats = RoleStats(total=total or 0, enabled=enabled or 0, disabled=disabled or 0)
        if tenant_id is None:
            stats.platform = platform or 0
            stats.tenant = stats.total - stats.platform
        return stats
