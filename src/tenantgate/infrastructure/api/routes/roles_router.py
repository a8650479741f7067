"""Router for role management.

Tenant callers only see and change their own tenant's roles; platform
callers may act on any tenant and on platform roles.
"""

import math
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, status

from tenantgate.core.config import get_settings
from tenantgate.core.exceptions import TenantGateError
from tenantgate.core.logging import get_logger
from tenantgate.domain.entities.menu import Status
from tenantgate.domain.entities.role import DataScope, Role, RoleFilter
from tenantgate.infrastructure.api.dependencies import (
    AuthenticatedUser,
    CurrentUser,
    DbSession,
    RoleSvc,
    ensure_tenant_access,
)
from tenantgate.infrastructure.api.errors import to_http_exception
from tenantgate.infrastructure.api.schemas import (
    BatchStatusResponse,
    CreateRoleRequest,
    RoleBatchStatusUpdate,
    RoleListResponse,
    RoleResponse,
    RoleStatsResponse,
    RoleUsersResponse,
    UpdateRoleRequest,
)

router = APIRouter(tags=["Roles"])
logger = get_logger(__name__)


async def _get_accessible_role(
    role_id: str, current_user: CurrentUser, role_service: RoleSvc
) -> Role:
    """Load a role and check the caller may act on it.

    Tenant callers may read platform roles but never change them.
    """
    try:
        role = await role_service.get_role(role_id)
    except TenantGateError as e:
        raise to_http_exception(e) from e
    if not role.is_platform:
        ensure_tenant_access(current_user, role.tenant_id)
    return role


def _ensure_writable(role: Role, current_user: CurrentUser) -> None:
    if role.is_platform and not current_user.is_platform:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Platform roles can only be changed at platform scope",
        )


@router.post(
    "",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a role",
    responses={
        403: {"description": "Cross-tenant request"},
        404: {"description": "Granted menu not found"},
        409: {"description": "Duplicate role key or name"},
    },
)
async def create_role(
    role_data: CreateRoleRequest,
    current_user: AuthenticatedUser,
    role_service: RoleSvc,
    session: DbSession,
) -> RoleResponse:
    """Create a role.

    Tenant callers always create roles in their own tenant. Platform
    callers choose the tenant, or leave it empty for a platform role.
    """
    if current_user.is_platform:
        tenant_id = role_data.tenant_id or ""
    else:
        tenant_id = current_user.tenant_id
        if role_data.tenant_id:
            ensure_tenant_access(current_user, role_data.tenant_id)

    try:
        role = await role_service.create_role(
            key=role_data.key,
            name=role_data.name,
            tenant_id=tenant_id,
            sort_order=role_data.sort_order,
            data_scope=role_data.data_scope,
            status=role_data.status,
            remark=role_data.remark,
            menu_ids=role_data.menu_ids,
        )
    except TenantGateError as e:
        raise to_http_exception(e) from e
    await session.commit()
    return RoleResponse.model_validate(role)


@router.get(
    "",
    response_model=RoleListResponse,
    summary="List roles",
)
async def list_roles(
    current_user: AuthenticatedUser,
    role_service: RoleSvc,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int | None, Query(ge=1)] = None,
    name: str | None = None,
    key: str | None = None,
    tenant_id: str | None = None,
    data_scope: DataScope | None = None,
    role_status: Annotated[Status | None, Query(alias="status")] = None,
) -> RoleListResponse:
    """List roles ordered by sort order, newest first within a sort order.

    Tenant callers are restricted to their own tenant.
    """
    settings = get_settings()
    page_size = min(page_size or settings.default_page_size, settings.max_page_size)
    if not current_user.is_platform:
        tenant_id = current_user.tenant_id

    role_filter = RoleFilter(
        name=name,
        key=key,
        tenant_id=tenant_id,
        data_scope=data_scope,
        status=role_status,
    )
    roles, total = await role_service.list_roles(role_filter, page=page, page_size=page_size)
    return RoleListResponse(
        items=[RoleResponse.model_validate(r) for r in roles],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size) if total else 0,
    )


@router.get(
    "/stats",
    response_model=RoleStatsResponse,
    summary="Get role statistics",
)
async def get_role_stats(
    current_user: AuthenticatedUser,
    role_service: RoleSvc,
    tenant_id: str | None = None,
) -> RoleStatsResponse:
    """Count roles by status.

    The platform/tenant breakdown is only returned to platform callers who
    do not filter by tenant.
    """
    if not current_user.is_platform:
        tenant_id = current_user.tenant_id
    return RoleStatsResponse.model_validate(await role_service.get_stats(tenant_id))


@router.get(
    "/tenant/{tenant_id}",
    response_model=list[RoleResponse],
    summary="Get the roles assignable within a tenant",
)
async def get_roles_by_tenant(
    tenant_id: str,
    current_user: AuthenticatedUser,
    role_service: RoleSvc,
) -> list[RoleResponse]:
    """Get the tenant's enabled roles plus every enabled platform role."""
    ensure_tenant_access(current_user, tenant_id)
    roles = await role_service.get_roles_by_tenant(tenant_id)
    return [RoleResponse.model_validate(r) for r in roles]


@router.put(
    "/batch-status",
    response_model=BatchStatusResponse,
    summary="Set the status of several roles",
)
async def batch_update_role_status(
    request: RoleBatchStatusUpdate,
    current_user: AuthenticatedUser,
    role_service: RoleSvc,
    session: DbSession,
) -> BatchStatusResponse:
    """Enable or disable several roles at once.

    Tenant callers can only change roles of their own tenant; other ids
    are ignored and not counted.
    """
    role_ids = request.role_ids
    if not current_user.is_platform:
        owned = await role_service.get_roles_by_ids(role_ids)
        role_ids = [r.id for r in owned if r.tenant_id == current_user.tenant_id]

    modified = await role_service.batch_update_status(role_ids, request.status)
    await session.commit()
    return BatchStatusResponse(modified=modified)


@router.get(
    "/{role_id}",
    response_model=RoleResponse,
    summary="Get a role",
    responses={404: {"description": "Role not found"}},
)
async def get_role(
    role_id: str,
    current_user: AuthenticatedUser,
    role_service: RoleSvc,
) -> RoleResponse:
    """Get a specific role with its granted menus."""
    role = await _get_accessible_role(role_id, current_user, role_service)
    return RoleResponse.model_validate(role)


@router.put(
    "/{role_id}",
    response_model=RoleResponse,
    summary="Update a role",
    responses={
        403: {"description": "Role belongs to another scope"},
        404: {"description": "Role or granted menu not found"},
        409: {"description": "Duplicate role key or name"},
    },
)
async def update_role(
    role_id: str,
    role_data: UpdateRoleRequest,
    current_user: AuthenticatedUser,
    role_service: RoleSvc,
    session: DbSession,
) -> RoleResponse:
    """Partially update a role. ``menu_ids`` replaces the grant set whole."""
    role = await _get_accessible_role(role_id, current_user, role_service)
    _ensure_writable(role, current_user)

    try:
        updated = await role_service.update_role(
            role_id, role_data.model_dump(exclude_unset=True)
        )
    except TenantGateError as e:
        raise to_http_exception(e) from e
    await session.commit()
    return RoleResponse.model_validate(updated)


@router.delete(
    "/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a role",
    responses={
        403: {"description": "Role belongs to another scope"},
        404: {"description": "Role not found"},
    },
)
async def delete_role(
    role_id: str,
    current_user: AuthenticatedUser,
    role_service: RoleSvc,
    session: DbSession,
) -> Response:
    """Delete a role, its grants and its user assignments."""
    role = await _get_accessible_role(role_id, current_user, role_service)
    _ensure_writable(role, current_user)

    try:
        await role_service.delete_role(role_id)
    except TenantGateError as e:
        raise to_http_exception(e) from e
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{role_id}/users",
    response_model=RoleUsersResponse,
    summary="List the users holding a role",
)
async def get_role_users(
    role_id: str,
    current_user: AuthenticatedUser,
    role_service: RoleSvc,
) -> RoleUsersResponse:
    """Get the ids of every user assigned the role."""
    await _get_accessible_role(role_id, current_user, role_service)
    user_ids = await role_service.get_role_users(role_id)
    return RoleUsersResponse(role_id=role_id, user_ids=user_ids)
