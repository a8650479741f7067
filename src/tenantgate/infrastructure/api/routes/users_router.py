"""Router for user role assignments and resolved permissions.

Users themselves live in an external identity service; only their ids are
stored here. Tenant callers may assign their own tenant's roles and
platform roles, and may only inspect their own resolved permissions.
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, status

from tenantgate.core.exceptions import TenantGateError
from tenantgate.core.logging import get_logger
from tenantgate.infrastructure.api.dependencies import (
    AuthenticatedUser,
    CurrentUser,
    DbSession,
    ResolutionSvc,
    RoleSvc,
)
from tenantgate.infrastructure.api.errors import to_http_exception
from tenantgate.infrastructure.api.schemas import (
    AssignUserRolesRequest,
    PermissionCheckResponse,
    PermissionCodesResponse,
    RoleResponse,
    UserPermissionsResponse,
    UserRolesResponse,
)

router = APIRouter(tags=["Users"])
logger = get_logger(__name__)


def _ensure_self_or_platform(current_user: CurrentUser, user_id: str) -> None:
    if current_user.is_platform or current_user.user_id == user_id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Only platform callers may inspect other users",
    )


@router.get(
    "/me/permission-codes",
    response_model=PermissionCodesResponse,
    summary="Get the caller's permission codes",
)
async def get_my_permission_codes(
    current_user: AuthenticatedUser,
    resolution_service: ResolutionSvc,
) -> PermissionCodesResponse:
    """Get the permission codes granted by the caller's token roles."""
    codes = await resolution_service.permission_codes_for_roles(current_user.role_ids)
    return PermissionCodesResponse(codes=codes)


@router.get(
    "/{user_id}/roles",
    response_model=UserRolesResponse,
    summary="Get a user's roles",
)
async def get_user_roles(
    user_id: str,
    current_user: AuthenticatedUser,
    role_service: RoleSvc,
) -> UserRolesResponse:
    """Get the roles assigned to a user, in assignment order.

    Tenant callers only see roles of their own tenant and platform roles.
    """
    roles = await role_service.get_user_roles(user_id)
    if not current_user.is_platform:
        roles = [r for r in roles if r.is_platform or r.tenant_id == current_user.tenant_id]
    return UserRolesResponse(
        user_id=user_id,
        roles=[RoleResponse.model_validate(r) for r in roles],
    )


@router.put(
    "/{user_id}/roles",
    response_model=UserRolesResponse,
    summary="Replace a user's roles",
    responses={
        403: {"description": "Role belongs to another tenant"},
        404: {"description": "Role not found"},
    },
)
async def assign_user_roles(
    user_id: str,
    request: AssignUserRolesRequest,
    current_user: AuthenticatedUser,
    role_service: RoleSvc,
    session: DbSession,
) -> UserRolesResponse:
    """Replace the user's role set with ``role_ids``.

    Sending an empty list removes every role from the user. For tenant
    callers the replacement covers only their own tenant's roles and
    platform roles; roles held through other tenants are kept and hidden
    from the response.
    """
    scope_tenant_id = None
    if not current_user.is_platform:
        scope_tenant_id = current_user.tenant_id
        roles = await role_service.get_roles_by_ids(request.role_ids)
        foreign = [
            r.id for r in roles if not r.is_platform and r.tenant_id != current_user.tenant_id
        ]
        if foreign:
            logger.info(
                "Role assignment denied",
                user_id=user_id,
                tenant_id=current_user.tenant_id,
                role_ids=foreign,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Roles of another tenant cannot be assigned",
            )

    try:
        roles = await role_service.assign_roles_to_user(
            user_id, request.role_ids, tenant_id=scope_tenant_id
        )
    except TenantGateError as e:
        raise to_http_exception(e) from e
    await session.commit()
    if scope_tenant_id is not None:
        roles = [r for r in roles if r.is_platform or r.tenant_id == scope_tenant_id]
    return UserRolesResponse(
        user_id=user_id,
        roles=[RoleResponse.model_validate(r) for r in roles],
    )


@router.delete(
    "/{user_id}/roles",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove roles from a user",
)
async def remove_user_roles(
    user_id: str,
    current_user: AuthenticatedUser,
    role_service: RoleSvc,
    session: DbSession,
    role_ids: Annotated[list[str] | None, Query(alias="role_id")] = None,
) -> Response:
    """Remove the given roles from the user, or every role when none is given.

    Tenant callers can only remove roles of their own tenant.
    """
    if not current_user.is_platform:
        if role_ids:
            roles = await role_service.get_roles_by_ids(role_ids)
        else:
            roles = await role_service.get_user_roles(user_id)
        role_ids = [r.id for r in roles if r.tenant_id == current_user.tenant_id]
        if not role_ids:
            return Response(status_code=status.HTTP_204_NO_CONTENT)

    await role_service.remove_roles_from_user(user_id, role_ids)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{user_id}/permissions",
    response_model=UserPermissionsResponse,
    summary="Get a user's effective menu grants",
)
async def get_user_permissions(
    user_id: str,
    current_user: AuthenticatedUser,
    resolution_service: ResolutionSvc,
) -> UserPermissionsResponse:
    """Get the menu ids granted to a user across their enabled roles."""
    _ensure_self_or_platform(current_user, user_id)
    menu_ids = await resolution_service.effective_permissions(user_id)
    return UserPermissionsResponse(user_id=user_id, menu_ids=sorted(menu_ids))


@router.get(
    "/{user_id}/has-permission",
    response_model=PermissionCheckResponse,
    summary="Check a single permission code",
)
async def check_user_permission(
    user_id: str,
    current_user: AuthenticatedUser,
    resolution_service: ResolutionSvc,
    code: Annotated[str, Query(min_length=1)],
) -> PermissionCheckResponse:
    """Check whether a user holds a permission code through an enabled role."""
    _ensure_self_or_platform(current_user, user_id)
    granted = await resolution_service.has_permission(user_id, code)
    return PermissionCheckResponse(user_id=user_id, code=code, granted=granted)
