"""Router for menu management and navigation resolution."""

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from tenantgate.core.exceptions import TenantGateError
from tenantgate.core.logging import get_logger
from tenantgate.domain.entities.menu import MenuFilter, MenuKind, Status
from tenantgate.infrastructure.api.dependencies import (
    AuthenticatedUser,
    DbSession,
    MenuSvc,
    PlatformUser,
    ResolutionSvc,
)
from tenantgate.infrastructure.api.errors import to_http_exception
from tenantgate.infrastructure.api.schemas import (
    BatchStatusResponse,
    MenuBatchStatusUpdate,
    MenuCreate,
    MenuListResponse,
    MenuResponse,
    MenuStatsResponse,
    MenuTreeResponse,
    MenuUpdate,
    UserMenuResponse,
)

router = APIRouter(tags=["Menus"])
logger = get_logger(__name__)


def _menu_filter(
    name: str | None,
    kind: MenuKind | None,
    menu_status: Status | None,
    visible: bool | None,
    permission_code: str | None,
) -> MenuFilter:
    return MenuFilter(
        name=name,
        kind=kind,
        status=menu_status,
        visible=visible,
        permission_code=permission_code,
    )


@router.post(
    "",
    response_model=MenuResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a menu",
    responses={
        403: {"description": "Platform access required"},
        404: {"description": "Parent menu not found"},
        409: {"description": "Duplicate name or permission code"},
    },
)
async def create_menu(
    menu_data: MenuCreate,
    current_user: PlatformUser,
    menu_service: MenuSvc,
    session: DbSession,
) -> MenuResponse:
    """Create a new menu node."""
    try:
        menu = await menu_service.create_menu(**menu_data.model_dump())
    except TenantGateError as e:
        raise to_http_exception(e) from e
    await session.commit()
    return MenuResponse.model_validate(menu)


@router.get(
    "",
    response_model=MenuListResponse,
    summary="List menus",
)
async def list_menus(
    current_user: AuthenticatedUser,
    menu_service: MenuSvc,
    name: str | None = None,
    kind: MenuKind | None = None,
    menu_status: Annotated[Status | None, Query(alias="status")] = None,
    visible: bool | None = None,
    permission_code: str | None = None,
) -> MenuListResponse:
    """List menus as a flat set ordered by parent, sort order and creation."""
    menus = await menu_service.list_menus(
        _menu_filter(name, kind, menu_status, visible, permission_code)
    )
    return MenuListResponse(
        items=[MenuResponse.model_validate(m) for m in menus],
        total=len(menus),
    )


@router.get(
    "/tree",
    response_model=list[MenuTreeResponse],
    summary="Get the administrative menu tree",
)
async def get_menu_tree(
    current_user: AuthenticatedUser,
    menu_service: MenuSvc,
    name: str | None = None,
    kind: MenuKind | None = None,
    menu_status: Annotated[Status | None, Query(alias="status")] = None,
    visible: bool | None = None,
    permission_code: str | None = None,
) -> list[MenuTreeResponse]:
    """Get every menu as a tree, hidden and disabled nodes included."""
    tree = await menu_service.get_menu_tree(
        _menu_filter(name, kind, menu_status, visible, permission_code)
    )
    return [MenuTreeResponse.from_node(node) for node in tree]


@router.get(
    "/user",
    response_model=list[UserMenuResponse],
    summary="Get the caller's navigation tree",
)
async def get_user_menus(
    current_user: AuthenticatedUser,
    resolution_service: ResolutionSvc,
) -> list[UserMenuResponse]:
    """Resolve the caller's roles into their navigation tree."""
    tree = await resolution_service.user_menu_tree(current_user.role_ids)
    return [UserMenuResponse.model_validate(node) for node in tree]


@router.get(
    "/stats",
    response_model=MenuStatsResponse,
    summary="Get menu statistics",
)
async def get_menu_stats(
    current_user: AuthenticatedUser,
    menu_service: MenuSvc,
) -> MenuStatsResponse:
    """Count menus by status and kind."""
    return MenuStatsResponse.model_validate(await menu_service.get_stats())


@router.put(
    "/batch-status",
    response_model=BatchStatusResponse,
    summary="Set the status of several menus",
)
async def batch_update_menu_status(
    request: MenuBatchStatusUpdate,
    current_user: PlatformUser,
    menu_service: MenuSvc,
    session: DbSession,
) -> BatchStatusResponse:
    """Enable or disable several menus at once."""
    modified = await menu_service.batch_update_status(request.menu_ids, request.status)
    await session.commit()
    return BatchStatusResponse(modified=modified)


@router.get(
    "/{menu_id}",
    response_model=MenuResponse,
    summary="Get a menu",
    responses={404: {"description": "Menu not found"}},
)
async def get_menu(
    menu_id: str,
    current_user: AuthenticatedUser,
    menu_service: MenuSvc,
) -> MenuResponse:
    """Get a specific menu by ID."""
    try:
        menu = await menu_service.get_menu(menu_id)
    except TenantGateError as e:
        raise to_http_exception(e) from e
    return MenuResponse.model_validate(menu)


@router.put(
    "/{menu_id}",
    response_model=MenuResponse,
    summary="Update a menu",
    responses={
        404: {"description": "Menu or parent not found"},
        409: {"description": "Duplicate name or permission code"},
        422: {"description": "Cycle or invalid tree change"},
    },
)
async def update_menu(
    menu_id: str,
    menu_data: MenuUpdate,
    current_user: PlatformUser,
    menu_service: MenuSvc,
    session: DbSession,
) -> MenuResponse:
    """Partially update a menu. Only fields sent in the body change."""
    try:
        menu = await menu_service.update_menu(menu_id, menu_data.model_dump(exclude_unset=True))
    except TenantGateError as e:
        raise to_http_exception(e) from e
    await session.commit()
    return MenuResponse.model_validate(menu)


@router.delete(
    "/{menu_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a menu",
    responses={
        404: {"description": "Menu not found"},
        422: {"description": "Menu has children"},
    },
)
async def delete_menu(
    menu_id: str,
    current_user: PlatformUser,
    menu_service: MenuSvc,
    session: DbSession,
) -> Response:
    """Delete a leaf menu. Children must be deleted first."""
    try:
        await menu_service.delete_menu(menu_id)
    except TenantGateError as e:
        raise to_http_exception(e) from e
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
