"""Unit tests for the menus router."""

from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from tenantgate.core.exceptions import CycleError, HasChildrenError, NotFoundError
from tenantgate.domain.entities import (
    Menu,
    MenuKind,
    MenuStats,
    MenuTreeNode,
    Status,
    UserMenuNode,
)
from tenantgate.domain.services import MenuResolutionService, MenuService
from tenantgate.infrastructure.api.dependencies import CurrentUser
from tenantgate.infrastructure.api.routes.menus_router import (
    batch_update_menu_status,
    create_menu,
    delete_menu,
    get_menu,
    get_menu_stats,
    get_menu_tree,
    get_user_menus,
    list_menus,
    update_menu,
)
from tenantgate.infrastructure.api.schemas import MenuBatchStatusUpdate, MenuCreate, MenuUpdate


@pytest.fixture
def menu_service():
    return AsyncMock(spec=MenuService)


@pytest.fixture
def resolution_service():
    return AsyncMock(spec=MenuResolutionService)


@pytest.fixture
def platform_user():
    return CurrentUser(user_id="root", tenant_id="", role_ids=["ROL1"])


@pytest.fixture
def mock_session():
    session = AsyncMock()
    session.commit = AsyncMock()
    return session


def sample_menu(menu_id="MNU1", **kwargs):
    return Menu(id=menu_id, name=kwargs.pop("name", "Users"), kind=MenuKind.PAGE, **kwargs)


@pytest.mark.asyncio
async def test_create_menu(menu_service, platform_user, mock_session):
    menu_service.create_menu.return_value = sample_menu(route="/users")

    result = await create_menu(
        MenuCreate(name="Users", kind=MenuKind.PAGE, route="/users"),
        platform_user,
        menu_service,
        mock_session,
    )

    assert result.id == "MNU1"
    assert result.route == "/users"
    assert menu_service.create_menu.call_args.kwargs["name"] == "Users"
    mock_session.commit.assert_called_once()


@pytest.mark.asyncio
async def test_create_menu_missing_parent(menu_service, platform_user, mock_session):
    menu_service.create_menu.side_effect = NotFoundError("Parent menu", "MNU0")

    with pytest.raises(HTTPException) as exc:
        await create_menu(
            MenuCreate(name="Users", kind=MenuKind.PAGE, parent_id="MNU0"),
            platform_user,
            menu_service,
            mock_session,
        )

    assert exc.value.status_code == 404
    mock_session.commit.assert_not_called()


@pytest.mark.asyncio
async def test_list_menus_passes_filter(menu_service, platform_user):
    menu_service.list_menus.return_value = [sample_menu(), sample_menu("MNU2", name="Roles")]

    result = await list_menus(platform_user, menu_service, name="u", menu_status=Status.ENABLED)

    assert result.total == 2
    menu_filter = menu_service.list_menus.call_args.args[0]
    assert menu_filter.name == "u"
    assert menu_filter.status is Status.ENABLED


@pytest.mark.asyncio
async def test_get_menu_tree(menu_service, platform_user):
    child = MenuTreeNode(menu=sample_menu("MNU2", parent_id="MNU1", name="Child"))
    menu_service.get_menu_tree.return_value = [MenuTreeNode(menu=sample_menu(), children=[child])]

    result = await get_menu_tree(platform_user, menu_service)

    assert result[0].id == "MNU1"
    assert result[0].children[0].id == "MNU2"


@pytest.mark.asyncio
async def test_get_user_menus_uses_token_roles(resolution_service, platform_user):
    resolution_service.user_menu_tree.return_value = [
        UserMenuNode(id="MNU1", name="Users", route="/u", component="", icon="", sort_order=0)
    ]

    result = await get_user_menus(platform_user, resolution_service)

    assert result[0].route == "/u"
    resolution_service.user_menu_tree.assert_called_once_with(["ROL1"])


@pytest.mark.asyncio
async def test_get_menu_stats(menu_service, platform_user):
    menu_service.get_stats.return_value = MenuStats(total=3, enabled=2, disabled=1, page=3)

    result = await get_menu_stats(platform_user, menu_service)

    assert result.total == 3
    assert result.page == 3


@pytest.mark.asyncio
async def test_batch_update_menu_status(menu_service, platform_user, mock_session):
    menu_service.batch_update_status.return_value = 2

    result = await batch_update_menu_status(
        MenuBatchStatusUpdate(menu_ids=["MNU1", "MNU2"], status=Status.DISABLED),
        platform_user,
        menu_service,
        mock_session,
    )

    assert result.modified == 2
    mock_session.commit.assert_called_once()


@pytest.mark.asyncio
async def test_get_menu_not_found(menu_service, platform_user):
    menu_service.get_menu.side_effect = NotFoundError("Menu", "MNU9")

    with pytest.raises(HTTPException) as exc:
        await get_menu("MNU9", platform_user, menu_service)
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_update_menu_sends_only_set_fields(menu_service, platform_user, mock_session):
    menu_service.update_menu.return_value = sample_menu(icon="star")

    await update_menu("MNU1", MenuUpdate(icon="star"), platform_user, menu_service, mock_session)

    menu_service.update_menu.assert_called_once_with("MNU1", {"icon": "star"})


@pytest.mark.asyncio
async def test_update_menu_cycle(menu_service, platform_user, mock_session):
    menu_service.update_menu.side_effect = CycleError("loop")

    with pytest.raises(HTTPException) as exc:
        await update_menu(
            "MNU1", MenuUpdate(parent_id="MNU2"), platform_user, menu_service, mock_session
        )
    assert exc.value.status_code == 422


@pytest.mark.asyncio
async def test_delete_menu(menu_service, platform_user, mock_session):
    response = await delete_menu("MNU1", platform_user, menu_service, mock_session)

    assert response.status_code == 204
    menu_service.delete_menu.assert_called_once_with("MNU1")
    mock_session.commit.assert_called_once()


@pytest.mark.asyncio
async def test_delete_menu_with_children(menu_service, platform_user, mock_session):
    menu_service.delete_menu.side_effect = HasChildrenError("MNU1")

    with pytest.raises(HTTPException) as exc:
        await delete_menu("MNU1", platform_user, menu_service, mock_session)
    assert exc.value.status_code == 422
    mock_session.commit.assert_not_called()
