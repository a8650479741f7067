"""Unit tests for the roles router."""

from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from tenantgate.core.exceptions import ConflictError, NotFoundError
from tenantgate.domain.entities import Role, RoleStats, Status
from tenantgate.domain.services import RoleService
from tenantgate.infrastructure.api.dependencies import CurrentUser
from tenantgate.infrastructure.api.routes.roles_router import (
    batch_update_role_status,
    create_role,
    delete_role,
    get_role,
    get_role_stats,
    get_role_users,
    get_roles_by_tenant,
    list_roles,
    update_role,
)
from tenantgate.infrastructure.api.schemas import (
    CreateRoleRequest,
    RoleBatchStatusUpdate,
    UpdateRoleRequest,
)


@pytest.fixture
def role_service():
    return AsyncMock(spec=RoleService)


@pytest.fixture
def platform_user():
    return CurrentUser(user_id="root", tenant_id="")


@pytest.fixture
def tenant_user():
    return CurrentUser(user_id="u1", tenant_id="t1")


@pytest.fixture
def mock_session():
    session = AsyncMock()
    session.commit = AsyncMock()
    return session


def sample_role(role_id="ROL1", tenant_id="t1", **kwargs):
    return Role(
        id=role_id,
        key=kwargs.pop("key", role_id.lower()),
        name=kwargs.pop("name", f"Role {role_id}"),
        tenant_id=tenant_id,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_tenant_caller_creates_in_own_tenant(role_service, tenant_user, mock_session):
    role_service.create_role.return_value = sample_role()

    await create_role(
        CreateRoleRequest(key="ops", name="Ops"), tenant_user, role_service, mock_session
    )

    assert role_service.create_role.call_args.kwargs["tenant_id"] == "t1"
    mock_session.commit.assert_called_once()


@pytest.mark.asyncio
async def test_tenant_caller_cannot_create_for_other_tenant(
    role_service, tenant_user, mock_session
):
    with pytest.raises(HTTPException) as exc:
        await create_role(
            CreateRoleRequest(key="ops", name="Ops", tenant_id="t2"),
            tenant_user,
            role_service,
            mock_session,
        )
    assert exc.value.status_code == 403
    role_service.create_role.assert_not_called()


@pytest.mark.asyncio
async def test_platform_caller_creates_platform_role(role_service, platform_user, mock_session):
    role_service.create_role.return_value = sample_role(tenant_id="")

    result = await create_role(
        CreateRoleRequest(key="root", name="Root"), platform_user, role_service, mock_session
    )

    assert role_service.create_role.call_args.kwargs["tenant_id"] == ""
    assert result.tenant_id == ""


@pytest.mark.asyncio
async def test_create_role_conflict(role_service, platform_user, mock_session):
    role_service.create_role.side_effect = ConflictError("Role key 'root' already exists")

    with pytest.raises(HTTPException) as exc:
        await create_role(
            CreateRoleRequest(key="root", name="Root"), platform_user, role_service, mock_session
        )
    assert exc.value.status_code == 409


@pytest.mark.asyncio
async def test_list_roles_restricts_tenant_callers(role_service, tenant_user):
    role_service.list_roles.return_value = ([sample_role()], 21)

    result = await list_roles(tenant_user, role_service, page=1, page_size=10, tenant_id="t2")

    role_filter = role_service.list_roles.call_args.args[0]
    assert role_filter.tenant_id == "t1"
    assert result.total == 21
    assert result.total_pages == 3


@pytest.mark.asyncio
async def test_list_roles_caps_page_size(role_service, platform_user):
    role_service.list_roles.return_value = ([], 0)

    result = await list_roles(platform_user, role_service, page=1, page_size=10_000)

    assert result.page_size == 100
    assert result.total_pages == 0


@pytest.mark.asyncio
async def test_get_role_stats_tenant_scoped(role_service, tenant_user):
    role_service.get_stats.return_value = RoleStats(total=2, enabled=2, disabled=0)

    result = await get_role_stats(tenant_user, role_service)

    role_service.get_stats.assert_called_once_with("t1")
    assert result.platform is None


@pytest.mark.asyncio
async def test_get_roles_by_tenant_cross_tenant(role_service, tenant_user):
    with pytest.raises(HTTPException) as exc:
        await get_roles_by_tenant("t2", tenant_user, role_service)
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_batch_status_ignores_foreign_roles(role_service, tenant_user, mock_session):
    role_service.get_roles_by_ids.return_value = [
        sample_role("ROL1"),
        sample_role("ROL2", tenant_id="t2"),
        sample_role("ROL3", tenant_id=""),
    ]
    role_service.batch_update_status.return_value = 1

    result = await batch_update_role_status(
        RoleBatchStatusUpdate(role_ids=["ROL1", "ROL2", "ROL3"], status=Status.DISABLED),
        tenant_user,
        role_service,
        mock_session,
    )

    role_service.batch_update_status.assert_called_once_with(["ROL1"], Status.DISABLED)
    assert result.modified == 1


@pytest.mark.asyncio
async def test_get_role_other_tenant_forbidden(role_service, tenant_user):
    role_service.get_role.return_value = sample_role(tenant_id="t2")

    with pytest.raises(HTTPException) as exc:
        await get_role("ROL1", tenant_user, role_service)
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_tenant_caller_may_read_platform_role(role_service, tenant_user):
    role_service.get_role.return_value = sample_role(tenant_id="")

    result = await get_role("ROL1", tenant_user, role_service)
    assert result.tenant_id == ""


@pytest.mark.asyncio
async def test_get_role_not_found(role_service, platform_user):
    role_service.get_role.side_effect = NotFoundError("Role", "ROL9")

    with pytest.raises(HTTPException) as exc:
        await get_role("ROL9", platform_user, role_service)
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_tenant_caller_cannot_update_platform_role(role_service, tenant_user, mock_session):
    role_service.get_role.return_value = sample_role(tenant_id="")

    with pytest.raises(HTTPException) as exc:
        await update_role(
            "ROL1", UpdateRoleRequest(name="Renamed"), tenant_user, role_service, mock_session
        )
    assert exc.value.status_code == 403
    role_service.update_role.assert_not_called()


@pytest.mark.asyncio
async def test_update_role_sends_only_set_fields(role_service, tenant_user, mock_session):
    role_service.get_role.return_value = sample_role()
    role_service.update_role.return_value = sample_role(menu_ids=["MNU1"])

    result = await update_role(
        "ROL1", UpdateRoleRequest(menu_ids=["MNU1"]), tenant_user, role_service, mock_session
    )

    role_service.update_role.assert_called_once_with("ROL1", {"menu_ids": ["MNU1"]})
    assert result.menu_ids == ["MNU1"]
    mock_session.commit.assert_called_once()


@pytest.mark.asyncio
async def test_delete_role(role_service, tenant_user, mock_session):
    role_service.get_role.return_value = sample_role()

    response = await delete_role("ROL1", tenant_user, role_service, mock_session)

    assert response.status_code == 204
    role_service.delete_role.assert_called_once_with("ROL1")


@pytest.mark.asyncio
async def test_get_role_users(role_service, platform_user):
    role_service.get_role.return_value = sample_role()
    role_service.get_role_users.return_value = ["u1", "u2"]

    result = await get_role_users("ROL1", platform_user, role_service)

    assert result.user_ids == ["u1", "u2"]
