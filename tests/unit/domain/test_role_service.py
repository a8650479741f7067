"""Unit tests for RoleService."""

import pytest

from tenantgate.core.exceptions import ConflictError, NotFoundError, ValidationError
from tenantgate.domain.entities import DataScope, MenuKind, RoleFilter, Status
from tenantgate.domain.services import MenuService, RoleService


@pytest.fixture
def role_service(db_session):
    return RoleService(db_session)


@pytest.fixture
def menu_service(db_session):
    return MenuService(db_session)


@pytest.mark.asyncio
async def test_create_role_with_grants(role_service, menu_service):
    menu = await menu_service.create_menu(name="Users", kind=MenuKind.PAGE)

    role = await role_service.create_role(
        key="admin",
        name="Admin",
        tenant_id="t1",
        data_scope=DataScope.TENANT,
        menu_ids=[menu.id, menu.id],
    )

    assert role.id.startswith("ROL")
    assert role.menu_ids == [menu.id]
    assert role.tenant_id == "t1"
    assert (await role_service.get_role(role.id)).menu_ids == [menu.id]


@pytest.mark.asyncio
async def test_create_role_blank_key_rejected(role_service):
    with pytest.raises(ValidationError):
        await role_service.create_role(key=" ", name="Admin")


@pytest.mark.asyncio
async def test_role_key_globally_unique(role_service):
    await role_service.create_role(key="admin", name="Admin", tenant_id="t1")

    with pytest.raises(ConflictError) as exc:
        await role_service.create_role(key="admin", name="Other", tenant_id="t2")
    assert exc.value.field == "key"


@pytest.mark.asyncio
async def test_role_name_unique_per_tenant(role_service):
    await role_service.create_role(key="t1-admin", name="Admin", tenant_id="t1")

    with pytest.raises(ConflictError) as exc:
        await role_service.create_role(key="t1-admin2", name="Admin", tenant_id="t1")
    assert exc.value.field == "name"

    other = await role_service.create_role(key="t2-admin", name="Admin", tenant_id="t2")
    assert other.name == "Admin"


@pytest.mark.asyncio
async def test_create_role_with_unknown_menu(role_service):
    with pytest.raises(NotFoundError):
        await role_service.create_role(key="admin", name="Admin", menu_ids=["MNU0"])


@pytest.mark.asyncio
async def test_update_role_rechecks_only_changed_fields(role_service):
    role = await role_service.create_role(key="admin", name="Admin")
    await role_service.create_role(key="ops", name="Ops")

    same = await role_service.update_role(role.id, {"key": "admin", "name": "Admin", "remark": "x"})
    assert same.remark == "x"

    with pytest.raises(ConflictError):
        await role_service.update_role(role.id, {"key": "ops"})
    with pytest.raises(ConflictError):
        await role_service.update_role(role.id, {"name": "Ops"})


@pytest.mark.asyncio
async def test_update_role_replaces_grants(role_service, menu_service):
    a = await menu_service.create_menu(name="A", kind=MenuKind.PAGE)
    b = await menu_service.create_menu(name="B", kind=MenuKind.PAGE)
    role = await role_service.create_role(key="admin", name="Admin", menu_ids=[a.id])

    updated = await role_service.update_role(role.id, {"menu_ids": [b.id]})
    assert updated.menu_ids == [b.id]

    cleared = await role_service.update_role(role.id, {"menu_ids": []})
    assert cleared.menu_ids == []


@pytest.mark.asyncio
async def test_update_role_not_found(role_service):
    with pytest.raises(NotFoundError):
        await role_service.update_role("ROL0", {"name": "x"})


@pytest.mark.asyncio
async def test_delete_role_detaches_everything(role_service, menu_service):
    menu = await menu_service.create_menu(name="A", kind=MenuKind.PAGE)
    role = await role_service.create_role(key="admin", name="Admin", menu_ids=[menu.id])
    await role_service.assign_roles_to_user("u1", [role.id])

    await role_service.delete_role(role.id)

    with pytest.raises(NotFoundError):
        await role_service.get_role(role.id)
    assert await role_service.get_user_roles("u1") == []
    assert await role_service.assignment_repo.get_roles_for_permission(menu.id) == []


@pytest.mark.asyncio
async def test_list_roles_pages(role_service):
    for i in range(3):
        await role_service.create_role(key=f"k{i}", name=f"Role {i}", sort_order=i)

    roles, total = await role_service.list_roles(RoleFilter(), page=2, page_size=2)
    assert total == 3
    assert [r.key for r in roles] == ["k2"]

    with pytest.raises(ValidationError):
        await role_service.list_roles(page=0)


@pytest.mark.asyncio
async def test_get_roles_by_tenant(role_service):
    await role_service.create_role(key="platform", name="Platform")
    await role_service.create_role(key="mine", name="Mine", tenant_id="t1")
    await role_service.create_role(key="theirs", name="Theirs", tenant_id="t2")

    roles = await role_service.get_roles_by_tenant("t1")
    assert sorted(r.key for r in roles) == ["mine", "platform"]


@pytest.mark.asyncio
async def test_batch_update_status_and_stats(role_service):
    a = await role_service.create_role(key="a", name="A")
    b = await role_service.create_role(key="b", name="B", tenant_id="t1")

    assert await role_service.batch_update_status([a.id, b.id], Status.DISABLED) == 2

    stats = await role_service.get_stats()
    assert (stats.total, stats.disabled, stats.platform, stats.tenant) == (2, 2, 1, 1)
    scoped = await role_service.get_stats("t1")
    assert scoped.total == 1
    assert scoped.platform is None


@pytest.mark.asyncio
async def test_assign_permissions(role_service, menu_service):
    menu = await menu_service.create_menu(name="A", kind=MenuKind.PAGE)
    role = await role_service.create_role(key="admin", name="Admin")

    assert await role_service.assign_permissions(role.id, [menu.id]) == [menu.id]
    with pytest.raises(NotFoundError):
        await role_service.assign_permissions("ROL0", [menu.id])
    with pytest.raises(NotFoundError):
        await role_service.assign_permissions(role.id, ["MNU0"])


@pytest.mark.asyncio
async def test_user_role_assignment_flow(role_service):
    a = await role_service.create_role(key="a", name="A")
    b = await role_service.create_role(key="b", name="B")

    assigned = await role_service.assign_roles_to_user("u1", [b.id, a.id, b.id])
    assert [r.id for r in assigned] == [b.id, a.id]
    assert [r.id for r in await role_service.get_user_roles("u1")] == [b.id, a.id]
    assert await role_service.get_role_users(a.id) == ["u1"]

    assert await role_service.remove_roles_from_user("u1", [a.id]) == 1
    assert [r.id for r in await role_service.get_user_roles("u1")] == [b.id]


@pytest.mark.asyncio
async def test_assign_unknown_role_rejected(role_service):
    with pytest.raises(NotFoundError):
        await role_service.assign_roles_to_user("u1", ["ROL0"])


@pytest.mark.asyncio
async def test_get_role_users_unknown_role(role_service):
    with pytest.raises(NotFoundError):
        await role_service.get_role_users("ROL0")


@pytest.mark.asyncio
async def test_tenant_scoped_assignment_keeps_other_tenants_roles(role_service):
    t1 = await role_service.create_role(key="t1-ops", name="Ops", tenant_id="t1")
    t2 = await role_service.create_role(key="t2-ops", name="Ops", tenant_id="t2")
    t2_old = await role_service.create_role(key="t2-old", name="Old", tenant_id="t2")
    platform = await role_service.create_role(key="viewer", name="Viewer")
    await role_service.assign_roles_to_user("shared", [t1.id, t2_old.id, platform.id])

    assigned = await role_service.assign_roles_to_user("shared", [t2.id], tenant_id="t2")

    assert [r.id for r in assigned] == [t1.id, t2.id]
    assert [r.id for r in await role_service.get_user_roles("shared")] == [t1.id, t2.id]

    assigned = await role_service.assign_roles_to_user("shared", [], tenant_id="t2")
    assert [r.id for r in assigned] == [t1.id]


@pytest.mark.asyncio
async def test_bootstrap_super_admin_is_repeatable(role_service, menu_service):
    other = await role_service.create_role(key="viewer", name="Viewer")
    await role_service.assign_roles_to_user("root", [other.id])
    first = await menu_service.create_menu(name="System", kind=MenuKind.DIRECTORY)

    role = await role_service.bootstrap_super_admin("root")
    assert role.key == "super_admin" and role.tenant_id == ""
    assert role.menu_ids == [first.id]

    second = await menu_service.create_menu(name="Users", kind=MenuKind.PAGE, parent_id=first.id)
    await role_service.batch_update_status([role.id], Status.DISABLED)

    again = await role_service.bootstrap_super_admin("root")
    assert again.id == role.id
    assert again.status is Status.ENABLED
    assert sorted(again.menu_ids) == sorted([first.id, second.id])
    assert [r.id for r in await role_service.get_user_roles("root")] == [other.id, role.id]


@pytest.mark.asyncio
async def test_bootstrap_super_admin_rejects_tenant_owned_key(role_service):
    await role_service.create_role(key="super_admin", name="Fake", tenant_id="t1")

    with pytest.raises(ValidationError):
        await role_service.bootstrap_super_admin("root")
