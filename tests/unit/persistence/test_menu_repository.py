"""Unit tests for MenuRepository against an in-memory database."""

import pytest
from sqlalchemy.exc import IntegrityError

from tenantgate.domain.entities import Menu, MenuFilter, MenuKind, Status
from tenantgate.infrastructure.persistence.repositories import MenuRepository
from tenantgate.infrastructure.persistence.repositories.filters import contains_pattern


@pytest.fixture
def menu_repo(db_session):
    return MenuRepository(db_session)


async def seed(repo, menu_id, name=None, parent_id="", kind=MenuKind.PAGE, **kwargs):
    return await repo.create(
        Menu(id=menu_id, name=name or menu_id, kind=kind, parent_id=parent_id, **kwargs)
    )


@pytest.mark.asyncio
async def test_create_and_get(menu_repo):
    created = await seed(menu_repo, "m1", route="/users", permission_code="user:list")

    assert created.created_at is not None
    fetched = await menu_repo.get_by_id("m1")
    assert fetched.route == "/users"
    assert fetched.permission_code == "user:list"
    assert fetched.kind is MenuKind.PAGE
    assert await menu_repo.get_by_id("missing") is None


@pytest.mark.asyncio
async def test_get_by_ids_skips_unknown(menu_repo):
    await seed(menu_repo, "m1")
    await seed(menu_repo, "m2")

    menus = await menu_repo.get_by_ids(["m2", "m1", "nope"])
    assert sorted(m.id for m in menus) == ["m1", "m2"]
    assert await menu_repo.get_by_ids([]) == []


@pytest.mark.asyncio
async def test_children_and_has_children(menu_repo):
    await seed(menu_repo, "dir", kind=MenuKind.DIRECTORY)
    await seed(menu_repo, "b", parent_id="dir", sort_order=2)
    await seed(menu_repo, "a", parent_id="dir", sort_order=1)

    assert [m.id for m in await menu_repo.get_children("dir")] == ["a", "b"]
    assert await menu_repo.has_children("dir") is True
    assert await menu_repo.has_children("a") is False


@pytest.mark.asyncio
async def test_list_with_filters(menu_repo):
    await seed(menu_repo, "m1", name="User Admin", permission_code="user:list")
    await seed(menu_repo, "m2", name="Roles", status=Status.DISABLED)
    await seed(menu_repo, "m3", name="Add", kind=MenuKind.BUTTON, visible=False)

    assert [m.id for m in await menu_repo.list(MenuFilter(name="user"))] == ["m1"]
    assert [m.id for m in await menu_repo.list(MenuFilter(status=Status.DISABLED))] == ["m2"]
    assert [m.id for m in await menu_repo.list(MenuFilter(kind=MenuKind.BUTTON))] == ["m3"]
    assert [m.id for m in await menu_repo.list(MenuFilter(visible=False))] == ["m3"]
    assert [m.id for m in await menu_repo.list(MenuFilter(permission_code="USER"))] == ["m1"]
    assert len(await menu_repo.list()) == 3


@pytest.mark.asyncio
async def test_list_name_filter_treats_wildcards_literally(menu_repo):
    await seed(menu_repo, "m1", name="100% done")
    await seed(menu_repo, "m2", name="1000 done")

    assert [m.id for m in await menu_repo.list(MenuFilter(name="0%"))] == ["m1"]


def test_contains_pattern_escapes():
    assert contains_pattern("a_b%c") == "%a\\_b\\%c%"


@pytest.mark.asyncio
async def test_name_exists_is_scoped_to_siblings(menu_repo):
    await seed(menu_repo, "dir", kind=MenuKind.DIRECTORY)
    await seed(menu_repo, "m1", name="List", parent_id="dir")

    assert await menu_repo.name_exists("List", "dir") is True
    assert await menu_repo.name_exists("List", "") is False
    assert await menu_repo.name_exists("List", "dir", exclude_id="m1") is False


@pytest.mark.asyncio
async def test_permission_code_exists(menu_repo):
    await seed(menu_repo, "m1", permission_code="user:add")

    assert await menu_repo.permission_code_exists("user:add") is True
    assert await menu_repo.permission_code_exists("user:add", exclude_id="m1") is False
    assert await menu_repo.permission_code_exists("user:del") is False


@pytest.mark.asyncio
async def test_duplicate_sibling_name_violates_constraint(menu_repo):
    await seed(menu_repo, "m1", name="Same")
    with pytest.raises(IntegrityError):
        await seed(menu_repo, "m2", name="Same")


@pytest.mark.asyncio
async def test_update_partial_fields(menu_repo):
    created = await seed(menu_repo, "m1", route="/old", permission_code="x:y")

    updated = await menu_repo.update(
        "m1", {"route": "/new", "status": Status.DISABLED, "permission_code": ""}
    )

    assert updated.route == "/new"
    assert updated.status is Status.DISABLED
    assert updated.permission_code is None
    assert updated.name == created.name
    assert updated.updated_at >= created.updated_at
    assert await menu_repo.update("missing", {"route": "/x"}) is None


@pytest.mark.asyncio
async def test_update_rejects_unknown_fields(menu_repo):
    await seed(menu_repo, "m1")
    with pytest.raises(ValueError):
        await menu_repo.update("m1", {"id": "other"})


@pytest.mark.asyncio
async def test_delete(menu_repo):
    await seed(menu_repo, "m1")
    assert await menu_repo.delete("m1") is True
    assert await menu_repo.delete("m1") is False


@pytest.mark.asyncio
async def test_batch_set_status_counts_modified_rows(menu_repo):
    await seed(menu_repo, "m1")
    await seed(menu_repo, "m2")

    assert await menu_repo.batch_set_status(["m1", "m2", "ghost"], Status.DISABLED) == 2
    assert await menu_repo.batch_set_status([], Status.ENABLED) == 0
    assert (await menu_repo.get_by_id("m1")).status is Status.DISABLED


@pytest.mark.asyncio
async def test_stats(menu_repo):
    await seed(menu_repo, "d", kind=MenuKind.DIRECTORY)
    await seed(menu_repo, "p", kind=MenuKind.PAGE, status=Status.DISABLED)
    await seed(menu_repo, "b", kind=MenuKind.BUTTON)

    stats = await menu_repo.stats()
    assert (stats.total, stats.enabled, stats.disabled) == (3, 2, 1)
    assert (stats.directory, stats.page, stats.button) == (1, 1, 1)


@pytest.mark.asyncio
async def test_stats_empty(menu_repo):
    stats = await menu_repo.stats()
    assert stats.total == 0
    assert stats.enabled == 0
