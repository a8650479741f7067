"""Unit tests for identity dependencies."""

from datetime import timedelta

import pytest
from fastapi import HTTPException

from tenantgate.infrastructure.api.dependencies import (
    CurrentUser,
    ensure_tenant_access,
    get_current_user,
    require_platform_user,
)
from tenantgate.infrastructure.auth import jwt_service


@pytest.mark.asyncio
async def test_get_current_user_from_token():
    token = jwt_service.create_access_token(
        user_id="u1", tenant_id="t1", role_ids=["ROL1"], username="alice"
    )

    user = await get_current_user(authorization=f"Bearer {token}")

    assert user.user_id == "u1"
    assert user.tenant_id == "t1"
    assert user.role_ids == ["ROL1"]
    assert user.username == "alice"
    assert user.is_platform is False


@pytest.mark.asyncio
async def test_platform_token():
    token = jwt_service.create_access_token(user_id="root", tenant_id="", role_ids=[])
    user = await get_current_user(authorization=f"Bearer {token}")
    assert user.is_platform is True


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [None, "Token abc", "Bearer", "Bearer not-a-jwt"])
async def test_get_current_user_rejects_bad_headers(header):
    with pytest.raises(HTTPException) as exc:
        await get_current_user(authorization=header)
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_get_current_user_rejects_expired_token():
    token = jwt_service.create_access_token(
        user_id="u1", tenant_id="t1", role_ids=[], expires_delta=timedelta(seconds=-5)
    )
    with pytest.raises(HTTPException) as exc:
        await get_current_user(authorization=f"Bearer {token}")
    assert exc.value.detail == "Token has expired"


@pytest.mark.asyncio
async def test_require_platform_user():
    platform = CurrentUser(user_id="root", tenant_id="")
    assert await require_platform_user(platform) is platform

    with pytest.raises(HTTPException) as exc:
        await require_platform_user(CurrentUser(user_id="u1", tenant_id="t1"))
    assert exc.value.status_code == 403


def test_ensure_tenant_access():
    ensure_tenant_access(CurrentUser(user_id="root", tenant_id=""), "t9")
    ensure_tenant_access(CurrentUser(user_id="u1", tenant_id="t1"), "t1")

    with pytest.raises(HTTPException) as exc:
        ensure_tenant_access(CurrentUser(user_id="u1", tenant_id="t1"), "t2")
    assert exc.value.status_code == 403
