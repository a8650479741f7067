"""Pytest configuration for all tests."""

from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tenantgate.infrastructure.auth.jwt_service import jwt_service
from tenantgate.infrastructure.persistence import models  # noqa: F401
from tenantgate.infrastructure.persistence.database import Base


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database dependency."""
    from tenantgate.infrastructure.api.app import app
    from tenantgate.infrastructure.persistence.database import get_db_session

    app.dependency_overrides[get_db_session] = lambda: db_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Return a factory issuing access tokens for arbitrary identities."""

    def _make(user_id: str = "u-admin", tenant_id: str = "", role_ids: list[str] | None = None):
        return jwt_service.create_access_token(
            user_id=user_id,
            tenant_id=tenant_id,
            role_ids=role_ids or [],
        )

    return _make


@pytest.fixture
def platform_headers(make_token) -> dict[str, str]:
    """Authorization headers of a platform-scope caller."""
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def tenant_headers(make_token) -> dict[str, str]:
    """Authorization headers of a caller from tenant ``t1``."""
    return {"Authorization": f"Bearer {make_token(user_id='u-t1', tenant_id='t1')}"}
