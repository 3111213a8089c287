from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from saas_core.models import Base, Organization

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def session() -> AsyncGenerator[AsyncSession, None]:
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as db_session:
        yield db_session

    await engine.dispose()


@pytest.fixture
def tenant_id() -> str:
    return "tenant_acme"


@pytest.fixture
def other_tenant_id() -> str:
    return "tenant_globex"


@pytest.fixture
def make_organization(
    session: AsyncSession,
) -> Callable[..., Awaitable[Organization]]:
    async def _make(tenant_id: str, name: str = "Workspace") -> Organization:
        organization = Organization(tenant_id=tenant_id, name=name, owner_id=uuid4())
        session.add(organization)
        await session.flush()
        return organization

    return _make


@pytest_asyncio.fixture
async def organization(
    make_organization: Callable[..., Awaitable[Organization]],
    tenant_id: str,
) -> Organization:
    return await make_organization(tenant_id, name="Acme HQ")
