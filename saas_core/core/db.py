from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from saas_core.core.config import settings

engine = create_async_engine(
    settings.database_url,
    future=True,
    pool_pre_ping=True,
    echo=settings.database_echo,
)
AsyncSessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


def dialect_name(session: AsyncSession) -> str:
    return session.get_bind().dialect.name


async def apply_rls_tenant_context(session: AsyncSession, tenant_id: str) -> None:
    # set_config is PostgreSQL only; other backends rely on the explicit tenant filters.
    if dialect_name(session) != "postgresql":
        return
    await session.execute(
        text("SELECT set_config('app.current_tenant_id', :tenant_id, true)"),
        {"tenant_id": tenant_id},
    )
