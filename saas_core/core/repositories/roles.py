from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.repositories.base import TenantRepository
from saas_core.models.role import Role


class RoleRepository(TenantRepository[Role]):
    def __init__(self, session: AsyncSession, tenant_id: str | None = None) -> None:
        super().__init__(session=session, model=Role, tenant_id=tenant_id)

    async def get_by_name(self, name: str) -> Role | None:
        await self._apply_rls()
        result = await self.session.execute(
            self._scoped_select().where(Role.name == name)
        )
        return result.scalar_one_or_none()

    async def get_default(self) -> Role | None:
        await self._apply_rls()
        result = await self.session.execute(
            self._scoped_select().where(Role.is_default.is_(True)).limit(1)
        )
        return result.scalar_one_or_none()

    async def upsert(self, name: str, permissions: Sequence[str], is_default: bool) -> Role:
        return await self._upsert(
            {"name": name, "permissions": list(permissions), "is_default": is_default},
            conflict_columns=("tenant_id", "name"),
            update_columns=("permissions", "is_default"),
        )

    async def clear_default(self) -> None:
        await self._apply_rls()
        await self.session.execute(
            update(Role)
            .where(Role.tenant_id == self.tenant_id)
            .values(is_default=False)
        )

    async def delete_by_name(self, name: str) -> bool:
        await self._apply_rls()
        result = await self.session.execute(
            delete(Role)
            .where(Role.tenant_id == self.tenant_id)
            .where(Role.name == name)
        )
        return (result.rowcount or 0) > 0
