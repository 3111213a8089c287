from __future__ import annotations

from collections.abc import Iterable, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.repositories.base import TenantRepository
from saas_core.models.subscription_tier import SubscriptionTier


class SubscriptionTierRepository(TenantRepository[SubscriptionTier]):
    def __init__(self, session: AsyncSession, tenant_id: str | None = None) -> None:
        super().__init__(session=session, model=SubscriptionTier, tenant_id=tenant_id)

    async def get_by_name(self, name: str) -> SubscriptionTier | None:
        await self._apply_rls()
        result = await self.session.execute(
            self._scoped_select().where(SubscriptionTier.name == name)
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        name: str,
        features: Iterable[str],
        limits: Mapping[str, int],
    ) -> SubscriptionTier:
        return await self._upsert(
            {"name": name, "features": list(features), "limits": dict(limits)},
            conflict_columns=("tenant_id", "name"),
            update_columns=("features", "limits"),
        )
