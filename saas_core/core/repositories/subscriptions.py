from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from saas_core.core.db import apply_rls_tenant_context
from saas_core.core.repositories.base import upsert
from saas_core.core.tenancy import validate_tenant_id
from saas_core.models.organization import Organization
from saas_core.models.subscription import Subscription


class SubscriptionRepository:
    """Subscriptions have no tenant column of their own; when a tenant id is
    given every query is scoped through the owning organization."""

    def __init__(self, session: AsyncSession, tenant_id: str | None = None) -> None:
        self.session = session
        self.tenant_id = validate_tenant_id(tenant_id) if tenant_id is not None else None

    async def _apply_rls(self) -> None:
        if self.tenant_id is not None:
            await apply_rls_tenant_context(self.session, self.tenant_id)

    def _scoped_select(self) -> Select[tuple[Subscription]]:
        stmt = select(Subscription)
        if self.tenant_id is not None:
            stmt = stmt.join(Organization, Organization.id == Subscription.organization_id).where(
                Organization.tenant_id == self.tenant_id
            )
        return stmt

    async def get(self, subscription_id: UUID) -> Subscription | None:
        await self._apply_rls()
        result = await self.session.execute(
            self._scoped_select().where(Subscription.id == subscription_id)
        )
        return result.scalar_one_or_none()

    async def get_by_organization_id(self, organization_id: UUID) -> Subscription | None:
        await self._apply_rls()
        result = await self.session.execute(
            self._scoped_select().where(Subscription.organization_id == organization_id)
        )
        return result.scalar_one_or_none()

    async def upsert_for_organization(
        self,
        organization_id: UUID,
        tier_id: UUID,
        status: str,
        start_date: datetime,
        expiration_date: datetime | None,
    ) -> Subscription:
        await self._apply_rls()
        return await upsert(
            self.session,
            Subscription,
            {
                "organization_id": organization_id,
                "tier_id": tier_id,
                "status": status,
                "start_date": start_date,
                "expiration_date": expiration_date,
            },
            conflict_columns=("organization_id",),
            update_columns=("tier_id", "status", "start_date", "expiration_date"),
        )

    async def set_status(self, subscription: Subscription, status: str) -> Subscription:
        subscription.status = status
        await self.session.flush()
        return subscription

    async def link_organization(self, organization_id: UUID, subscription_id: UUID | None) -> None:
        stmt = (
            update(Organization)
            .where(Organization.id == organization_id)
            .values(subscription_id=subscription_id)
        )
        if self.tenant_id is not None:
            stmt = stmt.where(Organization.tenant_id == self.tenant_id)
        await self.session.execute(stmt)
