from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from saas_core.core.repositories.base import TenantRepository
from saas_core.models.usage_record import UsageRecord


def _within_window(
    stmt: Select,
    start_date: datetime | None,
    end_date: datetime | None,
) -> Select:
    if start_date is not None:
        stmt = stmt.where(UsageRecord.timestamp >= start_date)
    if end_date is not None:
        stmt = stmt.where(UsageRecord.timestamp <= end_date)
    return stmt


class UsageRecordRepository(TenantRepository[UsageRecord]):
    def __init__(self, session: AsyncSession, tenant_id: str | None = None) -> None:
        super().__init__(session=session, model=UsageRecord, tenant_id=tenant_id)

    async def list_for_metric(
        self,
        organization_id: UUID,
        metric_name: str,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[UsageRecord]:
        await self._apply_rls()
        stmt = self._scoped_select().where(
            UsageRecord.organization_id == organization_id,
            UsageRecord.metric_name == metric_name,
        )
        stmt = _within_window(stmt, start_date, end_date).order_by(UsageRecord.timestamp)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def totals_by_organization(
        self,
        metric_name: str,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[tuple[UUID, int]]:
        await self._apply_rls()
        stmt = (
            select(UsageRecord.organization_id, func.sum(UsageRecord.quantity))
            .where(UsageRecord.tenant_id == self.tenant_id)
            .where(UsageRecord.metric_name == metric_name)
        )
        stmt = (
            _within_window(stmt, start_date, end_date)
            .group_by(UsageRecord.organization_id)
            .order_by(func.min(UsageRecord.timestamp))
        )
        result = await self.session.execute(stmt)
        return [(organization_id, int(total or 0)) for organization_id, total in result.all()]

    async def totals_by_metric(
        self,
        organization_id: UUID,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[tuple[str, int]]:
        await self._apply_rls()
        stmt = (
            select(UsageRecord.metric_name, func.sum(UsageRecord.quantity))
            .where(UsageRecord.tenant_id == self.tenant_id)
            .where(UsageRecord.organization_id == organization_id)
        )
        stmt = (
            _within_window(stmt, start_date, end_date)
            .group_by(UsageRecord.metric_name)
            .order_by(func.min(UsageRecord.timestamp))
        )
        result = await self.session.execute(stmt)
        return [(metric_name, int(total or 0)) for metric_name, total in result.all()]

    async def delete_until(
        self,
        organization_id: UUID,
        metric_name: str,
        before_date: datetime,
    ) -> int:
        await self._apply_rls()
        result = await self.session.execute(
            delete(UsageRecord)
            .where(UsageRecord.tenant_id == self.tenant_id)
            .where(UsageRecord.organization_id == organization_id)
            .where(UsageRecord.metric_name == metric_name)
            .where(UsageRecord.timestamp <= before_date)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
