from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Final
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.organizations import get_tenant_organization
from saas_core.core.repositories.usage_records import UsageRecordRepository
from saas_core.models.base import utcnow
from saas_core.models.usage_record import UsageRecord

logger = logging.getLogger(__name__)

EPOCH: Final = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(slots=True)
class UsageTotals:
    total: int
    records: list[UsageRecord] = field(default_factory=list)


@dataclass(slots=True)
class OrganizationUsage:
    organization_id: UUID
    total: int


@dataclass(slots=True)
class AggregatedUsage:
    total: int
    by_organization: list[OrganizationUsage] = field(default_factory=list)


@dataclass(slots=True)
class MetricTotal:
    metric_name: str
    total: int


def billing_period_start(now: datetime | None = None) -> datetime:
    """First instant of the UTC calendar month containing ``now``."""
    current = (now or utcnow()).astimezone(timezone.utc)
    return current.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


async def record_usage(
    session: AsyncSession,
    organization_id: UUID,
    tenant_id: str,
    metric_name: str,
    quantity: int,
) -> UsageRecord:
    await get_tenant_organization(session, organization_id, tenant_id)
    record = await UsageRecordRepository(session, tenant_id).create(
        organization_id=organization_id,
        metric_name=metric_name,
        quantity=quantity,
        timestamp=utcnow(),
    )
    logger.debug(
        "Usage recorded tenant=%s org=%s metric=%s quantity=%s",
        record.tenant_id,
        organization_id,
        metric_name,
        quantity,
    )
    return record


async def get_usage(
    session: AsyncSession,
    organization_id: UUID,
    tenant_id: str,
    metric_name: str,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> UsageTotals:
    records = await UsageRecordRepository(session, tenant_id).list_for_metric(
        organization_id,
        metric_name,
        start_date=start_date,
        end_date=end_date,
    )
    return UsageTotals(total=sum(record.quantity for record in records), records=records)


async def get_current_usage(
    session: AsyncSession,
    organization_id: UUID,
    tenant_id: str,
    metric_name: str,
    period_start: datetime | None = None,
) -> int:
    usage = await get_usage(
        session,
        organization_id,
        tenant_id,
        metric_name,
        start_date=period_start or EPOCH,
    )
    return usage.total


async def get_aggregated_usage(
    session: AsyncSession,
    tenant_id: str,
    metric_name: str,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> AggregatedUsage:
    rows = await UsageRecordRepository(session, tenant_id).totals_by_organization(
        metric_name,
        start_date=start_date,
        end_date=end_date,
    )
    by_organization = [
        OrganizationUsage(organization_id=organization_id, total=total)
        for organization_id, total in rows
    ]
    return AggregatedUsage(
        total=sum(item.total for item in by_organization),
        by_organization=by_organization,
    )


async def get_all_usage_metrics(
    session: AsyncSession,
    organization_id: UUID,
    tenant_id: str,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> list[MetricTotal]:
    rows = await UsageRecordRepository(session, tenant_id).totals_by_metric(
        organization_id,
        start_date=start_date,
        end_date=end_date,
    )
    return [MetricTotal(metric_name=metric_name, total=total) for metric_name, total in rows]


async def reset_usage(
    session: AsyncSession,
    organization_id: UUID,
    tenant_id: str,
    metric_name: str,
    before_date: datetime,
) -> int:
    deleted = await UsageRecordRepository(session, tenant_id).delete_until(
        organization_id,
        metric_name,
        before_date,
    )
    # Records are removed, not archived.
    logger.warning(
        "Usage reset tenant=%s org=%s metric=%s before=%s deleted=%d",
        tenant_id,
        organization_id,
        metric_name,
        before_date.isoformat(),
        deleted,
    )
    return deleted
