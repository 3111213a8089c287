from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.auth import TenantContext, require_tenant_context
from saas_core.core.billing import check_usage_limit
from saas_core.core.db import get_db_session
from saas_core.core.usage import (
    billing_period_start,
    get_aggregated_usage,
    get_all_usage_metrics,
    get_usage,
    record_usage,
    reset_usage,
)
from saas_core.schemas.usage import (
    AggregatedUsageResponse,
    MetricTotalResponse,
    UsageLimitResponse,
    UsagePeriod,
    UsageRecordRequest,
    UsageRecordResponse,
    UsageResetResponse,
    UsageResponse,
)

router = APIRouter(tags=["usage"])


@router.post(
    "/organizations/{organization_id}/usage",
    response_model=UsageRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_usage_record(
    organization_id: UUID,
    payload: UsageRecordRequest,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> UsageRecordResponse:
    record = await record_usage(
        session,
        organization_id,
        context.tenant_id,
        payload.metric_name,
        payload.quantity,
    )
    await session.commit()
    return UsageRecordResponse.model_validate(record)


@router.get("/organizations/{organization_id}/usage", response_model=list[MetricTotalResponse])
async def list_usage_metrics(
    organization_id: UUID,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[MetricTotalResponse]:
    metrics = await get_all_usage_metrics(
        session,
        organization_id,
        context.tenant_id,
        start_date=start_date,
        end_date=end_date,
    )
    return [MetricTotalResponse.model_validate(metric) for metric in metrics]


@router.get("/organizations/{organization_id}/usage/{metric_name}", response_model=UsageResponse)
async def read_usage(
    organization_id: UUID,
    metric_name: str,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> UsageResponse:
    usage = await get_usage(
        session,
        organization_id,
        context.tenant_id,
        metric_name,
        start_date=start_date,
        end_date=end_date,
    )
    return UsageResponse.model_validate(usage)


@router.get(
    "/organizations/{organization_id}/usage/{metric_name}/limit",
    response_model=UsageLimitResponse,
)
async def read_usage_limit(
    organization_id: UUID,
    metric_name: str,
    period: UsagePeriod = "all",
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> UsageLimitResponse:
    period_start = billing_period_start() if period == "month" else None
    result = await check_usage_limit(
        session,
        organization_id,
        context.tenant_id,
        metric_name,
        period_start=period_start,
    )
    await session.commit()
    return UsageLimitResponse.model_validate(result)


@router.delete(
    "/organizations/{organization_id}/usage/{metric_name}",
    response_model=UsageResetResponse,
)
async def reset_usage_records(
    organization_id: UUID,
    metric_name: str,
    before: datetime = Query(...),
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> UsageResetResponse:
    deleted = await reset_usage(session, organization_id, context.tenant_id, metric_name, before)
    await session.commit()
    return UsageResetResponse(deleted=deleted)


@router.get("/usage/{metric_name}/aggregate", response_model=AggregatedUsageResponse)
async def read_aggregated_usage(
    metric_name: str,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> AggregatedUsageResponse:
    usage = await get_aggregated_usage(
        session,
        context.tenant_id,
        metric_name,
        start_date=start_date,
        end_date=end_date,
    )
    return AggregatedUsageResponse.model_validate(usage)
