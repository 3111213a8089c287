"""Quota and feature gates for host application routes.

``enforce_usage_limit(metric)`` and ``require_feature(feature)`` are FastAPI
dependency factories meant for the routes of the application embedding this
package, for example::

    @router.post("/organizations/{organization_id}/reports")
    async def create_report(
        organization_id: UUID,
        quota: UsageLimitCheck = Depends(enforce_usage_limit("reports")),
        _: None = Depends(require_feature("analytics")),
    ): ...

Both read ``organization_id`` from the path and the tenant from
``require_tenant_context``. The package's own usage routes do not use them:
``POST .../usage`` takes its metric from the body, and recording usage is not
gated by the quota it measures.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.auth import TenantContext, require_tenant_context
from saas_core.core.db import get_db_session
from saas_core.core.errors import FeatureNotAvailableError, UsageLimitExceededError
from saas_core.core.subscriptions import UNLIMITED, check_feature_access, check_limit
from saas_core.core.usage import get_current_usage

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UsageLimitCheck:
    within_limit: bool
    limit: int
    usage: int
    remaining: int

    @property
    def unlimited(self) -> bool:
        return self.limit == UNLIMITED


async def check_usage_limit(
    session: AsyncSession,
    organization_id: UUID,
    tenant_id: str,
    metric_name: str,
    period_start: datetime | None = None,
) -> UsageLimitCheck:
    usage = await get_current_usage(
        session,
        organization_id,
        tenant_id,
        metric_name,
        period_start=period_start,
    )
    limit_check = await check_limit(session, organization_id, metric_name, usage, tenant_id)

    remaining = UNLIMITED if limit_check.limit == UNLIMITED else max(0, limit_check.limit - usage)
    return UsageLimitCheck(
        within_limit=limit_check.within_limit,
        limit=limit_check.limit,
        usage=usage,
        remaining=remaining,
    )


def enforce_usage_limit(metric_name: str) -> Callable[..., Awaitable[UsageLimitCheck]]:
    """Route dependency rejecting requests from organizations over quota."""

    async def _enforce(
        organization_id: UUID,
        context: TenantContext = Depends(require_tenant_context),
        session: AsyncSession = Depends(get_db_session),
    ) -> UsageLimitCheck:
        result = await check_usage_limit(session, organization_id, context.tenant_id, metric_name)
        await session.commit()
        if not result.within_limit:
            logger.info(
                "Usage limit reached tenant=%s org=%s metric=%s usage=%d limit=%d",
                context.tenant_id,
                organization_id,
                metric_name,
                result.usage,
                result.limit,
            )
            raise UsageLimitExceededError(
                f"Usage limit reached for {metric_name}",
                details={"limit": result.limit, "usage": result.usage},
            )
        return result

    return _enforce


def require_feature(feature_name: str) -> Callable[..., Awaitable[None]]:
    async def _require(
        organization_id: UUID,
        context: TenantContext = Depends(require_tenant_context),
        session: AsyncSession = Depends(get_db_session),
    ) -> None:
        allowed = await check_feature_access(session, organization_id, feature_name, context.tenant_id)
        await session.commit()
        if not allowed:
            raise FeatureNotAvailableError(f"Feature {feature_name} is not included in the current subscription")

    return _require
