from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.auth import TenantContext, require_tenant_context
from saas_core.core.db import get_db_session
from saas_core.core.errors import TierNotFoundError
from saas_core.core.subscriptions import define_tier, delete_tier, get_tier, get_tiers
from saas_core.schemas.subscriptions import TierDefineRequest, TierResponse

router = APIRouter(prefix="/tiers", tags=["tiers"])


@router.get("", response_model=list[TierResponse])
async def list_tiers(
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[TierResponse]:
    tiers = await get_tiers(session, context.tenant_id)
    return [TierResponse.model_validate(tier) for tier in tiers]


@router.put("", response_model=TierResponse)
async def upsert_tier(
    payload: TierDefineRequest,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> TierResponse:
    tier = await define_tier(session, context.tenant_id, payload.name, payload.features, payload.limits)
    await session.commit()
    return TierResponse.model_validate(tier)


@router.get("/{tier_id}", response_model=TierResponse)
async def read_tier(
    tier_id: UUID,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> TierResponse:
    tier = await get_tier(session, tier_id, context.tenant_id)
    if tier is None:
        raise TierNotFoundError()
    return TierResponse.model_validate(tier)


@router.delete("/{tier_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_tier(
    tier_id: UUID,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> None:
    deleted = await delete_tier(session, tier_id, context.tenant_id)
    if not deleted:
        raise TierNotFoundError()
    await session.commit()
