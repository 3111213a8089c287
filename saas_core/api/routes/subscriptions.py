from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.auth import TenantContext, require_tenant_context
from saas_core.core.db import get_db_session
from saas_core.core.errors import SubscriptionNotFoundError
from saas_core.core.subscriptions import (
    cancel_subscription,
    check_feature_access,
    get_subscription_status,
    subscribe,
    update_subscription,
)
from saas_core.schemas.subscriptions import (
    FeatureAccessResponse,
    SubscribeRequest,
    SubscriptionResponse,
    SubscriptionUpdateRequest,
)

router = APIRouter(tags=["subscriptions"])


@router.get("/organizations/{organization_id}/subscription", response_model=SubscriptionResponse)
async def read_subscription(
    organization_id: UUID,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> SubscriptionResponse:
    subscription = await get_subscription_status(session, organization_id, context.tenant_id)
    if subscription is None:
        raise SubscriptionNotFoundError()
    # Persist a lazily derived expiration.
    await session.commit()
    return SubscriptionResponse.model_validate(subscription)


@router.put("/organizations/{organization_id}/subscription", response_model=SubscriptionResponse)
async def subscribe_organization(
    organization_id: UUID,
    payload: SubscribeRequest,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> SubscriptionResponse:
    subscription = await subscribe(
        session,
        organization_id,
        payload.tier_id,
        context.tenant_id,
        expiration_date=payload.expiration_date,
    )
    await session.commit()
    return SubscriptionResponse.model_validate(subscription)


@router.patch("/subscriptions/{subscription_id}", response_model=SubscriptionResponse)
async def change_subscription_tier(
    subscription_id: UUID,
    payload: SubscriptionUpdateRequest,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> SubscriptionResponse:
    subscription = await update_subscription(session, subscription_id, payload.tier_id, context.tenant_id)
    await session.commit()
    return SubscriptionResponse.model_validate(subscription)


@router.delete("/subscriptions/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel(
    subscription_id: UUID,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> None:
    await cancel_subscription(session, subscription_id, context.tenant_id)
    await session.commit()


@router.get(
    "/organizations/{organization_id}/features/{feature_name}",
    response_model=FeatureAccessResponse,
)
async def read_feature_access(
    organization_id: UUID,
    feature_name: str,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> FeatureAccessResponse:
    allowed = await check_feature_access(session, organization_id, feature_name, context.tenant_id)
    await session.commit()
    return FeatureAccessResponse(feature=feature_name, allowed=allowed)
