"""Subscription tiers, organization subscriptions and feature/limit lookups.

A tier bundles a set of feature names with numeric per-metric limits. A
metric that is missing from a tier's ``limits`` is unlimited, reported with
the ``UNLIMITED`` sentinel rather than an error.

Stored subscription status can be stale: an ``active`` subscription whose
expiration date has passed is reported and persisted as ``expired`` the next
time it is read.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.errors import SubscriptionNotFoundError, TierNotFoundError
from saas_core.core.organizations import get_tenant_organization
from saas_core.core.repositories.subscription_tiers import SubscriptionTierRepository
from saas_core.core.repositories.subscriptions import SubscriptionRepository
from saas_core.models.base import utcnow
from saas_core.models.subscription import (
    STATUS_ACTIVE,
    STATUS_CANCELLED,
    STATUS_EXPIRED,
    Subscription,
)
from saas_core.models.subscription_tier import SubscriptionTier

logger = logging.getLogger(__name__)

UNLIMITED = -1


@dataclass(slots=True)
class ResolvedSubscription:
    id: UUID
    organization_id: UUID
    tier_id: UUID
    status: str
    start_date: datetime
    expiration_date: datetime | None
    features: list[str] = field(default_factory=list)
    limits: dict[str, int] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE


@dataclass(slots=True)
class LimitCheck:
    within_limit: bool
    limit: int
    usage: int


def _resolve(subscription: Subscription, tier: SubscriptionTier) -> ResolvedSubscription:
    return ResolvedSubscription(
        id=subscription.id,
        organization_id=subscription.organization_id,
        tier_id=subscription.tier_id,
        status=subscription.status,
        start_date=subscription.start_date,
        expiration_date=subscription.expiration_date,
        features=list(tier.features or []),
        limits=dict(tier.limits or {}),
    )


def _as_utc(value: datetime) -> datetime:
    # Some backends hand timestamps back without tzinfo; they are stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def derive_effective_status(subscription: Subscription, now: datetime) -> str:
    if (
        subscription.status == STATUS_ACTIVE
        and subscription.expiration_date is not None
        and _as_utc(now) > _as_utc(subscription.expiration_date)
    ):
        return STATUS_EXPIRED
    return subscription.status


async def define_tier(
    session: AsyncSession,
    tenant_id: str,
    name: str,
    features: Iterable[str],
    limits: Mapping[str, int],
) -> SubscriptionTier:
    tier = await SubscriptionTierRepository(session, tenant_id).upsert(name, features, limits)
    logger.info("Tier defined tenant=%s tier=%s id=%s", tier.tenant_id, name, tier.id)
    return tier


async def get_tier(session: AsyncSession, tier_id: UUID, tenant_id: str) -> SubscriptionTier | None:
    return await SubscriptionTierRepository(session, tenant_id).get(tier_id)


async def get_tier_by_name(session: AsyncSession, tenant_id: str, name: str) -> SubscriptionTier | None:
    return await SubscriptionTierRepository(session, tenant_id).get_by_name(name)


async def get_tiers(session: AsyncSession, tenant_id: str) -> list[SubscriptionTier]:
    return await SubscriptionTierRepository(session, tenant_id).list()


async def delete_tier(session: AsyncSession, tier_id: UUID, tenant_id: str) -> bool:
    deleted = await SubscriptionTierRepository(session, tenant_id).delete(tier_id)
    if deleted:
        logger.info("Tier deleted tenant=%s id=%s", tenant_id, tier_id)
    return deleted


async def subscribe(
    session: AsyncSession,
    organization_id: UUID,
    tier_id: UUID,
    tenant_id: str,
    expiration_date: datetime | None = None,
) -> ResolvedSubscription:
    await get_tenant_organization(session, organization_id, tenant_id)

    tier = await get_tier(session, tier_id, tenant_id)
    if tier is None:
        raise TierNotFoundError()

    repository = SubscriptionRepository(session, tenant_id)
    subscription = await repository.upsert_for_organization(
        organization_id,
        tier.id,
        status=STATUS_ACTIVE,
        start_date=utcnow(),
        expiration_date=expiration_date,
    )
    await repository.link_organization(organization_id, subscription.id)

    logger.info(
        "Organization subscribed tenant=%s org=%s tier=%s subscription=%s",
        tier.tenant_id,
        organization_id,
        tier.name,
        subscription.id,
    )
    return _resolve(subscription, tier)


async def update_subscription(
    session: AsyncSession,
    subscription_id: UUID,
    new_tier_id: UUID,
    tenant_id: str,
) -> ResolvedSubscription:
    tier = await get_tier(session, new_tier_id, tenant_id)
    if tier is None:
        raise TierNotFoundError()

    subscription = await SubscriptionRepository(session, tenant_id).get(subscription_id)
    if subscription is None:
        raise SubscriptionNotFoundError()

    subscription.tier_id = tier.id
    subscription.start_date = utcnow()
    await session.flush()

    logger.info("Subscription %s moved to tier=%s tenant=%s", subscription_id, tier.name, tier.tenant_id)
    return _resolve(subscription, tier)


async def cancel_subscription(
    session: AsyncSession,
    subscription_id: UUID,
    tenant_id: str | None = None,
) -> None:
    repository = SubscriptionRepository(session, tenant_id)
    subscription = await repository.get(subscription_id)
    if subscription is None:
        raise SubscriptionNotFoundError()

    await repository.set_status(subscription, STATUS_CANCELLED)
    await repository.link_organization(subscription.organization_id, None)
    logger.info("Subscription cancelled id=%s org=%s", subscription_id, subscription.organization_id)


async def get_subscription_status(
    session: AsyncSession,
    organization_id: UUID,
    tenant_id: str,
) -> ResolvedSubscription | None:
    repository = SubscriptionRepository(session, tenant_id)
    subscription = await repository.get_by_organization_id(organization_id)
    if subscription is None:
        return None

    tier = await get_tier(session, subscription.tier_id, tenant_id)
    if tier is None:
        # The tier is gone (or belongs to another tenant); treat as unsubscribed.
        return None

    effective_status = derive_effective_status(subscription, utcnow())
    if effective_status != subscription.status:
        await repository.set_status(subscription, effective_status)
        logger.info("Subscription %s marked %s", subscription.id, effective_status)

    return _resolve(subscription, tier)


async def check_feature_access(
    session: AsyncSession,
    organization_id: UUID,
    feature_name: str,
    tenant_id: str,
) -> bool:
    subscription = await get_subscription_status(session, organization_id, tenant_id)
    if subscription is None or not subscription.is_active:
        return False

    return feature_name in subscription.features


async def check_limit(
    session: AsyncSession,
    organization_id: UUID,
    limit_name: str,
    current_usage: int,
    tenant_id: str,
) -> LimitCheck:
    subscription = await get_subscription_status(session, organization_id, tenant_id)

    # No subscription and an inactive one are deliberately treated alike.
    if subscription is None or not subscription.is_active:
        return LimitCheck(within_limit=False, limit=0, usage=current_usage)

    limit = subscription.limits.get(limit_name)
    if limit is None:
        return LimitCheck(within_limit=True, limit=UNLIMITED, usage=current_usage)

    return LimitCheck(within_limit=current_usage <= limit, limit=limit, usage=current_usage)
