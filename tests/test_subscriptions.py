from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from saas_core.core.errors import (
    OrganizationNotFoundError,
    SubscriptionNotFoundError,
    TenantMismatchError,
    TierNotFoundError,
)
from saas_core.core.subscriptions import (
    UNLIMITED,
    cancel_subscription,
    check_feature_access,
    check_limit,
    define_tier,
    delete_tier,
    derive_effective_status,
    get_subscription_status,
    get_tier,
    get_tier_by_name,
    get_tiers,
    subscribe,
    update_subscription,
)
from saas_core.models.subscription import Subscription

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("status", "expiration_date", "expected"),
    [
        ("active", None, "active"),
        ("active", NOW + timedelta(days=1), "active"),
        ("active", NOW - timedelta(seconds=1), "expired"),
        ("active", (NOW - timedelta(days=1)).replace(tzinfo=None), "expired"),
        ("cancelled", NOW - timedelta(days=1), "cancelled"),
        ("expired", NOW - timedelta(days=1), "expired"),
    ],
)
def test_derive_effective_status(status, expiration_date, expected) -> None:
    subscription = SimpleNamespace(status=status, expiration_date=expiration_date)
    assert derive_effective_status(subscription, NOW) == expected


@pytest.mark.asyncio
async def test_define_tier_upserts_by_name(session, tenant_id) -> None:
    first = await define_tier(session, tenant_id, "pro", ["api_access"], {"api_calls": 1000})
    second = await define_tier(session, tenant_id, "pro", ["api_access", "analytics"], {"api_calls": 5000})

    assert second.id == first.id
    assert second.features == ["api_access", "analytics"]
    assert second.limits == {"api_calls": 5000}
    assert [tier.name for tier in await get_tiers(session, tenant_id)] == ["pro"]
    assert (await get_tier_by_name(session, tenant_id, "pro")).id == first.id


@pytest.mark.asyncio
async def test_tiers_are_tenant_scoped(session, tenant_id, other_tenant_id) -> None:
    tier = await define_tier(session, tenant_id, "basic", [], {})

    assert await get_tier(session, tier.id, tenant_id) is not None
    assert await get_tier(session, tier.id, other_tenant_id) is None
    assert await delete_tier(session, tier.id, other_tenant_id) is False
    assert await delete_tier(session, tier.id, tenant_id) is True
    assert await get_tier(session, tier.id, tenant_id) is None


@pytest.mark.asyncio
async def test_subscribe_requires_existing_tier(session, tenant_id, other_tenant_id, organization) -> None:
    foreign_tier = await define_tier(session, other_tenant_id, "pro", [], {})

    with pytest.raises(TierNotFoundError):
        await subscribe(session, organization.id, uuid4(), tenant_id)

    with pytest.raises(TierNotFoundError):
        await subscribe(session, organization.id, foreign_tier.id, tenant_id)


@pytest.mark.asyncio
async def test_subscribe_twice_reuses_the_same_row(session, tenant_id, organization) -> None:
    basic = await define_tier(session, tenant_id, "basic", ["api_access"], {"api_calls": 100})
    pro = await define_tier(session, tenant_id, "pro", ["api_access", "analytics"], {"api_calls": 1000})

    first = await subscribe(session, organization.id, basic.id, tenant_id)
    second = await subscribe(session, organization.id, pro.id, tenant_id)

    assert second.id == first.id
    assert second.tier_id == pro.id
    assert second.status == "active"
    assert second.features == ["api_access", "analytics"]

    rows = await session.scalar(
        select(func.count(Subscription.id)).where(Subscription.organization_id == organization.id)
    )
    assert rows == 1

    await session.refresh(organization)
    assert organization.subscription_id == first.id


@pytest.mark.asyncio
async def test_subscribe_reactivates_cancelled_subscription(session, tenant_id, organization) -> None:
    tier = await define_tier(session, tenant_id, "pro", ["analytics"], {})
    subscription = await subscribe(session, organization.id, tier.id, tenant_id)
    await cancel_subscription(session, subscription.id, tenant_id)

    renewed = await subscribe(session, organization.id, tier.id, tenant_id)

    assert renewed.id == subscription.id
    assert renewed.status == "active"
    assert await check_feature_access(session, organization.id, "analytics", tenant_id) is True


@pytest.mark.asyncio
async def test_lazy_expiration_is_persisted(session, tenant_id, organization) -> None:
    organization_id = organization.id
    tier = await define_tier(session, tenant_id, "trial", ["analytics"], {"api_calls": 10})
    expired_at = datetime.now(timezone.utc) - timedelta(days=1)
    subscription = await subscribe(session, organization.id, tier.id, tenant_id, expiration_date=expired_at)
    assert subscription.status == "active"

    status = await get_subscription_status(session, organization.id, tenant_id)
    assert status is not None
    assert status.status == "expired"

    stored = await session.scalar(select(Subscription.status).where(Subscription.id == subscription.id))
    assert stored == "expired"

    session.expire_all()
    again = await get_subscription_status(session, organization_id, tenant_id)
    assert again.status == "expired"


@pytest.mark.asyncio
async def test_future_expiration_stays_active(session, tenant_id, organization) -> None:
    tier = await define_tier(session, tenant_id, "annual", [], {})
    expires = datetime.now(timezone.utc) + timedelta(days=365)
    await subscribe(session, organization.id, tier.id, tenant_id, expiration_date=expires)

    status = await get_subscription_status(session, organization.id, tenant_id)

    assert status.status == "active"


@pytest.mark.asyncio
async def test_subscription_status_absent_cases(session, tenant_id, other_tenant_id, organization) -> None:
    assert await get_subscription_status(session, organization.id, tenant_id) is None

    tier = await define_tier(session, tenant_id, "pro", [], {})
    await subscribe(session, organization.id, tier.id, tenant_id)

    assert await get_subscription_status(session, organization.id, other_tenant_id) is None


@pytest.mark.asyncio
async def test_subscription_with_missing_tier_reads_as_absent(session, tenant_id, organization) -> None:
    tier = await define_tier(session, tenant_id, "legacy", ["analytics"], {})
    subscription = await subscribe(session, organization.id, tier.id, tenant_id)

    stored = await session.get(Subscription, subscription.id)
    stored.tier_id = uuid4()
    await session.flush()

    assert await get_subscription_status(session, organization.id, tenant_id) is None
    assert await check_feature_access(session, organization.id, "analytics", tenant_id) is False


@pytest.mark.asyncio
async def test_update_subscription_changes_tier(session, tenant_id, organization) -> None:
    basic = await define_tier(session, tenant_id, "basic", ["api_access"], {"api_calls": 100})
    pro = await define_tier(session, tenant_id, "pro", ["api_access", "sso"], {"api_calls": 1000})
    subscription = await subscribe(session, organization.id, basic.id, tenant_id)

    updated = await update_subscription(session, subscription.id, pro.id, tenant_id)

    assert updated.id == subscription.id
    assert updated.tier_id == pro.id
    assert updated.limits == {"api_calls": 1000}
    assert await check_feature_access(session, organization.id, "sso", tenant_id) is True


@pytest.mark.asyncio
async def test_update_subscription_failures(session, tenant_id, other_tenant_id, organization) -> None:
    tier = await define_tier(session, tenant_id, "pro", [], {})
    subscription = await subscribe(session, organization.id, tier.id, tenant_id)

    with pytest.raises(TierNotFoundError):
        await update_subscription(session, subscription.id, uuid4(), tenant_id)

    with pytest.raises(SubscriptionNotFoundError):
        await update_subscription(session, uuid4(), tier.id, tenant_id)

    foreign_tier = await define_tier(session, other_tenant_id, "pro", [], {})
    with pytest.raises(SubscriptionNotFoundError):
        await update_subscription(session, subscription.id, foreign_tier.id, other_tenant_id)


@pytest.mark.asyncio
async def test_cancel_subscription(session, tenant_id, organization) -> None:
    tier = await define_tier(session, tenant_id, "pro", ["analytics"], {"api_calls": 10})
    subscription = await subscribe(session, organization.id, tier.id, tenant_id)

    await cancel_subscription(session, subscription.id)

    status = await get_subscription_status(session, organization.id, tenant_id)
    assert status.status == "cancelled"
    await session.refresh(organization)
    assert organization.subscription_id is None
    assert await check_feature_access(session, organization.id, "analytics", tenant_id) is False

    with pytest.raises(SubscriptionNotFoundError) as exc:
        await cancel_subscription(session, uuid4())
    assert exc.value.code == "SUBSCRIPTION_NOT_FOUND"


@pytest.mark.asyncio
async def test_feature_access_is_exact_membership(session, tenant_id, organization) -> None:
    tier = await define_tier(session, tenant_id, "pro", ["api_access", "analytics"], {"api_calls": 1000})
    await subscribe(session, organization.id, tier.id, tenant_id)

    assert await check_feature_access(session, organization.id, "analytics", tenant_id) is True
    assert await check_feature_access(session, organization.id, "sso", tenant_id) is False
    assert await check_feature_access(session, organization.id, "api_*", tenant_id) is False
    assert await check_feature_access(session, organization.id, "Analytics", tenant_id) is False


@pytest.mark.asyncio
async def test_check_limit(session, tenant_id, organization) -> None:
    tier = await define_tier(session, tenant_id, "pro", [], {"api_calls": 100, "seats": 0})
    await subscribe(session, organization.id, tier.id, tenant_id)

    at_limit = await check_limit(session, organization.id, "api_calls", 100, tenant_id)
    over_limit = await check_limit(session, organization.id, "api_calls", 101, tenant_id)
    zero_cap = await check_limit(session, organization.id, "seats", 1, tenant_id)
    unlimited = await check_limit(session, organization.id, "storage_gb", 10_000, tenant_id)

    assert (at_limit.within_limit, at_limit.limit, at_limit.usage) == (True, 100, 100)
    assert (over_limit.within_limit, over_limit.limit) == (False, 100)
    assert (zero_cap.within_limit, zero_cap.limit) == (False, 0)
    assert (unlimited.within_limit, unlimited.limit, unlimited.usage) == (True, UNLIMITED, 10_000)


@pytest.mark.asyncio
async def test_check_limit_without_active_subscription(session, tenant_id, organization) -> None:
    missing = await check_limit(session, organization.id, "api_calls", 5, tenant_id)
    assert (missing.within_limit, missing.limit, missing.usage) == (False, 0, 5)

    tier = await define_tier(session, tenant_id, "pro", [], {})
    subscription = await subscribe(session, organization.id, tier.id, tenant_id)
    await cancel_subscription(session, subscription.id, tenant_id)

    cancelled = await check_limit(session, organization.id, "storage_gb", 0, tenant_id)
    assert (cancelled.within_limit, cancelled.limit) == (False, 0)


@pytest.mark.asyncio
async def test_subscribe_rejects_foreign_organization(
    session, tenant_id, other_tenant_id, make_organization
) -> None:
    victim = await make_organization(other_tenant_id, "Globex")
    enterprise = await define_tier(session, other_tenant_id, "enterprise", ["sso"], {})
    original = await subscribe(session, victim.id, enterprise.id, other_tenant_id)
    intruder_tier = await define_tier(session, tenant_id, "free", [], {"api_calls": 0})

    with pytest.raises(TenantMismatchError):
        await subscribe(session, victim.id, intruder_tier.id, tenant_id)

    status = await get_subscription_status(session, victim.id, other_tenant_id)
    assert status.id == original.id
    assert status.tier_id == enterprise.id
    assert await check_feature_access(session, victim.id, "sso", other_tenant_id) is True


@pytest.mark.asyncio
async def test_subscribe_rejects_unknown_organization(session, tenant_id) -> None:
    tier = await define_tier(session, tenant_id, "pro", [], {})

    with pytest.raises(OrganizationNotFoundError):
        await subscribe(session, uuid4(), tier.id, tenant_id)
