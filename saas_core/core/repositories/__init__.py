from saas_core.core.repositories.base import TenantContextMissingError, TenantRepository, upsert
from saas_core.core.repositories.memberships import MembershipRepository
from saas_core.core.repositories.roles import RoleRepository
from saas_core.core.repositories.subscription_tiers import SubscriptionTierRepository
from saas_core.core.repositories.subscriptions import SubscriptionRepository
from saas_core.core.repositories.usage_records import UsageRecordRepository

__all__ = [
    "TenantContextMissingError",
    "TenantRepository",
    "upsert",
    "MembershipRepository",
    "RoleRepository",
    "SubscriptionRepository",
    "SubscriptionTierRepository",
    "UsageRecordRepository",
]
