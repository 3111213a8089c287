from saas_core.models.api_key import ApiKey
from saas_core.models.base import Base, EntityBase, TenantScopedBase
from saas_core.models.membership import Membership
from saas_core.models.organization import Organization
from saas_core.models.role import Role
from saas_core.models.subscription import Subscription
from saas_core.models.subscription_tier import SubscriptionTier
from saas_core.models.usage_record import UsageRecord

__all__ = [
    "Base",
    "EntityBase",
    "TenantScopedBase",
    "ApiKey",
    "Organization",
    "Membership",
    "Role",
    "Subscription",
    "SubscriptionTier",
    "UsageRecord",
]
