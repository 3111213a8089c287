from saas_core.schemas.roles import (
    MembershipAssignRequest,
    MembershipResponse,
    PermissionCheckRequest,
    PermissionCheckResponse,
    RoleDefineRequest,
    RolePermissionsUpdateRequest,
    RoleResponse,
)
from saas_core.schemas.subscriptions import (
    FeatureAccessResponse,
    SubscribeRequest,
    SubscriptionResponse,
    SubscriptionUpdateRequest,
    TierDefineRequest,
    TierResponse,
)
from saas_core.schemas.usage import (
    AggregatedUsageResponse,
    MetricTotalResponse,
    OrganizationUsageResponse,
    UsageLimitResponse,
    UsagePeriod,
    UsageRecordRequest,
    UsageRecordResponse,
    UsageResetResponse,
    UsageResponse,
)

__all__ = [
    "RoleDefineRequest",
    "RolePermissionsUpdateRequest",
    "RoleResponse",
    "MembershipAssignRequest",
    "MembershipResponse",
    "PermissionCheckRequest",
    "PermissionCheckResponse",
    "TierDefineRequest",
    "TierResponse",
    "SubscribeRequest",
    "SubscriptionUpdateRequest",
    "SubscriptionResponse",
    "FeatureAccessResponse",
    "UsagePeriod",
    "UsageRecordRequest",
    "UsageRecordResponse",
    "UsageResponse",
    "MetricTotalResponse",
    "OrganizationUsageResponse",
    "AggregatedUsageResponse",
    "UsageLimitResponse",
    "UsageResetResponse",
]
